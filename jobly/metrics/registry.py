from __future__ import annotations

from prometheus_client import Counter, Histogram

DB_QUERY_TOTAL = Counter(
    "jobly_db_query_total",
    "Statements executed through DbSession",
    ["table", "op_type", "status"],
)

DB_QUERY_LATENCY_SECONDS = Histogram(
    "jobly_db_query_latency_seconds",
    "Statement execution latency in seconds",
    ["table", "op_type"],
)
