from __future__ import annotations

from ..metrics.registry import DB_QUERY_LATENCY_SECONDS, DB_QUERY_TOTAL


def observe_query(table: str, op_type: str, status: str, latency_s: float) -> None:
    """Record one executed statement."""
    DB_QUERY_TOTAL.labels(table=table, op_type=op_type, status=status).inc()
    DB_QUERY_LATENCY_SECONDS.labels(table=table, op_type=op_type).observe(latency_s)
