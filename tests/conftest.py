from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class RecordingSession:
    """
    Stand-in for DbSession that records statements and replays canned results.

    Each call pops the next queued response; with the queue empty, fetch_one
    returns None, fetch_all returns [] and execute returns 0.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self._responses: deque[Any] = deque()

    def queue(self, *responses: Any) -> "RecordingSession":
        self._responses.extend(responses)
        return self

    def _next(self, default: Any) -> Any:
        return self._responses.popleft() if self._responses else default

    def execute(self, sql: str, params: Any = None) -> int:
        self.calls.append(("execute", sql, params))
        return self._next(0)

    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        self.calls.append(("fetch_one", sql, params))
        return self._next(None)

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", sql, params))
        return self._next([])

    @property
    def last_sql(self) -> str:
        return self.calls[-1][1]

    @property
    def last_params(self) -> Any:
        return self.calls[-1][2]


@pytest.fixture
def fake_session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture
def sqlite_engine(tmp_path) -> Iterator[Engine]:
    """
    File-backed SQLite engine with a minimal companies table.

    SQLite accepts double-quoted identifiers, so update/predicate fragments run
    unchanged (ILIKE aside).
    """
    eng = create_engine(f"sqlite:///{tmp_path / 'jobly.db'}")
    with eng.begin() as conn:
        conn.exec_driver_sql(
            """
            CREATE TABLE companies (
                handle VARCHAR(25) PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                num_employees INTEGER,
                logo_url TEXT
            )
            """
        )
    yield eng
    eng.dispose()
