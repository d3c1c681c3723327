from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union

Params = Union[Mapping[str, Any], Sequence[Any], None]


class QuerySession(Protocol):
    """
    The statement interface data-access classes rely on.

    DbSession satisfies it; anything accepting `$n` statements with a
    positional value list does too.
    """

    def execute(self, sql: str, params: Params = None) -> int:
        """Execute a non-SELECT statement and return affected row count."""
        ...

    def fetch_one(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        """Execute a statement expected to return 0 or 1 row."""
        ...

    def fetch_all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        """Execute a SELECT returning multiple rows."""
        ...


def where_clause(sql_filter: str) -> str:
    """`WHERE <filter>` or nothing at all for an empty filter."""
    return f"WHERE {sql_filter}" if sql_filter else ""
