from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Sequence, TypeVar, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import DbQueryError
from .helpers import bind_positional, parse_sql_operation
from .metrics import observe_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = Union[Mapping[str, Any], Sequence[Any], None]


class DbSession:
    """
    Transactional wrapper around a SQLAlchemy Engine connection.

    Statements may use named binds (`:name` + a mapping) or positional
    placeholders (`$1..$n` + a sequence), so fragments built by
    `build_update_fragment` / `build_predicate_fragment` can be executed as is.

    Use as:
        with DbSession(engine) as session:
            session.execute('UPDATE companies SET "name"=$1 WHERE handle = $2', ["New", "acme"])
            row = session.fetch_one("SELECT * FROM companies WHERE handle = $1", ["acme"])
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    self._tx.commit()
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def _run(self, sql: str, params: Params, consume: Callable[[CursorResult], T]) -> T:
        conn = self._connection()

        if params is None:
            statement, bound = sql, {}
        elif isinstance(params, Mapping):
            statement, bound = sql, dict(params)
        else:
            statement, bound = bind_positional(sql, params)

        table, op_type = parse_sql_operation(sql)
        start_time = time.monotonic()
        status = "success"
        try:
            result = conn.execute(text(statement), bound)
            try:
                return consume(result)
            finally:
                result.close()
        except SQLAlchemyError as exc:
            status = "error"
            logger.warning("%s on %s failed: %s", op_type, table, exc.__class__.__name__)
            raise DbQueryError(str(exc)) from exc
        except Exception:
            status = "error"
            raise
        finally:
            observe_query(table, op_type, status, time.monotonic() - start_time)

    def execute(self, sql: str, params: Params = None) -> int:
        """
        Execute a non-SELECT statement and return affected row count.
        """

        def _rowcount(result: CursorResult) -> int:
            if result.rowcount is None:
                raise RuntimeError(
                    "execute() received None rowcount for statement. "
                    "This may indicate a DDL statement or unsupported operation type."
                )
            return int(result.rowcount)

        return self._run(sql, params, _rowcount)

    def fetch_one(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        """
        Execute a statement expected to return 0 or 1 row. Raises if more than one row.
        Also used for `... RETURNING` statements.
        """

        def _one(result: CursorResult) -> dict[str, Any] | None:
            row = result.mappings().one_or_none()
            if row is None:
                return None
            return dict(row)

        return self._run(sql, params, _one)

    def fetch_all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        """
        Execute a SELECT expected to return multiple rows.
        """
        return self._run(sql, params, lambda result: [dict(row) for row in result.mappings()])
