from __future__ import annotations

import re
from typing import Any, Sequence

# PostgreSQL truncates identifiers at NAMEDATALEN - 1
MAX_IDENTIFIER_LENGTH = 63

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_PLACEHOLDER_RE = re.compile(r"\$(\d+)\b")
_OPERATION_RE = re.compile(
    r"^\s*(?:"
    r"(?P<insert>INSERT)\s+INTO\s+(?P<insert_table>[\"`]?\w+[\"`]?)"
    r"|(?P<update>UPDATE)\s+(?P<update_table>[\"`]?\w+[\"`]?)"
    r"|(?P<delete>DELETE)\s+FROM\s+(?P<delete_table>[\"`]?\w+[\"`]?)"
    r"|(?P<select>SELECT)\b.*?\bFROM\s+(?P<select_table>[\"`]?\w+[\"`]?)"
    r")",
    re.IGNORECASE | re.DOTALL,
)


def validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    Fragments bind every value as a parameter, but column names are written
    into the statement text. Restricting them to alphanumeric + underscore means
    a payload key that falls through to the column name can never smuggle SQL.

    Args:
        name: The identifier to validate
        identifier_type: Description of the identifier (for error messages)

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        TypeError: If identifier is not a string
        ValueError: If identifier contains unsafe characters or is invalid

    Example:
        >>> validate_identifier("num_employees", "column")
        'num_employees'
        >>> validate_identifier('name" = name OR "1', "column")
        ValueError: Invalid column 'name" = name OR "1': ...
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER_RE.match(name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"{identifier_type} {name!r} exceeds the {MAX_IDENTIFIER_LENGTH}-character identifier limit"
        )

    return name


def quote_identifier(name: str, identifier_type: str = "identifier") -> str:
    """Validate `name` and wrap it in double quotes."""
    return f'"{validate_identifier(name, identifier_type)}"'


def bind_positional(sql: str, values: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """
    Rewrite `$1..$n` placeholders into named binds `:p1..:pn`.

    SQLAlchemy's text() only understands named parameters, while fragments are
    numbered positionally. The same position may be referenced more than once.

    Raises:
        ValueError: If a placeholder refers to a position outside 1..len(values)
    """
    count = len(values)

    def _replace(match: re.Match[str]) -> str:
        position = int(match.group(1))
        if position < 1 or position > count:
            raise ValueError(
                f"Placeholder ${position} has no bound value ({count} value(s) supplied)"
            )
        return f":p{position}"

    rewritten = _PLACEHOLDER_RE.sub(_replace, sql)
    params = {f"p{i}": value for i, value in enumerate(values, start=1)}
    return rewritten, params


def parse_sql_operation(sql: str) -> tuple[str, str]:
    """
    Best-effort classification of a statement into (table, op_type).

    Only used for metric labels; anything unrecognized is ("unknown", "unknown").
    """
    match = _OPERATION_RE.match(sql)
    if match is None:
        return "unknown", "unknown"

    for op_type in ("insert", "update", "delete", "select"):
        if match.group(op_type):
            table = match.group(f"{op_type}_table").strip('"`').lower()
            return table, op_type

    return "unknown", "unknown"
