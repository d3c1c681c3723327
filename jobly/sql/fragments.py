from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import NoFieldsToUpdate
from .helpers import quote_identifier

ASSIGNMENT_SEPARATOR = ", "
PREDICATE_SEPARATOR = " AND "

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class Fragment:
    """
    An ordered list of SQL clauses plus the values bound to their placeholders.

    Every clause holds exactly one `$n` placeholder; clause i binds values[i]
    and is numbered i + 1. Render with `sql`, then splice into a statement
    and pass `values` alongside it.
    """

    clauses: tuple[str, ...]
    values: tuple[Any, ...]
    separator: str

    @property
    def sql(self) -> str:
        return self.separator.join(self.clauses)

    # Names used by the data-access layer for the two statement shapes
    @property
    def set_cols(self) -> str:
        return self.sql

    @property
    def sql_filter(self) -> str:
        return self.sql

    def placeholders(self) -> tuple[int, ...]:
        return tuple(
            int(n) for clause in self.clauses for n in _PLACEHOLDER_RE.findall(clause)
        )

    def __len__(self) -> int:
        return len(self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)


class FragmentBuilder:
    """
    Accumulates clauses and values in a single step so they cannot drift apart.

    One builder is created per call; nothing is shared between calls.
    """

    def __init__(self, separator: str) -> None:
        self.separator = separator
        self._clauses: list[str] = []
        self._values: list[Any] = []

    @property
    def next_index(self) -> int:
        return len(self._values) + 1

    def emit(self, template: str, value: Any) -> None:
        """
        Append one clause and its value.

        `template` must contain a single `{}` which receives `$n`.
        """
        self._clauses.append(template.format(f"${self.next_index}"))
        self._values.append(value)

    def build(self) -> Fragment:
        return Fragment(tuple(self._clauses), tuple(self._values), self.separator)


def build_update_fragment(
    payload: Mapping[str, Any],
    field_map: Mapping[str, str] | None = None,
) -> Fragment:
    """
    Build the SET list of a partial UPDATE.

    Keys are processed in the payload's own order; each key is translated to its
    storage column through `field_map` (falling back to the key itself).
    `None` values are kept: setting a column to NULL is a valid update.

    Example:
        >>> frag = build_update_fragment(
        ...     {"firstName": "Nathan", "age": 23}, {"firstName": "first_name"}
        ... )
        >>> frag.set_cols
        '"first_name"=$1, "age"=$2'
        >>> frag.values
        ('Nathan', 23)

    Raises:
        NoFieldsToUpdate: If payload is empty
        ValueError: If a resolved column name is not a safe identifier
    """
    if not payload:
        raise NoFieldsToUpdate()

    field_map = field_map or {}
    builder = FragmentBuilder(ASSIGNMENT_SEPARATOR)
    for key, value in payload.items():
        column = quote_identifier(field_map.get(key, key), "column")
        builder.emit(column + "={}", value)
    return builder.build()
