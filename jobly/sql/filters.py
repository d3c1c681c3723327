from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from ..errors import InvalidFilterField, InvalidRange
from .fragments import PREDICATE_SEPARATOR, Fragment, FragmentBuilder
from .helpers import quote_identifier


class Operator(str, Enum):
    EQ = "="
    ILIKE = "ILIKE"
    GTE = ">="
    LTE = "<="
    GT = ">"


def contains(value: Any) -> str:
    """Wrap a value in wildcards for a substring match."""
    return f"%{value}%"


@dataclass(frozen=True)
class FilterRule:
    """
    How one recognized filter name turns into a predicate.

    column: storage column compared against
    operator: comparison operator
    transform: applied to the value before binding (e.g. `contains`)
    gate_threshold: when set, the filter is boolean-gated: only the literal True
        emits `column <operator> threshold` with the threshold bound. False and
        any other value, truthy non-bools such as 1 included, emit nothing;
        callers are expected to pass schema-validated booleans.
    """

    column: str
    operator: Operator = Operator.EQ
    transform: Optional[Callable[[Any], Any]] = None
    gate_threshold: Any = None

    @property
    def is_gated(self) -> bool:
        return self.gate_threshold is not None

    def template(self) -> str:
        return f"{quote_identifier(self.column, 'column')} {self.operator.value} {{}}"

    def bind_value(self, value: Any) -> Any:
        if self.is_gated:
            return self.gate_threshold
        if self.transform is not None:
            return self.transform(value)
        return value


@dataclass(frozen=True)
class RangeConstraint:
    """Two filter names whose values must satisfy lower <= upper when both are given."""

    lower: str
    upper: str

    def check(self, filters: Mapping[str, Any]) -> None:
        low = filters.get(self.lower)
        high = filters.get(self.upper)
        if low is None or high is None:
            return
        if low > high:
            raise InvalidRange(self.lower, self.upper, low, high)


class FilterRules:
    """
    The declarative filter table for one entity.

    Iteration order of `rules` is the order predicates are emitted in.
    """

    def __init__(
        self,
        rules: Mapping[str, FilterRule],
        constraints: Iterable[RangeConstraint] = (),
    ) -> None:
        self.rules: dict[str, FilterRule] = dict(rules)
        self.constraints: tuple[RangeConstraint, ...] = tuple(constraints)

        for name, rule in self.rules.items():
            # Columns are checked once, when the table is declared
            quote_identifier(rule.column, f"column for filter {name!r}")
        for constraint in self.constraints:
            for name in (constraint.lower, constraint.upper):
                if name not in self.rules:
                    raise ValueError(f"Range constraint refers to undeclared filter {name!r}")

    def __contains__(self, name: object) -> bool:
        return name in self.rules

    def __iter__(self):
        return iter(self.rules.items())

    def names(self) -> tuple[str, ...]:
        return tuple(self.rules)


def build_predicate_fragment(filters: Mapping[str, Any], rules: FilterRules) -> Fragment:
    """
    Build the conjunctive WHERE body for a search.

    Validation runs first (unknown keys, then range constraints), so either the
    whole fragment is returned or an error is raised. Clauses follow the rules
    table's declared order. A key whose value is None is treated as absent.

    An empty mapping yields an empty fragment; callers must then omit WHERE.

    Example:
        >>> frag = build_predicate_fragment(
        ...     {"name": "ab", "minEmployees": 100}, COMPANY_FILTER_RULES
        ... )
        >>> frag.sql_filter
        '"name" ILIKE $1 AND "num_employees" >= $2'
        >>> frag.values
        ('%ab%', 100)

    Raises:
        InvalidFilterField: If a key is not declared in `rules`
        InvalidRange: If a range constraint is violated
    """
    for key in filters:
        if key not in rules:
            raise InvalidFilterField(key)

    for constraint in rules.constraints:
        constraint.check(filters)

    builder = FragmentBuilder(PREDICATE_SEPARATOR)
    for name, rule in rules:
        value = filters.get(name)
        if value is None:
            continue
        if rule.is_gated and value is not True:
            continue
        builder.emit(rule.template(), rule.bind_value(value))
    return builder.build()
