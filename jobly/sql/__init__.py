from .filters import FilterRule, FilterRules, Operator, RangeConstraint, build_predicate_fragment, contains
from .fragments import Fragment, build_update_fragment
from .helpers import bind_positional, quote_identifier, validate_identifier
from .session import DbSession

__all__ = [
    "DbSession",
    "Fragment",
    "build_update_fragment",
    "build_predicate_fragment",
    "FilterRule",
    "FilterRules",
    "Operator",
    "RangeConstraint",
    "contains",
    "bind_positional",
    "quote_identifier",
    "validate_identifier",
]
