from .config import DbConfig
from .sql import DbSession, build_predicate_fragment, build_update_fragment

__all__ = ["DbConfig", "DbSession", "build_update_fragment", "build_predicate_fragment"]
