from .company import COMPANY_FIELD_MAP, COMPANY_FILTER_RULES, Companies
from .job import JOB_FILTER_RULES, Jobs
from .user import USER_FIELD_MAP, Users

__all__ = [
    "Companies",
    "Jobs",
    "Users",
    "COMPANY_FIELD_MAP",
    "COMPANY_FILTER_RULES",
    "JOB_FILTER_RULES",
    "USER_FIELD_MAP",
]
