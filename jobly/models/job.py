from __future__ import annotations

import logging
from typing import Any, Mapping

from ..errors import BadRequestError, NotFoundError
from ..sql.filters import FilterRule, FilterRules, Operator, build_predicate_fragment, contains
from ..sql.fragments import build_update_fragment
from .base import QuerySession, where_clause

logger = logging.getLogger(__name__)

# hasEquity=True means equity strictly greater than zero
JOB_FILTER_RULES = FilterRules(
    {
        "title": FilterRule("title", Operator.ILIKE, transform=contains),
        "minSalary": FilterRule("salary", Operator.GTE),
        "hasEquity": FilterRule("equity", Operator.GT, gate_threshold=0),
    }
)

# Set when the job is created; never changed by update()
IMMUTABLE_JOB_FIELDS = frozenset({"id", "companyHandle"})

_JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


class Jobs:
    """
    Data access for the jobs table.

    Rows are returned as { id, title, salary, equity, companyHandle }.
    """

    def __init__(self, session: QuerySession) -> None:
        self.session = session

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        logger.debug("Inserting job")
        return self.session.fetch_one(
            f"""INSERT INTO jobs (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {_JOB_COLUMNS}""",
            [data["title"], data.get("salary"), data.get("equity"), data["companyHandle"]],
        )

    def find_all(self, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        List jobs ordered by title, optionally narrowed by
        `title` (substring, case-insensitive), `minSalary`, `hasEquity`.

        Raises:
            InvalidFilterField: For any other filter key
        """
        fragment = build_predicate_fragment(filters or {}, JOB_FILTER_RULES)
        logger.debug("Searching jobs with %d predicate(s)", len(fragment))
        return self.session.fetch_all(
            f"""SELECT {_JOB_COLUMNS}
                FROM jobs
                {where_clause(fragment.sql_filter)}
                ORDER BY title, id""",
            fragment.values,
        )

    def get(self, job_id: int) -> dict[str, Any]:
        job = self.session.fetch_one(
            f"SELECT {_JOB_COLUMNS} FROM jobs WHERE id = $1",
            [job_id],
        )
        if job is None:
            logger.info("Job %s not found", job_id)
            raise NotFoundError(f"No job: {job_id}")
        return job

    def update(self, job_id: int, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partial update. Data can include: { title, salary, equity }

        Raises:
            BadRequestError: If data tries to change id or companyHandle
            NoFieldsToUpdate: If data is empty
            NotFoundError: If no such job
        """
        forbidden = sorted(IMMUTABLE_JOB_FIELDS.intersection(data))
        if forbidden:
            raise BadRequestError(f"Cannot update job field(s): {', '.join(forbidden)}")

        fragment = build_update_fragment(data)
        id_idx = len(fragment.values) + 1

        job = self.session.fetch_one(
            f"""UPDATE jobs
                SET {fragment.set_cols}
                WHERE id = ${id_idx}
                RETURNING {_JOB_COLUMNS}""",
            [*fragment.values, job_id],
        )
        if job is None:
            logger.info("Job %s not found for update", job_id)
            raise NotFoundError(f"No job: {job_id}")
        return job

    def remove(self, job_id: int) -> None:
        removed = self.session.fetch_one(
            "DELETE FROM jobs WHERE id = $1 RETURNING id",
            [job_id],
        )
        if removed is None:
            logger.info("Job %s not found for delete", job_id)
            raise NotFoundError(f"No job: {job_id}")
