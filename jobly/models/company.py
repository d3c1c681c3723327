from __future__ import annotations

import logging
from typing import Any, Mapping

from ..errors import BadRequestError, NotFoundError
from ..sql.filters import FilterRule, FilterRules, Operator, RangeConstraint, build_predicate_fragment, contains
from ..sql.fragments import build_update_fragment
from .base import QuerySession, where_clause

logger = logging.getLogger(__name__)

COMPANY_FIELD_MAP: Mapping[str, str] = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

COMPANY_FILTER_RULES = FilterRules(
    {
        "name": FilterRule("name", Operator.ILIKE, transform=contains),
        "minEmployees": FilterRule("num_employees", Operator.GTE),
        "maxEmployees": FilterRule("num_employees", Operator.LTE),
    },
    constraints=[RangeConstraint("minEmployees", "maxEmployees")],
)

_COMPANY_COLUMNS = 'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'


class Companies:
    """
    Data access for the companies table.

    Rows are returned with camelCase keys:
        { handle, name, description, numEmployees, logoUrl }
    """

    def __init__(self, session: QuerySession) -> None:
        self.session = session

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a company and return it.

        Raises:
            BadRequestError: If a company with the same handle exists
        """
        handle = data["handle"]
        duplicate = self.session.fetch_one(
            "SELECT handle FROM companies WHERE handle = $1",
            [handle],
        )
        if duplicate:
            raise BadRequestError(f"Duplicate company: {handle}")

        logger.debug("Inserting company")
        return self.session.fetch_one(
            f"""INSERT INTO companies (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_COMPANY_COLUMNS}""",
            [
                handle,
                data["name"],
                data.get("description"),
                data.get("numEmployees"),
                data.get("logoUrl"),
            ],
        )

    def find_all(self, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        List companies ordered by name, optionally narrowed by
        `name` (substring, case-insensitive), `minEmployees`, `maxEmployees`.

        Raises:
            InvalidFilterField: For any other filter key
            InvalidRange: If minEmployees > maxEmployees
        """
        fragment = build_predicate_fragment(filters or {}, COMPANY_FILTER_RULES)
        logger.debug("Searching companies with %d predicate(s)", len(fragment))
        return self.session.fetch_all(
            f"""SELECT {_COMPANY_COLUMNS}
                FROM companies
                {where_clause(fragment.sql_filter)}
                ORDER BY name""",
            fragment.values,
        )

    def get(self, handle: str) -> dict[str, Any]:
        """
        Return a company with its jobs: [{ id, title, salary, equity }, ...].

        Raises:
            NotFoundError: If no such company
        """
        company = self.session.fetch_one(
            f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE handle = $1",
            [handle],
        )
        if company is None:
            logger.info("Company %s not found", handle)
            raise NotFoundError(f"No company: {handle}")

        company["jobs"] = self.session.fetch_all(
            """SELECT id, title, salary, equity
                FROM jobs
                WHERE company_handle = $1
                ORDER BY id""",
            [handle],
        )
        return company

    def update(self, handle: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partial update: only the fields in `data` change.

        Data can include: { name, description, numEmployees, logoUrl }

        Raises:
            NoFieldsToUpdate: If data is empty
            NotFoundError: If no such company
        """
        fragment = build_update_fragment(data, COMPANY_FIELD_MAP)
        handle_idx = len(fragment.values) + 1

        company = self.session.fetch_one(
            f"""UPDATE companies
                SET {fragment.set_cols}
                WHERE handle = ${handle_idx}
                RETURNING {_COMPANY_COLUMNS}""",
            [*fragment.values, handle],
        )
        if company is None:
            logger.info("Company %s not found for update", handle)
            raise NotFoundError(f"No company: {handle}")
        return company

    def remove(self, handle: str) -> None:
        """
        Raises:
            NotFoundError: If no such company
        """
        removed = self.session.fetch_one(
            "DELETE FROM companies WHERE handle = $1 RETURNING handle",
            [handle],
        )
        if removed is None:
            logger.info("Company %s not found for delete", handle)
            raise NotFoundError(f"No company: {handle}")
