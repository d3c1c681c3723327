from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from ..errors import BadRequestError, NotFoundError, UnauthorizedError
from ..sql.fragments import build_update_fragment
from .base import QuerySession

logger = logging.getLogger(__name__)

USER_FIELD_MAP: Mapping[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}

_USER_COLUMNS = (
    'username, first_name AS "firstName", last_name AS "lastName", '
    'email, is_admin AS "isAdmin"'
)


class Users:
    """
    Data access for users and their job applications.

    Password hashing is not done here. Pass `password_hasher` (plain -> hashed)
    to allow register() and password updates, and `password_verifier`
    (plain, hashed -> bool) to allow authenticate().
    """

    def __init__(
        self,
        session: QuerySession,
        password_hasher: Optional[Callable[[str], str]] = None,
        password_verifier: Optional[Callable[[str, str], bool]] = None,
    ) -> None:
        self.session = session
        self.password_hasher = password_hasher
        self.password_verifier = password_verifier

    def _hash(self, password: Any) -> str:
        if self.password_hasher is None:
            raise BadRequestError("Password changes are not enabled")
        if password is None:
            raise BadRequestError("password cannot be null")
        return self.password_hasher(password)

    def _applications(self, username: str | None = None) -> dict[str, list[int]]:
        if username is None:
            rows = self.session.fetch_all(
                "SELECT username, job_id FROM applications ORDER BY username, job_id"
            )
        else:
            rows = self.session.fetch_all(
                "SELECT username, job_id FROM applications WHERE username = $1 ORDER BY job_id",
                [username],
            )

        by_user: dict[str, list[int]] = {}
        for row in rows:
            by_user.setdefault(row["username"], []).append(row["job_id"])
        return by_user

    def authenticate(self, username: str, password: str) -> dict[str, Any]:
        """
        Return the user (without password) if the credentials match.

        Raises:
            BadRequestError: If no verifier is configured
            UnauthorizedError: If the user is unknown or the password is wrong
        """
        if self.password_verifier is None:
            raise BadRequestError("Authentication is not enabled")

        user = self.session.fetch_one(
            f"SELECT {_USER_COLUMNS}, password FROM users WHERE username = $1",
            [username],
        )
        if user is not None:
            hashed = user.pop("password")
            if self.password_verifier(password, hashed) is True:
                return user

        logger.info("Failed login for %s", username)
        raise UnauthorizedError("Invalid username/password")

    def register(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create a user from { username, password, firstName, lastName, email, isAdmin }.

        Returns the user without the password.

        Raises:
            BadRequestError: On a duplicate username, or if no hasher is configured
        """
        username = data["username"]
        hashed = self._hash(data["password"])

        duplicate = self.session.fetch_one(
            "SELECT username FROM users WHERE username = $1",
            [username],
        )
        if duplicate:
            raise BadRequestError(f"Duplicate username: {username}")

        logger.debug("Inserting user")
        return self.session.fetch_one(
            f"""INSERT INTO users (username, password, first_name, last_name, email, is_admin)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {_USER_COLUMNS}""",
            [
                username,
                hashed,
                data["firstName"],
                data["lastName"],
                data["email"],
                data.get("isAdmin", False),
            ],
        )

    def find_all(self) -> list[dict[str, Any]]:
        """
        Returns [{ username, firstName, lastName, email, isAdmin, jobs }, ...]
        where jobs is the list of applied job ids.
        """
        users = self.session.fetch_all(f"SELECT {_USER_COLUMNS} FROM users ORDER BY username")
        applications = self._applications()
        for user in users:
            user["jobs"] = applications.get(user["username"], [])
        return users

    def get(self, username: str) -> dict[str, Any]:
        user = self.session.fetch_one(
            f"SELECT {_USER_COLUMNS} FROM users WHERE username = $1",
            [username],
        )
        if user is None:
            logger.info("User %s not found", username)
            raise NotFoundError(f"No user: {username}")

        user["jobs"] = self._applications(username).get(username, [])
        return user

    def update(self, username: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partial update. Data can include:
            { firstName, lastName, password, email, isAdmin }

        WARNING: this can set a new password or make a user an admin; callers
        must have authorized the change.

        Raises:
            BadRequestError: If a password is given but no hasher is configured,
                or the password is None
            NoFieldsToUpdate: If data is empty
            NotFoundError: If no such user
        """
        payload = dict(data)
        if "password" in payload:
            payload["password"] = self._hash(payload["password"])

        fragment = build_update_fragment(payload, USER_FIELD_MAP)
        username_idx = len(fragment.values) + 1

        user = self.session.fetch_one(
            f"""UPDATE users
                SET {fragment.set_cols}
                WHERE username = ${username_idx}
                RETURNING {_USER_COLUMNS}""",
            [*fragment.values, username],
        )
        if user is None:
            logger.info("User %s not found for update", username)
            raise NotFoundError(f"No user: {username}")
        return user

    def remove(self, username: str) -> None:
        removed = self.session.fetch_one(
            "DELETE FROM users WHERE username = $1 RETURNING username",
            [username],
        )
        if removed is None:
            logger.info("User %s not found for delete", username)
            raise NotFoundError(f"No user: {username}")

    def apply_to_job(self, username: str, job_id: int) -> int:
        """
        Record an application and return the job id.

        Raises:
            NotFoundError: If the user or the job does not exist
        """
        if self.session.fetch_one("SELECT username FROM users WHERE username = $1", [username]) is None:
            raise NotFoundError(f"No user: {username}")
        if self.session.fetch_one("SELECT id FROM jobs WHERE id = $1", [job_id]) is None:
            raise NotFoundError(f"No job: {job_id}")

        logger.debug("Recording application")
        application = self.session.fetch_one(
            """INSERT INTO applications (username, job_id)
                VALUES ($1, $2)
                RETURNING job_id""",
            [username, job_id],
        )
        return application["job_id"]
