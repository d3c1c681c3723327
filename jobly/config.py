from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

DEFAULT_DATABASE_URL = "postgresql+psycopg2://localhost:5432/jobly"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DbConfig:
    url: str
    echo: bool = False
    pool_pre_ping: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.url:
            raise ValueError("url must be a non-empty SQLAlchemy database URL")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DbConfig":
        """
        Build a config from JOBLY_DATABASE_URL and JOBLY_DB_ECHO.
        """
        env = os.environ if environ is None else environ
        return cls(
            url=env.get("JOBLY_DATABASE_URL", DEFAULT_DATABASE_URL),
            echo=env.get("JOBLY_DB_ECHO", "").strip().lower() in _TRUTHY,
        )

    def create_engine(self) -> Engine:
        return create_engine(self.url, echo=self.echo, pool_pre_ping=self.pool_pre_ping)
