"""Shared database handle used by the record store."""

import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

from ..core.errors import StoreError
from .config import DBConfig

logger = logging.getLogger(__name__)


class Database:
    """Parameterized statement access to a relational database.

    Each call runs as one statement in its own short transaction, so the
    atomicity of a call is whatever the engine gives a single statement.
    The handle is safe to share between threads; the caller owns its
    lifecycle and must ``close`` it.
    """

    def __init__(self, engine: Engine):
        """Initialize the handle.

        Args:
            engine: SQLAlchemy engine, already pointing at a migrated schema
        """
        self.engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_options: Any) -> "Database":
        """Connect to the database at ``url``.

        In-memory SQLite databases are pinned to a single connection so that
        every statement sees the same data.
        """
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_options.setdefault("poolclass", StaticPool)
            engine_options.setdefault("connect_args", {"check_same_thread": False})
        try:
            engine = create_engine(url, **engine_options)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise StoreError(f"failed to open database: {e}") from e
        logger.debug("Opened database %s", engine.url.render_as_string(hide_password=True))
        return cls(engine)

    @classmethod
    def from_config(cls, config_path: str | Path) -> "Database":
        """Connect using a YAML or JSON database config file."""
        return cls.from_url(DBConfig.from_file(config_path).sqlalchemy_url())

    def execute(self, statement: Executable) -> int:
        """Run a write statement and return the number of rows it affected."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement)
                return result.rowcount
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def fetch_one(self, statement: Executable) -> Optional[RowMapping]:
        """Run a query expected to match at most one row."""
        try:
            with self.engine.connect() as conn:
                return conn.execute(statement).mappings().one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def fetch_all(self, statement: Executable) -> list[RowMapping]:
        """Run a query and return every row."""
        try:
            with self.engine.connect() as conn:
                return list(conn.execute(statement).mappings().all())
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def close(self):
        """Release all pooled connections."""
        self.engine.dispose()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
