"""
Database engine factory and shared adapter helpers.

Builds the SQLAlchemy engine every repository adapter is injected with,
and translates driver exceptions into domain errors.

Timestamps are stored as naive UTC so SQLite and PostgreSQL compare
them identically; adapters convert at the boundary.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from bazaarlens.domain.market.errors import (
    IntegrityViolationError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

POSTGRES_DRIVER_SCHEME = "postgresql+psycopg2://"


def create_db_engine(dsn: str, echo: bool = False) -> Engine:
    """Create an engine for ``dsn``.

    PostgreSQL URLs without an explicit driver are pinned to psycopg2.
    SQLite connections get foreign keys switched on. An in-memory SQLite
    DSN shares one connection so every session sees the same database.
    """
    for scheme in ("postgres://", "postgresql://"):
        if dsn.startswith(scheme):
            dsn = POSTGRES_DRIVER_SCHEME + dsn[len(scheme):]
            break

    if dsn.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if dsn in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(dsn, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    engine = create_engine(dsn, echo=echo, pool_pre_ping=True)
    logger.info("Database engine created for %s", redact_dsn(dsn))
    return engine


def redact_dsn(dsn: str) -> str:
    """Render ``dsn`` with its password masked, for log messages."""
    return make_url(dsn).render_as_string(hide_password=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def to_storage(moment: datetime) -> datetime:
    """Convert an aware datetime to naive UTC for persistence."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def from_storage(moment: Optional[datetime]) -> Optional[datetime]:
    """Re-attach UTC to a naive datetime read from the store."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy errors as domain errors.

    Args:
        operation: Short description used in the error message.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning("Integrity violation during %s: %s", operation, exc.orig)
        raise IntegrityViolationError(operation, str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        raise StorageUnavailableError(operation, str(exc)) from exc
