"""
Adapter: Storage maintenance.

Implements StorageMaintenance port: schema bootstrap and compaction.
VACUUM refuses to run inside a transaction on both SQLite and
PostgreSQL, so compaction uses an autocommit connection.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.ports import StorageMaintenance
from bazaarlens.infrastructure.market.database import translate_errors
from bazaarlens.infrastructure.market.schema import metadata

logger = logging.getLogger(__name__)


class StorageMaintenanceAdapter(StorageMaintenance):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def ensure_schema(self) -> None:
        """Create every table and index that does not exist yet."""
        with translate_errors("create schema"):
            metadata.create_all(self._engine)
        logger.info("Schema ensured on %s.", self._engine.dialect.name)

    def compact(self) -> None:
        with translate_errors("compact storage"):
            with self._engine.connect().execution_options(
                isolation_level="AUTOCOMMIT"
            ) as conn:
                conn.execute(text("VACUUM"))
                conn.execute(text("ANALYZE"))
