"""
Adapter: User session housekeeping.

Implements SessionRepository port over ``user_sessions``.
"""

import logging
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.ports import SessionRepository
from bazaarlens.infrastructure.market.database import to_storage, translate_errors
from bazaarlens.infrastructure.market.schema import sessions

logger = logging.getLogger(__name__)


class SessionRepositoryAdapter(SessionRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def purge_expired(self, now: datetime) -> int:
        stmt = delete(sessions).where(sessions.c.expires_at < to_storage(now))
        with translate_errors("purge expired sessions"):
            with self._engine.begin() as conn:
                deleted = conn.execute(stmt).rowcount
        logger.debug("Deleted %d expired sessions.", deleted)
        return deleted
