"""
Adapter: Recommendation repository.

Implements RecommendationRepository port over ``stock_recommendations``.
"""

from datetime import datetime

from sqlalchemy import exists, insert, select
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.entities import (
    Recommendation,
    RecommendationCandidate,
)
from bazaarlens.domain.market.ports import RecommendationRepository
from bazaarlens.infrastructure.market.database import to_storage, translate_errors
from bazaarlens.infrastructure.market.schema import (
    instruments,
    latest_ticks_subquery,
    recommendations,
)


class RecommendationRepositoryAdapter(RecommendationRepository):
    """Persists recommendations and finds instruments that need one."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, recommendation: Recommendation) -> Recommendation:
        """Append a recommendation.

        Raises:
            IntegrityViolationError: If the instrument does not exist or
                the confidence is outside 0..100.
        """
        stmt = insert(recommendations).values(
            stock_id=recommendation.instrument_id,
            action=recommendation.action.value,
            target_price=recommendation.target_price,
            confidence_percent=recommendation.confidence,
            timeframe=recommendation.timeframe,
            reasoning=recommendation.rationale,
            created_at=to_storage(recommendation.created_at),
        )
        with translate_errors("insert recommendation"):
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
                recommendation_id = result.inserted_primary_key[0]

        return Recommendation(
            id=recommendation_id,
            instrument_id=recommendation.instrument_id,
            action=recommendation.action,
            target_price=recommendation.target_price,
            confidence=recommendation.confidence,
            timeframe=recommendation.timeframe,
            rationale=recommendation.rationale,
            created_at=recommendation.created_at,
        )

    def find_candidates(
        self, stale_before: datetime, limit: int
    ) -> list[RecommendationCandidate]:
        """Return instruments without a recommendation since ``stale_before``.

        Instruments with no tick are included with a None price and change.
        """
        latest = latest_ticks_subquery()
        fresh = exists().where(
            recommendations.c.stock_id == instruments.c.id,
            recommendations.c.created_at >= to_storage(stale_before),
        )
        query = (
            select(
                instruments.c.id,
                instruments.c.symbol,
                instruments.c.name,
                latest.c.price,
                latest.c.change_percent,
            )
            .select_from(
                instruments.outerjoin(latest, latest.c.stock_id == instruments.c.id)
            )
            .where(~fresh)
            .limit(limit)
        )

        with translate_errors("find recommendation candidates"):
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()

        return [
            RecommendationCandidate(
                instrument_id=row["id"],
                symbol=row["symbol"],
                name=row["name"],
                price=row["price"],
                change_percent=row["change_percent"],
            )
            for row in rows
        ]
