"""
Use case: Generate recommendations for instruments lacking a fresh one.

Input:  none (reads candidates from the store)
Output: RecommendationBatchResult
Side effects: Appends one Recommendation per candidate. Never touches
              ticks or indices.
Failure cases: A failed insert is logged; the other candidates proceed.
"""

import logging
from datetime import timedelta

from bazaarlens.application.market.dtos import (
    GeneratedRecommendation,
    RecommendationBatchResult,
)
from bazaarlens.domain.market.entities import Recommendation
from bazaarlens.domain.market.ports import Clock, RecommendationRepository
from bazaarlens.domain.market.recommendation_policy import RecommendationPolicy

logger = logging.getLogger(__name__)


class GenerateRecommendationsUseCase:
    """Orchestrates one bounded batch of recommendations.

    An instrument qualifies when its newest recommendation is missing or
    older than ``max_age_days``. At most ``batch_size`` qualify per run.
    """

    def __init__(
        self,
        recommendation_repo: RecommendationRepository,
        policy: RecommendationPolicy,
        clock: Clock,
        max_age_days: int = 7,
        batch_size: int = 10,
    ) -> None:
        self._repo = recommendation_repo
        self._policy = policy
        self._clock = clock
        self._max_age = timedelta(days=max_age_days)
        self._batch_size = batch_size

    def execute(self) -> RecommendationBatchResult:
        now = self._clock.now()
        candidates = self._repo.find_candidates(
            stale_before=now - self._max_age, limit=self._batch_size
        )

        generated: list[GeneratedRecommendation] = []
        failed: list[str] = []

        for candidate in candidates:
            try:
                decision = self._policy.decide(candidate.price, candidate.change_percent)
                self._repo.add(
                    Recommendation(
                        instrument_id=candidate.instrument_id,
                        action=decision.action,
                        target_price=decision.target_price,
                        confidence=decision.confidence,
                        timeframe=decision.timeframe,
                        rationale=decision.rationale,
                        created_at=now,
                    )
                )
            except Exception:
                logger.exception("Recommendation failed for %s", candidate.symbol)
                failed.append(candidate.symbol)
                continue

            generated.append(
                GeneratedRecommendation(
                    symbol=candidate.symbol,
                    action=decision.action.value,
                    confidence=decision.confidence,
                    target_price=decision.target_price,
                    timeframe=decision.timeframe,
                )
            )

        logger.info(
            "Generated %d new recommendations (%d candidates).",
            len(generated),
            len(candidates),
        )
        return RecommendationBatchResult(
            candidates=len(candidates), generated=generated, failed_symbols=failed
        )
