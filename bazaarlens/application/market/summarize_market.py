"""
Use case: Summarise the current market snapshot.

Reads the latest tick of every instrument and logs breadth statistics.
Side effects: None besides logging.
"""

import logging

from bazaarlens.domain.market.market_stats import MarketSummary, summarize
from bazaarlens.domain.market.ports import PriceTickRepository

logger = logging.getLogger(__name__)


class SummarizeMarketUseCase:
    def __init__(self, tick_repo: PriceTickRepository) -> None:
        self._tick_repo = tick_repo

    def execute(self) -> MarketSummary:
        summary = summarize(self._tick_repo.get_latest_per_instrument())

        if summary.avg_change_percent is None:
            logger.info("Market stats: no priced instruments.")
        else:
            logger.info(
                "Market stats: %d instruments, avg change %.2f%%, "
                "%d gainers, %d losers, volume %d",
                summary.total_instruments,
                summary.avg_change_percent,
                summary.gainers,
                summary.losers,
                summary.total_volume,
            )
        return summary
