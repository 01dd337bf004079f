"""
Data Transfer Objects for the market application layer.

DTOs carry the outcome of a use case back to the caller
(the realtime service or the CLI). They are plain dataclasses.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SimulationCycleResult:
    """Outcome of one price simulation cycle.

    Attributes:
        ticks_inserted: New ticks written, seeded ones included.
        seeded: Ticks generated by cold-start seeding.
        failed_symbols: Instruments skipped because of an error.
    """

    ticks_inserted: int
    seeded: int
    failed_symbols: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IndexAggregationResult:
    """Outcome of one index aggregation cycle.

    Attributes:
        updated: Symbols whose row was written.
        skipped: Symbols intentionally not written (composite without prices).
        failed: Symbols whose write raised.
    """

    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedRecommendation:
    symbol: str
    action: str
    confidence: int
    target_price: float
    timeframe: str


@dataclass(frozen=True)
class RecommendationBatchResult:
    """Outcome of one recommendation run."""

    candidates: int
    generated: list[GeneratedRecommendation] = field(default_factory=list)
    failed_symbols: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SweepResult:
    """Outcome of a maintenance sweep.

    Counts are None for steps that were not requested or that failed.
    ``failed_steps`` maps step name to error message.
    """

    purged_ticks: Optional[int] = None
    purged_sessions: Optional[int] = None
    compacted: bool = False
    failed_steps: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CatalogSeedResult:
    instruments_added: int
    indices_added: int
