"""
Dependency wiring for the market context.

Builds infrastructure adapters and injects them into use cases via
constructor injection. This is the composition root used by the CLI
and by anything embedding the simulator service.
"""

from typing import Optional

from sqlalchemy.engine import Engine

from bazaarlens.application.market.aggregate_indices import AggregateIndicesUseCase
from bazaarlens.application.market.generate_recommendations import (
    GenerateRecommendationsUseCase,
)
from bazaarlens.application.market.seed_catalog import SeedCatalogUseCase
from bazaarlens.application.market.seed_initial_prices import SeedInitialPricesUseCase
from bazaarlens.application.market.simulate_prices import SimulatePricesUseCase
from bazaarlens.application.market.summarize_market import SummarizeMarketUseCase
from bazaarlens.application.market.sweep_storage import MaintenanceSweepUseCase
from bazaarlens.core.config import Settings
from bazaarlens.domain.market.index_walk import DEFAULT_SYNTHETIC_INDICES
from bazaarlens.domain.market.ports import Clock, JobScheduler, RandomSource
from bazaarlens.domain.market.price_walk import PriceWalk
from bazaarlens.domain.market.recommendation_policy import RecommendationPolicy
from bazaarlens.domain.market.trading_window import TradingWindow
from bazaarlens.infrastructure.market.database import create_db_engine
from bazaarlens.infrastructure.market.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from bazaarlens.infrastructure.market.job_scheduler import APSchedulerJobScheduler
from bazaarlens.infrastructure.market.market_index_repository import (
    MarketIndexRepositoryAdapter,
)
from bazaarlens.infrastructure.market.price_tick_repository import (
    PriceTickRepositoryAdapter,
)
from bazaarlens.infrastructure.market.recommendation_repository import (
    RecommendationRepositoryAdapter,
)
from bazaarlens.infrastructure.market.session_repository import SessionRepositoryAdapter
from bazaarlens.infrastructure.market.storage_maintenance import (
    StorageMaintenanceAdapter,
)
from bazaarlens.infrastructure.market.system_clock import (
    PythonRandomSource,
    SystemClock,
)
from bazaarlens.realtime.simulator import MarketSimulator


def get_db_engine(settings: Settings) -> Engine:
    """Build a SQLAlchemy engine from application settings."""
    return create_db_engine(settings.get_database_dsn())


def get_trading_window(settings: Settings) -> TradingWindow:
    return TradingWindow.from_config(
        timezone=settings.market_timezone,
        days=settings.trading_days,
        open_hour=settings.trading_open_hour,
        close_hour=settings.trading_close_hour,
    )


def get_price_walk(settings: Settings, random_source: RandomSource) -> PriceWalk:
    return PriceWalk(
        random_source,
        volatility=settings.price_volatility,
        drift=settings.price_drift,
    )


def get_simulate_prices_use_case(
    settings: Settings, engine: Engine, clock: Clock, random_source: RandomSource
) -> SimulatePricesUseCase:
    """Build SimulatePricesUseCase with its infrastructure dependencies."""
    return SimulatePricesUseCase(
        instrument_repo=InstrumentRepositoryAdapter(engine=engine),
        tick_repo=PriceTickRepositoryAdapter(engine=engine),
        price_walk=get_price_walk(settings, random_source),
        clock=clock,
    )


def get_seed_prices_use_case(
    settings: Settings, engine: Engine, clock: Clock, random_source: RandomSource
) -> SeedInitialPricesUseCase:
    """Build SeedInitialPricesUseCase with its infrastructure dependencies."""
    return SeedInitialPricesUseCase(
        instrument_repo=InstrumentRepositoryAdapter(engine=engine),
        tick_repo=PriceTickRepositoryAdapter(engine=engine),
        price_walk=get_price_walk(settings, random_source),
        clock=clock,
    )


def get_aggregate_indices_use_case(
    settings: Settings, engine: Engine, clock: Clock, random_source: RandomSource
) -> AggregateIndicesUseCase:
    """Build AggregateIndicesUseCase with its infrastructure dependencies."""
    return AggregateIndicesUseCase(
        tick_repo=PriceTickRepositoryAdapter(engine=engine),
        index_repo=MarketIndexRepositoryAdapter(engine=engine),
        random_source=random_source,
        clock=clock,
        composite_symbol=settings.composite_index_symbol,
        instrument_cap=settings.composite_instrument_cap,
        scale=settings.composite_scale,
        synthetic_indices=DEFAULT_SYNTHETIC_INDICES,
    )


def get_generate_recommendations_use_case(
    settings: Settings, engine: Engine, clock: Clock, random_source: RandomSource
) -> GenerateRecommendationsUseCase:
    """Build GenerateRecommendationsUseCase with its infrastructure dependencies."""
    return GenerateRecommendationsUseCase(
        recommendation_repo=RecommendationRepositoryAdapter(engine=engine),
        policy=RecommendationPolicy(random_source),
        clock=clock,
        max_age_days=settings.recommendation_max_age_days,
        batch_size=settings.recommendation_batch_size,
    )


def get_sweep_storage_use_case(
    settings: Settings, engine: Engine, clock: Clock
) -> MaintenanceSweepUseCase:
    """Build MaintenanceSweepUseCase with its infrastructure dependencies."""
    return MaintenanceSweepUseCase(
        tick_repo=PriceTickRepositoryAdapter(engine=engine),
        session_repo=SessionRepositoryAdapter(engine=engine),
        maintenance=StorageMaintenanceAdapter(engine=engine),
        clock=clock,
        retention_days=settings.tick_retention_days,
    )


def get_summarize_market_use_case(engine: Engine) -> SummarizeMarketUseCase:
    return SummarizeMarketUseCase(tick_repo=PriceTickRepositoryAdapter(engine=engine))


def get_seed_catalog_use_case(engine: Engine, clock: Clock) -> SeedCatalogUseCase:
    """Build SeedCatalogUseCase with its infrastructure dependencies."""
    return SeedCatalogUseCase(
        maintenance=StorageMaintenanceAdapter(engine=engine),
        instrument_repo=InstrumentRepositoryAdapter(engine=engine),
        index_repo=MarketIndexRepositoryAdapter(engine=engine),
        clock=clock,
    )


def build_market_simulator(
    settings: Settings,
    engine: Optional[Engine] = None,
    clock: Optional[Clock] = None,
    random_source: Optional[RandomSource] = None,
    scheduler: Optional[JobScheduler] = None,
) -> MarketSimulator:
    """Wire a MarketSimulator from settings.

    Any collaborator may be passed in to replace the production default.
    """
    engine = engine or get_db_engine(settings)
    clock = clock or SystemClock()
    random_source = random_source or PythonRandomSource(settings.random_seed)
    scheduler = scheduler or APSchedulerJobScheduler(timezone=settings.market_timezone)

    return MarketSimulator(
        simulate_prices=get_simulate_prices_use_case(settings, engine, clock, random_source),
        aggregate_indices=get_aggregate_indices_use_case(
            settings, engine, clock, random_source
        ),
        generate_recommendations=get_generate_recommendations_use_case(
            settings, engine, clock, random_source
        ),
        sweep_storage=get_sweep_storage_use_case(settings, engine, clock),
        summarize_market=get_summarize_market_use_case(engine),
        seed_prices=get_seed_prices_use_case(settings, engine, clock, random_source),
        scheduler=scheduler,
        clock=clock,
        trading_window=get_trading_window(settings),
        schedules=settings.job_schedules(),
        timezone_name=settings.market_timezone,
    )
