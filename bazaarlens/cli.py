"""
CLI entry point for the market simulator.

Usage:
    # Create the schema and the default catalog
    python -m bazaarlens init-db

    # Run the scheduler service until SIGINT/SIGTERM
    python -m bazaarlens run

    # One price + index cycle (ignores the trading window by default)
    python -m bazaarlens tick
    python -m bazaarlens tick --symbol RELIANCE --symbol TCS

    # One recommendation batch
    python -m bazaarlens recommend

    # Maintenance, all steps or selected ones
    python -m bazaarlens sweep --step purge_stale_ticks

    # Log market breadth statistics
    python -m bazaarlens stats

    # List configured schedules
    python -m bazaarlens jobs
"""

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from bazaarlens.application.market.sweep_storage import ALL_STEPS
from bazaarlens.core.config import Settings
from bazaarlens.domain.market.errors import MarketDomainError
from bazaarlens.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def _components(settings: Settings):
    from bazaarlens import dependencies
    from bazaarlens.infrastructure.market.system_clock import (
        PythonRandomSource,
        SystemClock,
    )

    engine = dependencies.get_db_engine(settings)
    return engine, SystemClock(), PythonRandomSource(settings.random_seed)


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> int:
    """Create tables and insert the default instruments and indices."""
    from bazaarlens.dependencies import get_seed_catalog_use_case

    engine, clock, _ = _components(settings)
    result = get_seed_catalog_use_case(engine, clock).execute()
    logger.info(
        "Database initialized: %d instruments, %d indices added.",
        result.instruments_added,
        result.indices_added,
    )
    return 0


def cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    """Start the simulator service and block until a stop signal."""
    from bazaarlens.dependencies import build_market_simulator

    simulator = build_market_simulator(settings)
    stop_requested = threading.Event()

    def _handle_signal(signum, frame) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        stop_requested.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    simulator.start()
    logger.info("Market simulator running. Press Ctrl+C to stop.")
    try:
        while not stop_requested.wait(timeout=1.0):
            pass
    finally:
        simulator.stop()
    return 0


def cmd_tick(args: argparse.Namespace, settings: Settings) -> int:
    """Run a single price cycle followed by index aggregation."""
    from bazaarlens.dependencies import (
        get_aggregate_indices_use_case,
        get_simulate_prices_use_case,
        get_trading_window,
    )

    engine, clock, random_source = _components(settings)
    if args.respect_window and not get_trading_window(settings).is_open(clock.now()):
        logger.info("Trading window closed; no cycle run.")
        return 0

    prices = get_simulate_prices_use_case(
        settings, engine, clock, random_source
    ).execute(symbols=args.symbol)
    indices = get_aggregate_indices_use_case(
        settings, engine, clock, random_source
    ).execute()
    logger.info(
        "Cycle complete: %d ticks (%d seeded), indices updated: %s",
        prices.ticks_inserted,
        prices.seeded,
        ", ".join(indices.updated) or "none",
    )
    if prices.failed_symbols or indices.failed:
        logger.warning(
            "Failures: instruments=%s indices=%s", prices.failed_symbols, indices.failed
        )
        return 1
    return 0


def cmd_recommend(args: argparse.Namespace, settings: Settings) -> int:
    """Generate one batch of recommendations."""
    from bazaarlens.dependencies import get_generate_recommendations_use_case

    engine, clock, random_source = _components(settings)
    result = get_generate_recommendations_use_case(
        settings, engine, clock, random_source
    ).execute()

    for rec in result.generated:
        logger.info(
            "%s | %s | confidence=%d | target=%.2f | %s",
            rec.symbol,
            rec.action,
            rec.confidence,
            rec.target_price,
            rec.timeframe,
        )
    logger.info(
        "Generated %d of %d candidate recommendations.",
        len(result.generated),
        result.candidates,
    )
    return 1 if result.failed_symbols else 0


def cmd_sweep(args: argparse.Namespace, settings: Settings) -> int:
    """Run the maintenance sweep."""
    from bazaarlens.dependencies import get_sweep_storage_use_case

    engine, clock, _ = _components(settings)
    result = get_sweep_storage_use_case(settings, engine, clock).execute(steps=args.step)
    logger.info(
        "Sweep: purged_ticks=%s purged_sessions=%s compacted=%s",
        result.purged_ticks,
        result.purged_sessions,
        result.compacted,
    )
    for step, error in result.failed_steps.items():
        logger.error("Step %s failed: %s", step, error)
    return 1 if result.failed_steps else 0


def cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    """Log breadth statistics for the latest market snapshot."""
    from bazaarlens.dependencies import get_summarize_market_use_case

    engine, _, _ = _components(settings)
    get_summarize_market_use_case(engine).execute()
    return 0


def cmd_jobs(args: argparse.Namespace, settings: Settings) -> int:
    """List the configured job schedules."""
    for name, schedule in settings.job_schedules().items():
        print(f"{name:<24} {schedule:<22} {settings.market_timezone}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bazaarlens", description="BazaarLens market simulator CLI"
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--sql-echo", action="store_true", dest="sql_echo",
        help="Log SQL statements (same as SQL_ECHO=true)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create schema and default catalog")
    init_parser.set_defaults(func=cmd_init_db)

    run_parser = subparsers.add_parser("run", help="Run the scheduler service")
    run_parser.set_defaults(func=cmd_run)

    tick_parser = subparsers.add_parser("tick", help="Run one price and index cycle")
    tick_parser.add_argument(
        "--respect-window", action="store_true", dest="respect_window",
        help="Skip the cycle when the trading window is closed",
    )
    tick_parser.add_argument(
        "--symbol", action="append", default=None,
        help="Instrument to tick; repeat for several (default: whole catalog)",
    )
    tick_parser.set_defaults(func=cmd_tick)

    rec_parser = subparsers.add_parser("recommend", help="Generate one recommendation batch")
    rec_parser.set_defaults(func=cmd_recommend)

    sweep_parser = subparsers.add_parser("sweep", help="Run maintenance steps")
    sweep_parser.add_argument(
        "--step", action="append", choices=ALL_STEPS, default=None,
        help="Step to run; repeat for several (default: all)",
    )
    sweep_parser.set_defaults(func=cmd_sweep)

    stats_parser = subparsers.add_parser("stats", help="Log market breadth statistics")
    stats_parser.set_defaults(func=cmd_stats)

    jobs_parser = subparsers.add_parser("jobs", help="List configured schedules")
    jobs_parser.set_defaults(func=cmd_jobs)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(
        args.log_level or settings.log_level,
        sql_echo=args.sql_echo or settings.sql_echo,
    )

    try:
        exit_code = args.func(args, settings)
    except MarketDomainError as exc:
        logger.error("%s", exc)
        exit_code = 2
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
