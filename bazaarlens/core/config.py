"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, no scattered magic strings.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name used in logs.
        version: Current version string.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        sql_echo: Log SQL statements through the sqlalchemy.engine logger.
        database_url: Full SQLAlchemy URL. Overrides the postgres_* parts.
        market_timezone: Timezone for schedules and the trading window.
        trading_days: Weekdays the price simulator runs, e.g. "mon-fri".
        trading_open_hour: First local hour (inclusive) of the session.
        trading_close_hour: Local hour (exclusive) the session ends.
        random_seed: Seed for reproducible runs; None draws from the OS.

    Simulation constants and job schedules are tunable here too so a
    deployment can slow the simulator down without a code change.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "BazaarLens"
    version: str = "0.1.0"
    log_level: str = "INFO"
    sql_echo: bool = False

    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "bazaar_lens"

    market_timezone: str = "Asia/Kolkata"
    trading_days: str = "mon-fri"
    trading_open_hour: int = 9
    trading_close_hour: int = 16

    price_volatility: float = 0.02
    price_drift: float = 0.0001
    tick_retention_days: int = 30
    recommendation_max_age_days: int = 7
    recommendation_batch_size: int = 10
    composite_index_symbol: str = "NIFTY50"
    composite_instrument_cap: int = 50
    composite_scale: float = 100.0
    random_seed: Optional[int] = None

    schedule_price_cycle: str = "*/30 * * * * *"
    schedule_recommendations: str = "0 6 * * *"
    schedule_purge_stale_ticks: str = "0 2 * * *"
    schedule_market_stats: str = "0 9-16 * * mon-fri"
    schedule_purge_expired_sessions: str = "0 */6 * * *"
    schedule_compact_storage: str = "0 3 * * sun"

    @field_validator("trading_open_hour", "trading_close_hour")
    @classmethod
    def _hour_in_range(cls, value: int) -> int:
        if not 0 <= value <= 24:
            raise ValueError("hour must be between 0 and 24")
        return value

    def get_database_dsn(self) -> str:
        """Return the effective database URL.

        Priority:
        1. Explicit `DATABASE_URL`
        2. Build a PostgreSQL DSN from postgres_* values
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    def job_schedules(self) -> dict[str, str]:
        """Map each recurring task name to its crontab schedule."""
        return {
            "price_cycle": self.schedule_price_cycle,
            "recommendations": self.schedule_recommendations,
            "purge_stale_ticks": self.schedule_purge_stale_ticks,
            "market_stats": self.schedule_market_stats,
            "purge_expired_sessions": self.schedule_purge_expired_sessions,
            "compact_storage": self.schedule_compact_storage,
        }


settings = Settings()
