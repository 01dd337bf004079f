"""
Relational schema for the market store.

Declared with SQLAlchemy Core so the same definitions create tables on
SQLite and PostgreSQL. The account tables exist so foreign keys and the
session sweep have real rows to act on; nothing here writes to them.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    select,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(100), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("first_name", String(50)),
    Column("last_name", String(50)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
)

instruments = Table(
    "stocks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("symbol", String(20), nullable=False, unique=True),
    Column("name", String(100), nullable=False),
    Column("sector", String(50)),
    Column("industry", String(50)),
    Column("market_cap", Float),
    Column("pe_ratio", Float),
    Column("dividend_yield", Float),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
)

price_ticks = Table(
    "stock_prices",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("stock_id", Integer, ForeignKey("stocks.id"), nullable=False),
    Column("price", Float, nullable=False),
    Column("change_amount", Float),
    Column("change_percent", Float),
    Column("volume", BigInteger),
    Column("high", Float),
    Column("low", Float),
    Column("open_price", Float),
    Column("close_price", Float),
    Column("timestamp", DateTime, nullable=False),
    Index("ix_stock_prices_stock_id_timestamp", "stock_id", "timestamp"),
    Index("ix_stock_prices_timestamp", "timestamp"),
)

portfolios = Table(
    "portfolios",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("name", String(100), nullable=False),
    Column("description", Text),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
)

holdings = Table(
    "portfolio_holdings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("portfolio_id", Integer, ForeignKey("portfolios.id"), nullable=False),
    Column("stock_id", Integer, ForeignKey("stocks.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("average_price", Float, nullable=False),
    Column("purchase_date", DateTime, server_default=func.current_timestamp()),
)

watchlist = Table(
    "watchlist",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("stock_id", Integer, ForeignKey("stocks.id"), nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    UniqueConstraint("user_id", "stock_id", name="uq_watchlist_user_stock"),
)

market_indices = Table(
    "market_indices",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("symbol", String(20), nullable=False, unique=True),
    Column("value", Float, nullable=False),
    Column("change_amount", Float),
    Column("change_percent", Float),
    Column("updated_at", DateTime),
)

recommendations = Table(
    "stock_recommendations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("stock_id", Integer, ForeignKey("stocks.id"), nullable=False),
    Column("action", String(10), nullable=False),
    Column("target_price", Float),
    Column("confidence_percent", Integer),
    Column("timeframe", String(20)),
    Column("reasoning", Text),
    Column("created_at", DateTime, nullable=False),
    CheckConstraint("action IN ('BUY', 'SELL', 'HOLD')", name="ck_recommendation_action"),
    CheckConstraint(
        "confidence_percent >= 0 AND confidence_percent <= 100",
        name="ck_recommendation_confidence",
    ),
    Index("ix_stock_recommendations_stock_id_created_at", "stock_id", "created_at"),
)

sessions = Table(
    "user_sessions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("token_hash", String(255), nullable=False),
    Column("expires_at", DateTime, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
)


def latest_ticks_subquery(name: str = "latest_ticks"):
    """One row per instrument: its newest tick, ties broken by highest id.

    Every "current price" read goes through this so the single-row
    invariant is defined in exactly one place.
    """
    ranked = select(
        price_ticks,
        func.row_number()
        .over(
            partition_by=price_ticks.c.stock_id,
            order_by=(price_ticks.c.timestamp.desc(), price_ticks.c.id.desc()),
        )
        .label("rn"),
    ).subquery(f"{name}_ranked")
    return select(ranked).where(ranked.c.rn == 1).subquery(name)
