"""
Default market catalog.

The instruments and index rows a fresh store is seeded with.
"""

from dataclasses import dataclass

from bazaarlens.domain.market.entities import Instrument

DEFAULT_INSTRUMENTS: tuple[Instrument, ...] = (
    Instrument("RELIANCE", "Reliance Industries Ltd", "Oil & Gas", "Integrated Oil & Gas", 1920000.00, 25.5, 0.8),
    Instrument("TCS", "Tata Consultancy Services", "Technology", "IT Services", 1300000.00, 28.2, 1.2),
    Instrument("INFY", "Infosys Limited", "Technology", "IT Services", 740000.00, 22.1, 1.5),
    Instrument("HDFC", "HDFC Bank Limited", "Financial", "Banking", 1250000.00, 18.5, 1.8),
    Instrument("ICICIBANK", "ICICI Bank Limited", "Financial", "Banking", 980000.00, 16.8, 1.6),
    Instrument("ITC", "ITC Limited", "Consumer Goods", "Tobacco", 850000.00, 20.3, 2.1),
    Instrument("SBIN", "State Bank of India", "Financial", "Banking", 720000.00, 12.5, 1.9),
    Instrument("BHARTIARTL", "Bharti Airtel Limited", "Telecommunications", "Wireless", 680000.00, 45.2, 0.5),
    Instrument("AXISBANK", "Axis Bank Limited", "Financial", "Banking", 420000.00, 15.7, 1.3),
    Instrument("ASIANPAINT", "Asian Paints Limited", "Consumer Goods", "Paints", 380000.00, 65.8, 0.9),
)


@dataclass(frozen=True)
class IndexSeed:
    """Initial row for a market index."""

    name: str
    symbol: str
    value: float
    change_amount: float
    change_percent: float


DEFAULT_INDICES: tuple[IndexSeed, ...] = (
    IndexSeed("NIFTY 50", "NIFTY50", 22147.10, 156.20, 0.71),
    IndexSeed("SENSEX", "SENSEX", 72836.34, 445.87, 0.62),
    IndexSeed("BANK NIFTY", "BANKNIFTY", 48789.55, -23.45, -0.05),
    IndexSeed("USD/INR", "USDINR", 83.42, 0.12, 0.14),
)
