"""
Real-time market simulation.

Provides:
- **MarketSimulator**: scheduler-driven service that runs the price
  cycle, recommendation batches, maintenance sweeps and market stats.
"""

from bazaarlens.realtime.simulator import MarketSimulator, TaskResult, TaskStatus

__all__ = [
    "MarketSimulator",
    "TaskResult",
    "TaskStatus",
]
