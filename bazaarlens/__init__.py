"""
BazaarLens: synthetic market-data engine for the BazaarLens dashboard.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters).

Bounded contexts:
    - market: Price simulation, index aggregation, recommendations, maintenance.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (SQL store, scheduler, clock, randomness).
    - realtime: The scheduled simulator service and its task bookkeeping.
    - shared / core: Cross-cutting concerns (logging, configuration).
"""

__version__ = "0.1.0"
