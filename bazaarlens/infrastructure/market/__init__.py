"""
Infrastructure adapters for the market bounded context.

Each adapter implements a domain port (ABC) and connects
to an external system: the relational store, APScheduler, the OS clock.
"""
