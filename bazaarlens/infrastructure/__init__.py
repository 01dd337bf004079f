"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: the SQL store, the job scheduler,
the system clock and the random source.
"""
