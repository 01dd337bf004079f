"""
Application layer for the market bounded context.

Use cases coordinate domain services and ports to fulfill
simulation and maintenance cycles. No infrastructure imports allowed.
"""
