"""
Market bounded context: domain layer.

This module contains all domain logic for the market context:
- Synthetic price random walk and cold-start seeding
- Composite and synthetic index computation
- Rule-based recommendation policy
- Trading window and market summary helpers
"""
