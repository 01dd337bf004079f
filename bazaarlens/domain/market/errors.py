"""
Domain-specific errors for the market bounded context.

All errors raised from the domain layer must be defined here.
Infrastructure adapters translate driver exceptions into these.
No framework imports allowed.
"""


class MarketDomainError(Exception):
    """Base error for all market domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InstrumentNotFoundError(MarketDomainError):
    """Raised when an instrument symbol is not in the catalog."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Instrument not found: {symbol}")
        self.symbol = symbol


class StorageUnavailableError(MarketDomainError):
    """Raised when the store cannot be reached or a write fails transiently."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Storage error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class IntegrityViolationError(MarketDomainError):
    """Raised when a write would break referential integrity."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Integrity violation during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class InvalidScheduleError(MarketDomainError):
    """Raised when a cron expression or timezone cannot be parsed."""

    def __init__(self, schedule: str, reason: str) -> None:
        super().__init__(f"Invalid schedule '{schedule}': {reason}")
        self.schedule = schedule
        self.reason = reason


class UnknownTaskError(MarketDomainError):
    """Raised when a task or sweep step name is not recognised."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"Unknown task: {name}. Available: {available}")
        self.name = name
        self.available = available
