"""Exceptions and diagnostic records for the Bitcoin retirement planner."""

from dataclasses import dataclass


class RetireOnBtcError(Exception):
    """Base exception for planner errors."""

    pass


class ValidationError(RetireOnBtcError):
    """Raised when user inputs are missing or logically invalid.

    ``errors`` holds every message found so the UI can show them all at once.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class HistoryFetchError(RetireOnBtcError):
    """Raised when the historical price range cannot be retrieved."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RateLimitedError(HistoryFetchError):
    """Raised when the history endpoint answers with HTTP 429."""

    def __init__(self, message: str = "Too many requests to the price history API. Please retry later.") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class ProviderFailure:
    """A single failed price provider attempt, kept for diagnostics."""

    source: str
    reason: str
    timestamp: str

    def __str__(self) -> str:
        return f"[{self.timestamp}] {self.source} failed: {self.reason}"
