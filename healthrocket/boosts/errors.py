"""Boost accounting errors."""

from typing import Optional


class BoostError(Exception):
    """Base class for failures scoped to a single boost operation."""

    retryable = False

    def __init__(self, message: str, request: Optional[object] = None):
        super().__init__(message)
        self.message = message
        # Set by the coordinator to the CompletionRequest that was rejected
        self.request = request


class DataUnavailable(BoostError):
    """Completion history could not be read."""

    retryable = True


class DailyLimitExceeded(BoostError):
    """User already completed the maximum number of boosts today."""


class AlreadyCompleted(BoostError):
    """This boost was already completed today."""


class PersistenceFailure(BoostError):
    """Completion could not be written."""

    retryable = True


class BoostNotFound(BoostError):
    """Boost id is not in the catalog."""
