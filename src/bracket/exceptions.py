"""
Error types raised by the bracket core.

Business-rule conditions (capacity, duplicate ids, invalid outcomes, group
shortfalls) are raised by internal validators and turned into logged,
non-fatal rejections at the operation boundary. EmptyContainerError is a
contract violation and always propagates.
"""
from typing import Optional


class BracketError(Exception):
    """
    Base exception for the bracket core.

    ``details`` carries the ids, counts or values behind the failure and is
    appended to the message as ``key=value`` pairs.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} ({context})"


class EmptyContainerError(BracketError, IndexError):
    """Raised on pop/dequeue/peek of an empty Queue or Stack."""


class CapacityExceededError(BracketError):
    """Raised when the roster or stats table is full."""


class DuplicatePlayerError(BracketError):
    """Raised when a player id is already registered."""


class InvalidOutcomeError(BracketError):
    """Raised when a match has no valid winner."""


class InsufficientCompositionError(BracketError):
    """Raised when the roster cannot fill a group's tier composition."""


class ConfigurationError(BracketError):
    """Raised when settings are invalid."""
