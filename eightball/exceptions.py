"""Custom exceptions for the eight-ball rules kernel.

All exceptions inherit from :class:`RulesError` so callers can catch
the full family with a single ``except RulesError`` clause.
"""

from eightball.models.session import Phase


class RulesError(Exception):
    """Base exception for all rules kernel errors."""


class InvalidPhaseTransition(RulesError):
    """Raised when an operation is called in a phase that does not allow it."""

    def __init__(self, operation: str, expected: Phase, actual: Phase):
        self.operation = operation
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Cannot {operation}: session is {actual.value}, "
            f"expected {expected.value}."
        )


class EventOrderError(RulesError):
    """Raised when an event cannot be placed in play order after what came before."""


class PocketedRecordError(RulesError):
    """Raised when a ball would be recorded as pocketed a second time."""
