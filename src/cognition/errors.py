"""Exception hierarchy for the cognition scheduler.

Only validation and configuration problems raise. Budget denials and unknown
ids are reported through result objects, since callers hit them routinely.
"""

from __future__ import annotations


class CognitionError(Exception):
    """Base exception for all cognition scheduler errors."""


class SchedulerValidationError(CognitionError, ValueError):
    """Malformed input rejected before any scheduler state changed."""

    code = "validation_error"

    def __init__(self, message: str, *, provided: object = None) -> None:
        super().__init__(message)
        self.provided = provided


class InvalidWorkItemError(SchedulerValidationError):
    """Work item type is not one of the known work item types."""

    code = "invalid_work_item_type"

    def __init__(self, provided: object, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"{self.code}: {provided!r} (allowed: {', '.join(allowed)})",
            provided=provided,
        )
        self.allowed = allowed


class InvalidStopReasonError(SchedulerValidationError):
    """Completion requested with an unknown stop reason."""

    code = "invalid_stop_reason"

    def __init__(self, provided: object, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"{self.code}: {provided!r} (allowed: {', '.join(allowed)})",
            provided=provided,
        )
        self.allowed = allowed


class ConfigError(CognitionError):
    """Config file missing, unreadable, or not a table of known sections."""
