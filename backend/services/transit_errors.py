"""
Transit Hub - Workflow Errors

Validation errors raised by the milestone workflow. None of them are fatal:
a failed operation leaves the transit file untouched and the caller (router
or UI) reports the reason.
"""

from typing import Dict, Optional


class TransitWorkflowError(Exception):
    """Base exception for transit milestone workflow errors."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidDirection(TransitWorkflowError):
    """Raised when a shipment direction is neither export nor import."""
    def __init__(self, direction):
        super().__init__(
            f"Invalid shipment direction: {direction!r}. Valid: ['export', 'import']",
            {"direction": str(direction)},
        )


class OutOfOrderCompletion(TransitWorkflowError):
    """Raised when a milestone is completed before its predecessor."""
    pass


class ReactivationBlocked(TransitWorkflowError):
    """Raised when reactivating a milestone that is pending or not the last completed one."""
    pass


class FieldLocked(TransitWorkflowError):
    """Raised when editing date/details of a completed or not-yet-reachable milestone."""
    pass


class NotFound(TransitWorkflowError):
    """Raised for an unknown transit file id, milestone key or event index."""
    pass


class InvalidFieldValue(TransitWorkflowError):
    """Raised for a transit file field outside its allowed values, or a status change progress does not support."""
    pass
