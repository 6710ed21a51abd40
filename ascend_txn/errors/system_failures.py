"""
System failure error classifications.

These exceptions represent broken lifecycle or storage invariants. They are
programming or integration errors, not user input problems.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class StatusTransitionError(SystemFailureError):
    """Status change that would move a transaction backwards or skip a state."""

    def __init__(self, message: str, current_status: Optional[str] = None,
                 attempted_status: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_status = current_status
        self.attempted_status = attempted_status


class PersistenceError(SystemFailureError):
    """Store operation failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ImmutableFieldError(PersistenceError):
    """Attempt to rewrite a field fixed at creation (id, type, date_initiated)."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, operation="update", **kwargs)
        self.field = field


class SubmissionError(SystemFailureError):
    """Submit invoked outside the final, validated step of an editable draft."""

    def __init__(self, message: str, transaction_id: Optional[str] = None,
                 step_index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.transaction_id = transaction_id
        self.step_index = step_index


class StaleWriteWarning(UserWarning):
    """A store update was based on an outdated version; last write wins."""

    def __init__(self, message: str, transaction_id: Optional[str] = None,
                 expected_version: Optional[int] = None,
                 actual_version: Optional[int] = None):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.expected_version = expected_version
        self.actual_version = actual_version
