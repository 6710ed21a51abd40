"""
Error classification system for the transaction application engine.

This module provides a structured exception hierarchy separating lookup
failures (the caller should redirect to a safe landing view) from system
failures (broken invariants in the lifecycle or the store).
"""

from .lookup import (
    LookupFailureError,
    NotFoundError,
    TypeMismatchError,
    UnknownTransactionTypeError,
)
from .system_failures import (
    SystemFailureError,
    StatusTransitionError,
    PersistenceError,
    ImmutableFieldError,
    SubmissionError,
    StaleWriteWarning,
)

__all__ = [
    # Lookup Failures
    "LookupFailureError",
    "NotFoundError",
    "TypeMismatchError",
    "UnknownTransactionTypeError",
    # System Failures
    "SystemFailureError",
    "StatusTransitionError",
    "PersistenceError",
    "ImmutableFieldError",
    "SubmissionError",
    # Warnings
    "StaleWriteWarning",
]
