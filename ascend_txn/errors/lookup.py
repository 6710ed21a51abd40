"""
Lookup failure classifications.

These exceptions are fatal to the calling operation. The presentation layer
is expected to redirect to a safe landing view rather than render a broken
transaction.
"""

from typing import Optional, Dict, Any


class LookupFailureError(Exception):
    """Base class for failures resolving a transaction for a caller."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False
        self.redirect_to_safe_view = True


class NotFoundError(LookupFailureError):
    """Unknown transaction id."""

    def __init__(self, message: str, transaction_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.transaction_id = transaction_id


class TypeMismatchError(LookupFailureError):
    """Route/context transaction type does not match the stored transaction."""

    def __init__(self, message: str, transaction_id: Optional[str] = None,
                 expected_type: Optional[str] = None,
                 actual_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.transaction_id = transaction_id
        self.expected_type = expected_type
        self.actual_type = actual_type


class UnknownTransactionTypeError(LookupFailureError):
    """Requested transaction type is outside the supported enumeration."""

    def __init__(self, message: str, value: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value = value
