"""
Error taxonomy for the mood data layer

Callers map these to user-visible behaviour:
NotFoundError -> 404-style response, TransientStoreError -> generic failure.
"""

from typing import Dict, Optional


class MoodStoreError(Exception):
    """Base class for all data-layer errors"""


class NotFoundError(MoodStoreError):
    """
    Record absent, or present but owned by someone else.

    The two cases are indistinguishable to the caller.
    """

    def __init__(self, message: str = "record not found"):
        super().__init__(message)


class ValidationError(MoodStoreError):
    """Malformed input reaching the data layer (field -> message)"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"validation failed: {summary}")


class TransientStoreError(MoodStoreError):
    """Connectivity failure, timeout, or a constraint violation unrelated to ownership"""


class DuplicateConstraintError(MoodStoreError):
    """Unique-constraint violation (e.g. duplicate account email)"""

    def __init__(self, message: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint


class FieldErrors:
    """
    Collects field errors, keeping the first message recorded per field.

    Usage:
        v = FieldErrors()
        v.check(title.strip() != "", "title", "must be provided")
        v.raise_if_any()
    """

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def add(self, field: str, message: str):
        if field not in self.errors:
            self.errors[field] = message

    def check(self, ok: bool, field: str, message: str):
        if not ok:
            self.add(field, message)

    @property
    def valid(self) -> bool:
        return not self.errors

    def raise_if_any(self):
        if self.errors:
            raise ValidationError(self.errors)
