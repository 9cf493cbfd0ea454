"""
Error types raised by the submission parser and the student store.

Route handlers branch on these types; none of them inspect driver error
codes or message text themselves.
"""

import enum
from typing import Optional, Sequence


class StorageErrorKind(str, enum.Enum):
    DUPLICATE_KEY = "duplicate_key"
    OTHER = "other"


class StorageError(Exception):
    """A database operation failed. `message` is the raw driver text."""

    def __init__(self, message: str, kind: StorageErrorKind = StorageErrorKind.OTHER):
        self.message = message
        self.kind = kind
        super().__init__(message)


class DuplicateKeyError(StorageError):
    """The insert violated the unique roll number constraint."""

    def __init__(self, message: str, roll_number: Optional[str] = None):
        super().__init__(message, kind=StorageErrorKind.DUPLICATE_KEY)
        self.roll_number = roll_number


class SubmissionValidationError(Exception):
    """A form submission is missing required fields or has unusable values."""

    def __init__(self, missing_fields: Sequence[str] = (), invalid_fields: Sequence[str] = ()):
        self.missing_fields = list(missing_fields)
        self.invalid_fields = list(invalid_fields)
        parts = []
        if self.missing_fields:
            parts.append("missing: {}".format(", ".join(self.missing_fields)))
        if self.invalid_fields:
            parts.append("invalid: {}".format(", ".join(self.invalid_fields)))
        super().__init__("; ".join(parts) or "invalid submission")
