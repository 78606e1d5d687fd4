"""Failure taxonomy for quiz imports.

Parse-time failures (``FormatError``, ``LimitExceededError``) abort a run before
any record is processed. ``RecordError`` subclasses describe a single record and
are downgraded to summary entries by the engine.
"""

from __future__ import annotations


class ImportFailure(Exception):
    """Base class for all import failures."""


class FormatError(ImportFailure):
    """Raised when an import payload cannot be decoded."""


class UnsupportedQuestionTypeError(FormatError):
    """Raised when a payload carries a question type the channel cannot import."""


class LimitExceededError(ImportFailure):
    """Raised when a payload holds more quizzes than the configured cap."""

    def __init__(self, max_items: int) -> None:
        super().__init__(f"Import file exceeds max items limit of {max_items}")
        self.max_items = max_items


class RecordError(ImportFailure):
    """Base class for failures scoped to one import record."""


class ValidationError(RecordError):
    """Raised when a record is structurally invalid."""


class NotFoundError(RecordError):
    """Raised when a referenced entity does not exist and may not be created."""


class ConflictError(RecordError):
    """Raised when a uniqueness race could not be recovered by a single retry."""


class ForbiddenError(RecordError):
    """Raised when the acting identity may not modify the targeted quiz."""
