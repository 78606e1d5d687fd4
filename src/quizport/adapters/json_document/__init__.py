"""Structured document (JSON) import channel."""

from __future__ import annotations

from .parser import JsonImportParser
from .schema import QuestionDocument, QuizDocument
from .translator import strip_media_fields, to_import_record

__all__ = [
    "JsonImportParser",
    "QuestionDocument",
    "QuizDocument",
    "strip_media_fields",
    "to_import_record",
]
