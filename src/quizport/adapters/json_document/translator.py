"""Translate validated JSON documents into import records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from quizport.adapters.attachments import validate_attachment_url
from quizport.domain.imports.errors import UnsupportedQuestionTypeError
from quizport.domain.imports.records import DEFAULT_SCHEMA_VERSION, ImportRecord, QuestionRecord
from quizport.domain.model import QuestionType

if TYPE_CHECKING:
    from .schema import QuestionDocument, QuizDocument

# Server-side enrichment of media references; never accepted from an import.
ENRICHED_MEDIA_FIELDS: Final[frozenset[str]] = frozenset({"cdnUrl", "width", "height", "mimeType"})


def to_import_record(
    document: QuizDocument,
    *,
    schema_version: int | None,
    attachment_host: str,
) -> ImportRecord:
    """``schema_version`` comes from the document wrapper and overrides the item's own."""

    questions = None
    if document.questions is not None:
        questions = tuple(
            to_question_record(question, attachment_host=attachment_host)
            for question in document.questions
        )
    if schema_version is None:
        schema_version = document.schema_version
    return ImportRecord(
        schema_version=DEFAULT_SCHEMA_VERSION if schema_version is None else schema_version,
        id=document.id,
        title=document.title,
        description=document.description,
        visibility=document.visibility,
        difficulty=document.difficulty,
        estimated_time_minutes=document.estimated_time,
        tag_names=tuple(document.tags or ()),
        category_name=document.category,
        questions=questions,
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


def to_question_record(question: QuestionDocument, *, attachment_host: str) -> QuestionRecord:
    if question.type is QuestionType.HOTSPOT:
        raise UnsupportedQuestionTypeError("HOTSPOT questions are not supported for import")
    return QuestionRecord(
        id=question.id,
        type=question.type,
        difficulty=question.difficulty,
        text=question.question_text,
        content=strip_media_fields(question.content) if question.content is not None else None,
        hint=question.hint,
        explanation=question.explanation,
        attachment_url=validate_attachment_url(question.attachment_url, host=attachment_host),
    )


def strip_media_fields(content: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of ``content`` without enriched fields in nested ``media`` objects."""

    return {key: _strip(value, media=key == "media") for key, value in content.items()}


def _strip(node: object, *, media: bool = False) -> object:
    if isinstance(node, Mapping):
        return {
            key: _strip(value, media=key == "media")
            for key, value in node.items()
            if not (media and key in ENRICHED_MEDIA_FIELDS)
        }
    if isinstance(node, list):
        return [_strip(item) for item in node]
    return node
