"""Structural checks applied to every record before reconciliation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from quizport.domain.model import QuestionType, UpsertStrategy

from .errors import UnsupportedQuestionTypeError, ValidationError

if TYPE_CHECKING:
    from .records import ImportRecord, QuestionRecord

MIN_TITLE_LENGTH: Final = 3
MAX_TITLE_LENGTH: Final = 100
MAX_DESCRIPTION_LENGTH: Final = 1000
MIN_QUESTION_TEXT_LENGTH: Final = 3
MAX_QUESTION_TEXT_LENGTH: Final = 1000
MIN_ESTIMATED_TIME: Final = 1
MAX_ESTIMATED_TIME: Final = 180
MAX_QUESTIONS_PER_QUIZ: Final = 50


def validate_record(record: ImportRecord, strategy: UpsertStrategy) -> None:
    if strategy is UpsertStrategy.UPSERT_BY_ID and record.id is None:
        raise ValidationError("UPSERT_BY_ID requires quiz id")

    _validate_title(record.title)
    if record.description is not None and len(record.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Quiz description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    estimated = record.estimated_time_minutes
    if estimated is not None and not MIN_ESTIMATED_TIME <= estimated <= MAX_ESTIMATED_TIME:
        raise ValidationError(
            f"Estimated time must be between {MIN_ESTIMATED_TIME} and "
            f"{MAX_ESTIMATED_TIME} minutes"
        )
    if any(not name or not name.strip() for name in record.tag_names):
        raise ValidationError("Tag names must not be blank")

    if record.questions is None:
        return
    if len(record.questions) > MAX_QUESTIONS_PER_QUIZ:
        raise ValidationError(f"Quiz has too many questions (max {MAX_QUESTIONS_PER_QUIZ})")
    for question in record.questions:
        validate_question(question)


def validate_question(question: QuestionRecord) -> None:
    if question.type is None:
        raise ValidationError("Question type is required")
    if question.type is QuestionType.HOTSPOT:
        raise UnsupportedQuestionTypeError("HOTSPOT questions are not supported for import")
    text = (question.text or "").strip()
    if not text:
        raise ValidationError("Question text is required")
    if not MIN_QUESTION_TEXT_LENGTH <= len(text) <= MAX_QUESTION_TEXT_LENGTH:
        raise ValidationError(
            f"Question text must be between {MIN_QUESTION_TEXT_LENGTH} and "
            f"{MAX_QUESTION_TEXT_LENGTH} characters"
        )
    if question.content is not None and not isinstance(question.content, Mapping):
        raise ValidationError("Question content must be an object")
    validate_content(question.type, question.content)


def _validate_title(title: str | None) -> None:
    if title is None or not title.strip():
        raise ValidationError("Quiz title is required")
    length = len(title.strip())
    if not MIN_TITLE_LENGTH <= length <= MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Quiz title must be between {MIN_TITLE_LENGTH} and {MAX_TITLE_LENGTH} characters"
        )


def validate_content(question_type: QuestionType, content: Mapping[str, Any] | None) -> None:
    """Check the structural shape of ``content`` for ``question_type``.

    Only shape is checked: which keys exist and what they hold. Whether the
    answers make sense is left to the author.
    """

    if question_type is QuestionType.OPEN:
        return
    if content is None:
        raise ValidationError(f"{question_type} question requires content")

    match question_type:
        case QuestionType.MCQ_SINGLE | QuestionType.MCQ_MULTI:
            for option in _object_list(content, "options", question_type):
                _require_text(option, "text", f"{question_type} option")
                _require_bool(option, "correct", f"{question_type} option")
        case QuestionType.TRUE_FALSE:
            _require_bool(content, "answer", str(question_type))
        case QuestionType.FILL_GAP:
            for gap in _object_list(content, "gaps", question_type):
                _require_id(gap, f"{question_type} gap")
                _require_text(gap, "answer", f"{question_type} gap")
        case QuestionType.ORDERING:
            items = _object_list(content, "items", question_type)
            ids = [_require_id(item, f"{question_type} item") for item in items]
            for item in items:
                _require_text(item, "text", f"{question_type} item")
            if any(ids.count(item_id) != 1 for item_id in ids):
                raise ValidationError("ORDERING item ids must be unique")
            order = content.get("correctOrder")
            if (
                not isinstance(order, list)
                or len(order) != len(ids)
                or any(order.count(item_id) != 1 for item_id in ids)
            ):
                raise ValidationError("ORDERING correctOrder must list every item id once")
        case QuestionType.COMPLIANCE:
            for statement in _object_list(content, "statements", question_type):
                _require_text(statement, "text", f"{question_type} statement")
                _require_bool(statement, "compliant", f"{question_type} statement")
        case QuestionType.MATCHING:
            _object_list(content, "left", question_type)
            _object_list(content, "right", question_type)
        case _:
            raise UnsupportedQuestionTypeError(f"{question_type} questions are not supported")


def _object_list(
    content: Mapping[str, Any], key: str, question_type: QuestionType
) -> list[Mapping[str, Any]]:
    value = content.get(key)
    if not isinstance(value, list) or not value:
        raise ValidationError(f"{question_type} content requires a non-empty '{key}' list")
    if not all(isinstance(entry, Mapping) for entry in value):
        raise ValidationError(f"{question_type} '{key}' entries must be objects")
    return value


def _require_text(entry: Mapping[str, Any], key: str, label: str) -> None:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} requires '{key}' text")


def _require_bool(entry: Mapping[str, Any], key: str, label: str) -> None:
    if not isinstance(entry.get(key), bool):
        raise ValidationError(f"{label} requires boolean '{key}'")


def _require_id(entry: Mapping[str, Any], label: str) -> object:
    value = entry.get("id")
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{label} requires an 'id'")
    return value
