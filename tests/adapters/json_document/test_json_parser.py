from __future__ import annotations

import json
from uuid import uuid4

import pytest

from quizport.adapters.json_document import JsonImportParser, strip_media_fields
from quizport.domain.imports import (
    FormatError,
    ImportOptions,
    ImportRecord,
    LimitExceededError,
    UnsupportedQuestionTypeError,
)
from quizport.domain.model import Difficulty, QuestionType, Visibility


def _parse(document: object, *, max_items: int = 100) -> list[ImportRecord]:
    payload = json.dumps(document).encode()
    return JsonImportParser().parse(payload, ImportOptions(max_items=max_items))


def _quiz(**overrides: object) -> dict[str, object]:
    quiz: dict[str, object] = {
        "title": "Capitals of Europe",
        "difficulty": "easy",
        "visibility": "Public",
        "estimatedTime": 15,
        "tags": ["geo", "  ", "europe"],
        "category": "Geography",
    }
    quiz.update(overrides)
    return quiz


def test_array_payload() -> None:
    quiz_id = uuid4()
    (record,) = _parse([_quiz(id=str(quiz_id), unknownField=True)])

    assert record.id == quiz_id
    assert record.title == "Capitals of Europe"
    assert record.difficulty is Difficulty.EASY
    assert record.visibility is Visibility.PUBLIC
    assert record.estimated_time_minutes == 15
    assert record.tag_names == ("geo", "europe")
    assert record.category_name == "Geography"
    assert record.questions is None
    assert record.schema_version == 1


def test_wrapper_schema_version_overrides_items() -> None:
    records = _parse({"schemaVersion": "2", "quizzes": [_quiz(schemaVersion=5)]})

    assert records[0].schema_version == 2


def test_item_schema_version_used_without_wrapper_version() -> None:
    (record,) = _parse([_quiz(schemaVersion=4)])

    assert record.schema_version == 4


def test_zero_schema_version_is_kept() -> None:
    (from_wrapper,) = _parse({"schemaVersion": 0, "quizzes": [_quiz(schemaVersion=5)]})
    (from_item,) = _parse([_quiz(schemaVersion=0)])

    assert from_wrapper.schema_version == 0
    assert from_item.schema_version == 0


@pytest.mark.parametrize("payload", [b"", b"   "])
def test_empty_payload_yields_no_records(payload: bytes) -> None:
    assert JsonImportParser().parse(payload, ImportOptions()) == []


def test_wrapper_without_quizzes_yields_no_records() -> None:
    assert _parse({"schemaVersion": 1}) == []


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        (b"{not json", "Malformed JSON import payload"),
        (b'"just a string"', "must be a JSON array or object wrapper"),
        (b'{"quizzes": {"title": "x"}}', "Expected 'quizzes' to be an array"),
        (b'[1, 2]', "Each quiz item must be a JSON object"),
        (b'{"schemaVersion": "two", "quizzes": []}', "schemaVersion must be a number"),
    ],
)
def test_malformed_payloads(payload: bytes, message: str) -> None:
    with pytest.raises(FormatError, match=message):
        JsonImportParser().parse(payload, ImportOptions())


def test_invalid_field_names_position() -> None:
    with pytest.raises(FormatError, match="Invalid quiz at position 1: difficulty"):
        _parse([_quiz(), _quiz(difficulty="impossible")])


def test_blank_id_category_and_non_positive_time_become_none() -> None:
    (record,) = _parse([_quiz(id="  ", category="   ", estimatedTime=0)])

    assert record.id is None
    assert record.category_name is None
    assert record.estimated_time_minutes is None


def test_unparsable_timestamps_are_ignored() -> None:
    (record,) = _parse([_quiz(createdAt="last week", updatedAt="2024-05-01T10:00:00Z")])

    assert record.created_at is None
    assert record.updated_at is not None


def test_questions_are_translated() -> None:
    question = {
        "type": "mcq_single",
        "questionText": "Capital of France?",
        "difficulty": "HARD",
        "content": {
            "options": [{"id": "a", "text": "Paris", "correct": True}],
            "media": {"assetId": "x1", "cdnUrl": "https://cdn/x1", "width": 10},
        },
        "attachmentUrl": "https://cdn.quizzence.com/img.png",
    }

    (record,) = _parse([_quiz(questions=[question])])

    (parsed,) = record.questions
    assert parsed.type is QuestionType.MCQ_SINGLE
    assert parsed.text == "Capital of France?"
    assert parsed.difficulty is Difficulty.HARD
    assert parsed.content == {
        "options": [{"id": "a", "text": "Paris", "correct": True}],
        "media": {"assetId": "x1"},
    }
    assert parsed.attachment_url == "https://cdn.quizzence.com/img.png"


def test_empty_question_list_is_kept() -> None:
    (record,) = _parse([_quiz(questions=[])])

    assert record.questions == ()


def test_hotspot_questions_are_unsupported() -> None:
    question = {"type": "HOTSPOT", "questionText": "Click the capital"}

    with pytest.raises(UnsupportedQuestionTypeError):
        _parse([_quiz(questions=[question])])


def test_foreign_attachment_host_is_rejected() -> None:
    question = {
        "type": "OPEN",
        "questionText": "Describe the picture",
        "attachmentUrl": "https://evil.example.com/img.png",
    }

    with pytest.raises(FormatError, match="attachmentUrl must use host cdn.quizzence.com"):
        _parse([_quiz(questions=[question])])


def test_item_cap() -> None:
    with pytest.raises(LimitExceededError):
        _parse([_quiz(), _quiz(), _quiz()], max_items=2)

    assert len(_parse([_quiz(), _quiz()], max_items=2)) == 2


def test_strip_media_fields_only_touches_media_objects() -> None:
    content = {
        "width": 3,
        "items": [{"id": 1, "media": {"assetId": "a", "mimeType": "image/png"}}],
    }

    assert strip_media_fields(content) == {
        "width": 3,
        "items": [{"id": 1, "media": {"assetId": "a"}}],
    }
