from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

from quizport.domain.imports.hashing import (
    canonicalize,
    content_hash,
    import_content_hash,
    normalize_text,
    presentation_hash,
    quiz_content_hash,
)
from quizport.domain.model import Category, Difficulty, Question, QuestionType, Tag
from tests.helpers.catalog import make_question_record, make_quiz, make_record


def test_normalize_text_collapses_whitespace_and_case() -> None:
    assert normalize_text("  Hello\t  WORLD \n") == "hello world"
    assert normalize_text(None) == ""


def test_import_hash_ignores_ids_and_timestamps() -> None:
    record = make_record()
    variant = replace(
        record,
        id=uuid4(),
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        updated_at=datetime(2024, 2, 1, tzinfo=UTC),
    )

    assert import_content_hash(record) == import_content_hash(variant)


def test_import_hash_is_stable_under_reordering() -> None:
    first = make_question_record("First question")
    second = make_question_record("Second question")
    record = make_record(tag_names=("Algebra", "basics"), questions=(first, second))
    reordered = make_record(tag_names=("BASICS", "algebra"), questions=(second, first))

    assert import_content_hash(record) == import_content_hash(reordered)


def test_import_hash_detects_content_changes() -> None:
    record = make_record()

    assert import_content_hash(record) != import_content_hash(replace(record, title="Other"))
    assert import_content_hash(record) != import_content_hash(
        replace(record, category_name="History")
    )


def test_import_hash_is_upper_case_sha256() -> None:
    digest = import_content_hash(make_record())

    assert len(digest) == 64
    assert digest == digest.upper()


def test_canonicalize_sorts_unordered_arrays_by_id() -> None:
    content = {
        "options": [{"id": "opt_2", "text": "b"}, {"id": "opt_1", "text": "a"}],
        "correctOrder": [2, 1],
    }

    canonical = canonicalize(content)

    assert canonical == {
        "correctOrder": [2, 1],
        "options": [{"id": "opt_1", "text": "a"}, {"id": "opt_2", "text": "b"}],
    }


def test_canonicalize_keeps_item_order_without_correct_order() -> None:
    content = {"items": [{"id": 2, "text": "b"}, {"id": 1, "text": "a"}]}

    assert canonicalize(content) == content


def test_canonicalize_sorts_items_when_correct_order_present() -> None:
    content = {
        "items": [{"id": 2, "text": "b"}, {"id": 1, "text": "a"}],
        "correctOrder": [2, 1],
    }

    canonical = canonicalize(content)

    assert canonical["items"] == [{"id": 1, "text": "a"}, {"id": 2, "text": "b"}]  # type: ignore[index]


def test_quiz_content_hash_uses_tag_identity() -> None:
    category = Category(name="Math")
    creator_id = uuid4()
    quiz = make_quiz(creator_id=creator_id, category=category)
    tagged = make_quiz(creator_id=creator_id, category=category, tags={Tag(name="algebra")})

    assert quiz_content_hash(quiz) != quiz_content_hash(tagged)


def test_content_hash_ignores_question_order() -> None:
    first = Question(type=QuestionType.OPEN, text="One", content={"answer": "1"})
    second = Question(type=QuestionType.OPEN, text="Two", content={"answer": "2"})

    forward = content_hash(
        title="Quiz",
        description=None,
        difficulty=Difficulty.EASY,
        tags=(),
        questions=[first, second],
    )
    backward = content_hash(
        title="quiz ",
        description=None,
        difficulty=Difficulty.EASY,
        tags=(),
        questions=[second, first],
    )

    assert forward == backward


def test_presentation_hash_tracks_title_and_description() -> None:
    base = presentation_hash(title="Quiz", description="Intro")

    assert base == presentation_hash(title=" quiz", description="INTRO")
    assert base != presentation_hash(title="Quiz", description="Other intro")
