from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from quizport.domain.imports import ResolvedReferences, apply_merge, build_quiz, plan_merge
from quizport.domain.imports.merge import effective_visibility
from quizport.domain.model import Category, QuizStatus, Tag, Visibility
from tests.helpers.catalog import make_question_record, make_quiz, make_record

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def references() -> ResolvedReferences:
    return ResolvedReferences(category=Category(name="Math"), tags=frozenset())


@pytest.mark.parametrize(
    ("requested", "moderator", "expected"),
    [
        (Visibility.PUBLIC, True, Visibility.PUBLIC),
        (Visibility.PUBLIC, False, Visibility.PRIVATE),
        (Visibility.PRIVATE, True, Visibility.PRIVATE),
        (None, True, Visibility.PRIVATE),
    ],
)
def test_effective_visibility(
    requested: Visibility | None, moderator: bool, expected: Visibility
) -> None:
    assert effective_visibility(requested, moderator=moderator) is expected


def test_moderator_public_request_creates_published_quiz(references: ResolvedReferences) -> None:
    record = make_record(visibility=Visibility.PUBLIC)

    quiz = build_quiz(
        record, creator_id=uuid4(), references=references, moderator=True, now=NOW
    )

    assert quiz.visibility is Visibility.PUBLIC
    assert quiz.status is QuizStatus.PUBLISHED


def test_non_moderator_public_request_lands_on_private_draft(
    references: ResolvedReferences,
) -> None:
    record = make_record(visibility=Visibility.PUBLIC)

    quiz = build_quiz(
        record, creator_id=uuid4(), references=references, moderator=False, now=NOW
    )

    assert quiz.visibility is Visibility.PRIVATE
    assert quiz.status is QuizStatus.DRAFT


def test_build_quiz_sets_hashes_and_supplied_id(references: ResolvedReferences) -> None:
    quiz_id = uuid4()

    quiz = build_quiz(
        make_record(),
        creator_id=uuid4(),
        references=references,
        moderator=False,
        now=NOW,
        quiz_id=quiz_id,
        import_hash="ABC",
    )

    assert quiz.id == quiz_id
    assert quiz.import_content_hash == "ABC"
    assert quiz.content_hash is not None
    assert quiz.presentation_hash is not None
    assert quiz.created_at == NOW
    assert len(quiz.questions) == 1


def test_null_questions_leave_persisted_set_untouched(references: ResolvedReferences) -> None:
    quiz = make_quiz(creator_id=uuid4(), category=references.category)
    original = quiz.questions
    original_items = list(original)
    record = replace(make_record(title="Renamed quiz"), questions=None)

    plan = plan_merge(quiz, record, references=references, moderator=False)
    apply_merge(quiz, plan, now=NOW)

    assert quiz.questions is original
    assert quiz.questions == original_items
    assert quiz.title == "Renamed quiz"


def test_empty_question_list_replaces_persisted_set(references: ResolvedReferences) -> None:
    quiz = make_quiz(creator_id=uuid4(), category=references.category)
    record = make_record(questions=())

    apply_merge(quiz, plan_merge(quiz, record, references=references, moderator=False), now=NOW)

    assert quiz.questions == []


def test_changed_published_quiz_goes_to_review(references: ResolvedReferences) -> None:
    quiz = make_quiz(
        creator_id=uuid4(),
        category=references.category,
        status=QuizStatus.PUBLISHED,
        visibility=Visibility.PUBLIC,
    )
    quiz.reviewed_at = NOW
    quiz.reviewed_by = uuid4()
    quiz.rejection_reason = "old"
    record = make_record(title="Completely new title", visibility=Visibility.PUBLIC)

    plan = plan_merge(quiz, record, references=references, moderator=True)
    apply_merge(quiz, plan, now=NOW)

    assert plan.content_changed
    assert quiz.status is QuizStatus.PENDING_REVIEW
    assert quiz.reviewed_at is None
    assert quiz.reviewed_by is None
    assert quiz.rejection_reason is None
    assert quiz.updated_at == NOW


def test_unchanged_published_quiz_stays_published(references: ResolvedReferences) -> None:
    quiz = make_quiz(
        creator_id=uuid4(),
        category=references.category,
        status=QuizStatus.PUBLISHED,
        visibility=Visibility.PUBLIC,
    )
    reviewer = uuid4()
    quiz.reviewed_by = reviewer
    record = replace(
        make_record(title=quiz.title, description=quiz.description, visibility=Visibility.PUBLIC),
        difficulty=quiz.difficulty,
        questions=None,
    )

    plan = plan_merge(quiz, record, references=references, moderator=True)
    apply_merge(quiz, plan, now=NOW)

    assert not plan.content_changed
    assert quiz.status is QuizStatus.PUBLISHED
    assert quiz.reviewed_by == reviewer


@pytest.mark.parametrize("questions", [None, (make_question_record("Brand new question"),)])
def test_pending_review_always_returns_to_draft(
    references: ResolvedReferences,
    questions: tuple[object, ...] | None,
) -> None:
    quiz = make_quiz(
        creator_id=uuid4(), category=references.category, status=QuizStatus.PENDING_REVIEW
    )
    record = replace(
        make_record(title=quiz.title, description=quiz.description),
        difficulty=quiz.difficulty,
        questions=questions,  # type: ignore[arg-type]
    )

    apply_merge(quiz, plan_merge(quiz, record, references=references, moderator=False), now=NOW)

    assert quiz.status is QuizStatus.DRAFT


def test_plan_does_not_touch_quiz(references: ResolvedReferences) -> None:
    quiz = make_quiz(creator_id=uuid4(), category=references.category)
    before = (quiz.title, quiz.content_hash, quiz.status, list(quiz.questions))

    plan_merge(quiz, make_record(title="Another title"), references=references, moderator=False)

    assert (quiz.title, quiz.content_hash, quiz.status, list(quiz.questions)) == before


def test_merge_overwrites_references_and_import_hash(references: ResolvedReferences) -> None:
    quiz = make_quiz(creator_id=uuid4(), category=Category(name="Old"), tags={Tag(name="old")})
    new_tag = Tag(name="new")
    resolved = ResolvedReferences(category=references.category, tags=frozenset({new_tag}))

    plan = plan_merge(quiz, make_record(), references=resolved, moderator=False, import_hash="H")
    apply_merge(quiz, plan, now=NOW)

    assert quiz.category is references.category
    assert quiz.tags == {new_tag}
    assert quiz.import_content_hash == "H"
