"""Turn import records into quiz state.

Creation builds a new ``Quiz``. An update is split into two steps: ``plan_merge``
computes the merged state, hashes and review-workflow transition without
touching the quiz, and ``apply_merge`` writes that plan onto the quiz. Dry runs
stop after planning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from quizport.domain.model import Difficulty, Question, Quiz, QuizStatus, Visibility

from .hashing import content_hash, presentation_hash, quiz_content_hash

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from quizport.domain.model import Category, Tag

    from .records import ImportRecord, QuestionRecord


@dataclass(frozen=True, slots=True)
class ResolvedReferences:
    category: Category
    tags: frozenset[Tag]


def effective_visibility(requested: Visibility | None, *, moderator: bool) -> Visibility:
    """PUBLIC is only reachable for moderators; everyone else lands on PRIVATE."""

    if requested is Visibility.PUBLIC and moderator:
        return Visibility.PUBLIC
    return Visibility.PRIVATE


def build_questions(records: Iterable[QuestionRecord]) -> list[Question]:
    questions: list[Question] = []
    for record in records:
        if record.type is None or record.text is None:
            continue
        questions.append(
            Question(
                type=record.type,
                text=record.text.strip(),
                difficulty=record.difficulty or Difficulty.MEDIUM,
                content=dict(record.content) if record.content is not None else None,
                hint=record.hint,
                explanation=record.explanation,
                attachment_url=record.attachment_url,
            )
        )
    return questions


def build_quiz(  # noqa: PLR0913
    record: ImportRecord,
    *,
    creator_id: UUID,
    references: ResolvedReferences,
    moderator: bool,
    now: datetime,
    quiz_id: UUID | None = None,
    import_hash: str | None = None,
) -> Quiz:
    """Create a quiz from ``record``; PUBLISHED only for a moderator asking for PUBLIC."""

    visibility = effective_visibility(record.visibility, moderator=moderator)
    quiz = Quiz(
        creator_id=creator_id,
        category=references.category,
        title=(record.title or "").strip(),
        description=record.description,
        visibility=visibility,
        difficulty=record.difficulty or Difficulty.MEDIUM,
        estimated_time=record.estimated_time_minutes,
        status=QuizStatus.PUBLISHED if visibility is Visibility.PUBLIC else QuizStatus.DRAFT,
        tags=set(references.tags),
        questions=build_questions(record.questions or ()),
        import_content_hash=import_hash,
        created_at=now,
        updated_at=now,
    )
    if quiz_id is not None:
        quiz.id = quiz_id
    quiz.content_hash = quiz_content_hash(quiz)
    quiz.presentation_hash = presentation_hash(title=quiz.title, description=quiz.description)
    return quiz


@dataclass(frozen=True, slots=True, kw_only=True)
class MergePlan:
    """Fully computed state of a quiz after reconciling one record."""

    title: str
    description: str | None
    visibility: Visibility
    difficulty: Difficulty
    estimated_time: int | None
    category: Category
    tags: frozenset[Tag]
    questions: list[Question] | None
    content_hash: str
    presentation_hash: str
    status: QuizStatus
    clear_review: bool
    content_changed: bool
    import_hash: str | None = None


def plan_merge(
    quiz: Quiz,
    record: ImportRecord,
    *,
    references: ResolvedReferences,
    moderator: bool,
    import_hash: str | None = None,
) -> MergePlan:
    title = (record.title or "").strip()
    difficulty = record.difficulty or Difficulty.MEDIUM
    questions = build_questions(record.questions) if record.questions is not None else None

    new_content_hash = content_hash(
        title=title,
        description=record.description,
        difficulty=difficulty,
        tags=references.tags,
        questions=questions if questions is not None else quiz.questions,
    )
    previous_hash = quiz.content_hash or quiz_content_hash(quiz)
    changed = previous_hash.upper() != new_content_hash.upper()

    status, clear_review = _next_status(quiz.status, content_changed=changed)
    return MergePlan(
        title=title,
        description=record.description,
        visibility=effective_visibility(record.visibility, moderator=moderator),
        difficulty=difficulty,
        estimated_time=record.estimated_time_minutes,
        category=references.category,
        tags=references.tags,
        questions=questions,
        content_hash=new_content_hash,
        presentation_hash=presentation_hash(title=title, description=record.description),
        status=status,
        clear_review=clear_review,
        content_changed=changed,
        import_hash=import_hash,
    )


def _next_status(current: QuizStatus, *, content_changed: bool) -> tuple[QuizStatus, bool]:
    if current is QuizStatus.PENDING_REVIEW:
        # any reconciled update sends a quiz under review back to its author
        return QuizStatus.DRAFT, False
    if current is QuizStatus.PUBLISHED and content_changed:
        return QuizStatus.PENDING_REVIEW, True
    return current, False


def apply_merge(quiz: Quiz, plan: MergePlan, *, now: datetime) -> None:
    quiz.title = plan.title
    quiz.description = plan.description
    quiz.visibility = plan.visibility
    quiz.difficulty = plan.difficulty
    quiz.estimated_time = plan.estimated_time
    quiz.category = plan.category
    quiz.tags = set(plan.tags)
    if plan.questions is not None:
        quiz.questions = plan.questions
    quiz.content_hash = plan.content_hash
    quiz.presentation_hash = plan.presentation_hash
    quiz.status = plan.status
    if plan.clear_review:
        quiz.clear_review()
    if plan.import_hash is not None:
        quiz.import_content_hash = plan.import_hash
    quiz.updated_at = now
