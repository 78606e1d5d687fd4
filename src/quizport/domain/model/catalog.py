"""Catalog aggregates: quizzes with their questions, categories and tags."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from quizport.domain.model.entity import Entity
from quizport.domain.model.enums import (
    Difficulty,
    EntityType,
    QuestionType,
    QuizStatus,
    Visibility,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Category(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CATEGORY

    name: str
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class Tag(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TAG

    name: str


@dataclass(eq=False, kw_only=True)
class Question(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.QUESTION

    type: QuestionType
    text: str
    difficulty: Difficulty = Difficulty.MEDIUM
    content: dict[str, Any] | None = None
    hint: str | None = None
    explanation: str | None = None
    attachment_url: str | None = None


@dataclass(eq=False, kw_only=True)
class Quiz(Entity):
    """A quiz owned by its creator.

    ``questions`` is owned by the quiz; replacing the list orphans the previous
    questions. ``import_content_hash`` is only set by hash-based import
    strategies and is unique per creator.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.QUIZ

    creator_id: UUID
    category: Category
    title: str
    description: str | None = None
    visibility: Visibility = Visibility.PRIVATE
    difficulty: Difficulty = Difficulty.MEDIUM
    estimated_time: int | None = None
    status: QuizStatus = QuizStatus.DRAFT

    tags: set[Tag] = field(default_factory=set["Tag"], repr=False)
    questions: list[Question] = field(default_factory=list["Question"], repr=False)

    content_hash: str | None = None
    presentation_hash: str | None = None
    import_content_hash: str | None = None

    reviewed_at: datetime | None = None
    reviewed_by: UUID | None = None
    rejection_reason: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_published(self) -> bool:
        return self.status is QuizStatus.PUBLISHED

    def clear_review(self) -> None:
        """Forget the outcome of the last moderation review."""
        self.reviewed_at = None
        self.reviewed_by = None
        self.rejection_reason = None
