"""Canonical, format-independent records produced by import parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from quizport.domain.model import UpsertStrategy

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from quizport.domain.model import Difficulty, QuestionType, Visibility

DEFAULT_SCHEMA_VERSION = 1
DEFAULT_MAX_ITEMS = 100


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportOptions:
    strategy: UpsertStrategy = UpsertStrategy.CREATE_ONLY
    dry_run: bool = False
    auto_create_tags: bool = False
    auto_create_category: bool = False
    max_items: int = DEFAULT_MAX_ITEMS

    def __post_init__(self) -> None:
        if self.max_items <= 0:
            raise ValueError("max_items must be positive")


@dataclass(frozen=True, slots=True, kw_only=True)
class QuestionRecord:
    type: QuestionType | None
    text: str | None
    id: UUID | None = None
    difficulty: Difficulty | None = None
    content: dict[str, Any] | None = None
    hint: str | None = None
    explanation: str | None = None
    attachment_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportRecord:
    """One quiz awaiting reconciliation.

    ``questions`` is ``None`` when the payload says nothing about questions, in
    which case the persisted set is left untouched. Any tuple, including an
    empty one, replaces the persisted set.
    """

    title: str | None
    schema_version: int = DEFAULT_SCHEMA_VERSION
    id: UUID | None = None
    description: str | None = None
    visibility: Visibility | None = None
    difficulty: Difficulty | None = None
    estimated_time_minutes: int | None = None
    tag_names: tuple[str, ...] = field(default_factory=tuple[str, ...])
    category_name: str | None = None
    questions: tuple[QuestionRecord, ...] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
