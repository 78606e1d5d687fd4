"""Public domain model surface."""

from __future__ import annotations

from quizport.domain.model.actor import Actor
from quizport.domain.model.catalog import Category, Question, Quiz, Tag
from quizport.domain.model.entity import Entity, EntityRef, new_id
from quizport.domain.model.enums import (
    Difficulty,
    EntityType,
    ImportFormat,
    QuestionType,
    QuizStatus,
    UpsertStrategy,
    Visibility,
)

__all__ = [
    "Actor",
    "Category",
    "Difficulty",
    "Entity",
    "EntityRef",
    "EntityType",
    "ImportFormat",
    "Question",
    "QuestionType",
    "Quiz",
    "QuizStatus",
    "Tag",
    "UpsertStrategy",
    "Visibility",
    "new_id",
]
