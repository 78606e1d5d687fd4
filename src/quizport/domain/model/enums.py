"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    CATEGORY = "category"
    TAG = "tag"
    QUIZ = "quiz"
    QUESTION = "question"


class Visibility(StrEnum):
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"


class Difficulty(StrEnum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class QuizStatus(StrEnum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    PUBLISHED = "PUBLISHED"


class QuestionType(StrEnum):
    MCQ_SINGLE = "MCQ_SINGLE"
    MCQ_MULTI = "MCQ_MULTI"
    TRUE_FALSE = "TRUE_FALSE"
    OPEN = "OPEN"
    FILL_GAP = "FILL_GAP"
    ORDERING = "ORDERING"
    COMPLIANCE = "COMPLIANCE"
    MATCHING = "MATCHING"
    HOTSPOT = "HOTSPOT"


class UpsertStrategy(StrEnum):
    """How an incoming record is reconciled against the catalog."""

    CREATE_ONLY = "CREATE_ONLY"
    UPSERT_BY_ID = "UPSERT_BY_ID"
    UPSERT_BY_CONTENT_HASH = "UPSERT_BY_CONTENT_HASH"
    SKIP_ON_DUPLICATE = "SKIP_ON_DUPLICATE"


class ImportFormat(StrEnum):
    JSON = "json"
    XLSX = "xlsx"
