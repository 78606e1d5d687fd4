"""Pydantic models describing the JSON import document."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quizport.domain.model import Difficulty, QuestionType, Visibility


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _enum_token(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped.upper() or None
    return value


def _lenient_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class DocumentBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class QuestionDocument(DocumentBaseModel):
    id: UUID | None = None
    type: QuestionType | None = None
    difficulty: Difficulty | None = None
    question_text: str | None = Field(default=None, alias="questionText")
    content: dict[str, Any] | None = None
    hint: str | None = None
    explanation: str | None = None
    attachment_url: str | None = Field(default=None, alias="attachmentUrl")

    _normalize_id = field_validator("id", mode="before")(_blank_to_none)
    _normalize_enums = field_validator("type", "difficulty", mode="before")(_enum_token)


class QuizDocument(DocumentBaseModel):
    schema_version: int | None = Field(default=None, alias="schemaVersion")
    id: UUID | None = None
    title: str | None = None
    description: str | None = None
    visibility: Visibility | None = None
    difficulty: Difficulty | None = None
    estimated_time: int | None = Field(default=None, alias="estimatedTime")
    tags: list[str] | None = None
    category: str | None = None
    questions: list[QuestionDocument] | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    _normalize_blanks = field_validator("id", "category", mode="before")(_blank_to_none)
    _normalize_enums = field_validator("visibility", "difficulty", mode="before")(_enum_token)
    _normalize_timestamps = field_validator("created_at", "updated_at", mode="before")(
        _lenient_timestamp
    )

    @field_validator("estimated_time", mode="after")
    @classmethod
    def _positive_or_none(cls, value: int | None) -> int | None:
        if value is None or value <= 0:
            return None
        return value

    @field_validator("tags", mode="after")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [tag.strip() for tag in value if tag.strip()]
