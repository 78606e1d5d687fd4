"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from quizport.domain.model import Category, Quiz, Tag

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID


class DuplicateEntityError(RuntimeError):
    """Raised by a repository when a write violates a uniqueness constraint."""


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class QuizRepository(Repository[Quiz], Protocol):
    """Persistence contract for quizzes."""

    def get_with_associations(self, quiz_id: UUID) -> Quiz | None:
        """Return the quiz with its tags and questions loaded."""
        ...

    def find_by_creator_and_import_hash(self, creator_id: UUID, import_hash: str) -> Quiz | None:
        ...

    def exists(self, quiz_id: UUID) -> bool: ...


@runtime_checkable
class CategoryRepository(Repository[Category], Protocol):
    """Persistence contract for categories; names compare case-insensitively."""

    def get(self, category_id: UUID) -> Category | None: ...

    def find_by_name(self, name: str) -> Category | None: ...


@runtime_checkable
class TagRepository(Protocol):
    """Persistence contract for tags; names compare case-insensitively."""

    def find_by_names(self, names: Sequence[str]) -> list[Tag]: ...

    def add_all(self, tags: Iterable[Tag]) -> None: ...
