"""Domain port definitions for adapters."""

from __future__ import annotations

from .access import ModerationPolicy
from .parsing import ImportParser
from .persistence import (
    CategoryRepository,
    DuplicateEntityError,
    QuizRepository,
    Repository,
    TagRepository,
)
from .unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CategoryRepository",
    "DuplicateEntityError",
    "ImportParser",
    "ImportRepositories",
    "ImportUnitOfWork",
    "ModerationPolicy",
    "QuizRepository",
    "Repository",
    "RepositoryCollection",
    "TagRepository",
    "UnitOfWork",
]
