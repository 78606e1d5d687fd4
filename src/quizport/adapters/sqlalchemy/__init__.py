"""SQLAlchemy adapter package for quizport."""

from __future__ import annotations

from .mappings import create_all_tables, enable_sqlite_savepoints, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyQuizRepository,
    SqlAlchemyTagRepository,
)
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    prepare_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyQuizRepository",
    "SqlAlchemyTagRepository",
    "StartupError",
    "create_all_tables",
    "enable_sqlite_savepoints",
    "mapper_registry",
    "prepare_engine",
    "shutdown",
    "start_mappers",
    "startup",
]
