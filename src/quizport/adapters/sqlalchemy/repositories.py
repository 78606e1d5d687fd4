"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from quizport.adapters.sqlalchemy.mappings import category_table, quiz_table, tag_table
from quizport.domain.model import Category, Quiz, Tag
from quizport.domain.ports.persistence import DuplicateEntityError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Sequence

    from sqlalchemy.orm import Session


def _normalize(name: str) -> str:
    return name.strip().lower()


class SqlAlchemyQuizRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Quiz) -> None:
        self.session.add(entity)

    def get_with_associations(self, quiz_id: uuid.UUID) -> Quiz | None:
        # tags and questions are loaded eagerly by the mapping
        return self.session.get(Quiz, quiz_id)

    def find_by_creator_and_import_hash(
        self,
        creator_id: uuid.UUID,
        import_hash: str,
    ) -> Quiz | None:
        stmt = (
            select(Quiz)
            .where(quiz_table.c.creator_id == creator_id)
            .where(quiz_table.c.import_content_hash == import_hash)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def exists(self, quiz_id: uuid.UUID) -> bool:
        stmt = select(quiz_table.c.id).where(quiz_table.c.id == quiz_id).limit(1)
        return self.session.execute(stmt).scalar_one_or_none() is not None


class SqlAlchemyCategoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Category) -> None:
        """Insert ``entity`` inside a savepoint so a duplicate leaves the session usable."""

        try:
            with self.session.begin_nested():
                self.session.add(entity)
                self.session.flush()
        except IntegrityError as exc:
            raise DuplicateEntityError(f"Category {entity.name} already exists") from exc

    def get(self, category_id: uuid.UUID) -> Category | None:
        return self.session.get(Category, category_id)

    def find_by_name(self, name: str) -> Category | None:
        stmt = select(Category).where(func.lower(category_table.c.name) == _normalize(name))
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyTagRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add_all(self, tags: Iterable[Tag]) -> None:
        pending = list(tags)
        try:
            with self.session.begin_nested():
                self.session.add_all(pending)
                self.session.flush()
        except IntegrityError as exc:
            names = ", ".join(tag.name for tag in pending)
            raise DuplicateEntityError(f"Tag(s) already exist: {names}") from exc

    def find_by_names(self, names: Sequence[str]) -> list[Tag]:
        normalized = sorted({_normalize(name) for name in names if name.strip()})
        if not normalized:
            return []
        stmt = select(Tag).where(func.lower(tag_table.c.name).in_(normalized))
        return list(self.session.execute(stmt).scalars().all())


if TYPE_CHECKING:
    from quizport.domain.ports.persistence import (
        CategoryRepository,
        QuizRepository,
        TagRepository,
    )

    _session_stub = cast("Session", object())
    _quiz_repo: QuizRepository = SqlAlchemyQuizRepository(_session_stub)
    _category_repo: CategoryRepository = SqlAlchemyCategoryRepository(_session_stub)
    _tag_repo: TagRepository = SqlAlchemyTagRepository(_session_stub)
