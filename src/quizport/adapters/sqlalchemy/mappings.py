"""SQLAlchemy mapping metadata for the quizport domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    event,
    func,
    orm,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import configure_mappers, relationship

from quizport.domain.model import (
    Category,
    Difficulty,
    Question,
    QuestionType,
    Quiz,
    QuizStatus,
    Tag,
    Visibility,
)

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.pool import ConnectionPoolEntry

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog tables --------------------------------------------------------------

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(100), nullable=False),
    Column("description", String(1000), nullable=True),
)
# names are unique regardless of case
Index("uq_category_name_lower", func.lower(category_table.c.name), unique=True)

tag_table = Table(
    "tag",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(50), nullable=False),
)
Index("uq_tag_name_lower", func.lower(tag_table.c.name), unique=True)

quiz_table = Table(
    "quiz",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("creator_id", UUIDColumnType, nullable=False, index=True),
    Column(
        "category_id",
        UUIDColumnType,
        ForeignKey("category.id"),
        key="_category_id",
        nullable=False,
    ),
    Column("title", String(100), nullable=False),
    Column("description", String(1000), nullable=True),
    Column("visibility", Enum(Visibility, native_enum=False), nullable=False),
    Column("difficulty", Enum(Difficulty, native_enum=False), nullable=False),
    Column("estimated_time", Integer, nullable=True),
    Column("status", Enum(QuizStatus, native_enum=False), nullable=False),
    Column("content_hash", String(64), nullable=True),
    Column("presentation_hash", String(64), nullable=True),
    Column("import_content_hash", String(64), nullable=True),
    Column("reviewed_at", UTCDateTime(), nullable=True),
    Column("reviewed_by", UUIDColumnType, nullable=True),
    Column("rejection_reason", String(2000), nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint(
        "creator_id",
        "import_content_hash",
        name="uq_quiz_creator_import_content_hash",
    ),
)

quiz_tag_table = Table(
    "quiz_tag",
    mapper_registry.metadata,
    Column("quiz_id", UUIDColumnType, ForeignKey("quiz.id"), primary_key=True),
    Column("tag_id", UUIDColumnType, ForeignKey("tag.id"), primary_key=True),
)

question_table = Table(
    "question",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "quiz_id",
        UUIDColumnType,
        ForeignKey("quiz.id"),
        key="_quiz_id",
        nullable=True,
        index=True,
    ),
    Column("position", Integer, key="_position", nullable=True),
    Column("type", Enum(QuestionType, native_enum=False), nullable=False),
    Column("text", Text, nullable=False),
    Column("difficulty", Enum(Difficulty, native_enum=False), nullable=False),
    Column("content", JSON, nullable=True),
    Column("hint", String(500), nullable=True),
    Column("explanation", String(2000), nullable=True),
    Column("attachment_url", String(2048), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Category, category_table)
    mapper_registry.map_imperatively(Tag, tag_table)
    mapper_registry.map_imperatively(Question, question_table)
    mapper_registry.map_imperatively(
        Quiz,
        quiz_table,
        properties={
            "category": relationship(Category, lazy="joined"),
            "tags": relationship(
                Tag,
                secondary=quiz_tag_table,
                collection_class=set,
                lazy="selectin",
            ),
            "questions": relationship(
                Question,
                cascade="all, delete-orphan",
                order_by=question_table.c._position,  # noqa: SLF001
                collection_class=ordering_list("_position"),
                lazy="selectin",
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite honour SAVEPOINT by taking over BEGIN emission.

    No-op for other dialects, and safe to call more than once.
    """

    if engine.dialect.name != "sqlite":
        return
    if event.contains(engine, "begin", _emit_begin):
        return
    event.listen(engine, "connect", _disable_pysqlite_transactions)
    event.listen(engine, "begin", _emit_begin)


def _disable_pysqlite_transactions(
    dbapi_connection: SQLiteConnection,
    connection_record: ConnectionPoolEntry,
) -> None:
    _ = connection_record
    dbapi_connection.isolation_level = None


def _emit_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
