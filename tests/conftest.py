from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from quizport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    prepare_engine,
    shutdown,
    startup,
)
from quizport.domain.imports import ImportOptions
from tests.helpers.catalog import FakeCatalog, FakeImportUnitOfWork, make_actor

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from quizport.domain.model import Actor


@pytest.fixture
def actor() -> Actor:
    return make_actor()


@pytest.fixture
def moderator() -> Actor:
    return make_actor(moderator=True, username="moderator")


@pytest.fixture
def options() -> ImportOptions:
    return ImportOptions()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def fake_unit_of_work(catalog: FakeCatalog) -> FakeImportUnitOfWork:
    return FakeImportUnitOfWork(catalog)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    prepare_engine(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyImportUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
