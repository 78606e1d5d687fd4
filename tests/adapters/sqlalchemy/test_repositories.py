from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from sqlalchemy import select

from quizport.adapters.sqlalchemy.mappings import question_table
from quizport.domain.model import Category, Difficulty, Question, QuestionType, Quiz, Tag
from quizport.domain.ports import DuplicateEntityError

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from quizport.adapters.sqlalchemy.unit_of_work import SqlAlchemyImportUnitOfWork

pytestmark = pytest.mark.integration

type UnitOfWorkFactory = Callable[[], SqlAlchemyImportUnitOfWork]


def _quiz(
    category: Category,
    *,
    creator_id: UUID | None = None,
    import_hash: str | None = None,
) -> Quiz:
    return Quiz(
        creator_id=creator_id or uuid4(),
        category=category,
        title="Capitals",
        difficulty=Difficulty.HARD,
        import_content_hash=import_hash,
        questions=[
            Question(type=QuestionType.OPEN, text="Capital of France?", content={"answer": "Paris"}),
            Question(type=QuestionType.TRUE_FALSE, text="Rome is in Italy", content={"answer": True}),
        ],
    )


def test_category_lookup_is_case_insensitive(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.categories.add(Category(name="Geography"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        found = uow.repositories.categories.find_by_name("  geoGRAPHY ")
        assert found is not None
        assert found.name == "Geography"
        assert uow.repositories.categories.get(found.id) is found
        assert uow.repositories.categories.find_by_name("History") is None


def test_duplicate_category_keeps_session_usable(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.categories.add(Category(name="Geography"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        categories = uow.repositories.categories
        categories.add(Category(name="History"))
        with pytest.raises(DuplicateEntityError):
            categories.add(Category(name="GEOGRAPHY"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.categories.find_by_name("history") is not None


def test_tags_round_trip(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.tags.add_all([Tag(name="Europe"), Tag(name="capitals")])
        uow.commit()

    with sqlite_unit_of_work() as uow:
        tags = uow.repositories.tags
        assert {tag.name for tag in tags.find_by_names(["europe", "CAPITALS", "asia"])} == {
            "Europe",
            "capitals",
        }
        assert tags.find_by_names(["  "]) == []
        with pytest.raises(DuplicateEntityError):
            tags.add_all([Tag(name="EUROPE")])


def test_quiz_persists_with_associations(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    category = Category(name="Geography")
    tag = Tag(name="europe")
    quiz = _quiz(category)
    quiz.tags = {tag}
    with sqlite_unit_of_work() as uow:
        uow.repositories.categories.add(category)
        uow.repositories.tags.add_all([tag])
        uow.repositories.quizzes.add(quiz)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        quizzes = uow.repositories.quizzes
        loaded = quizzes.get_with_associations(quiz.id)
        assert loaded is not None
        assert loaded.category.name == "Geography"
        assert {t.name for t in loaded.tags} == {"europe"}
        assert [q.text for q in loaded.questions] == ["Capital of France?", "Rome is in Italy"]
        assert loaded.questions[1].content == {"answer": True}
        assert loaded.difficulty is Difficulty.HARD
        assert quizzes.exists(quiz.id)
        assert not quizzes.exists(uuid4())


def test_replacing_questions_deletes_orphans(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    category = Category(name="Geography")
    quiz = _quiz(category)
    with sqlite_unit_of_work() as uow:
        uow.repositories.categories.add(category)
        uow.repositories.quizzes.add(quiz)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.quizzes.get_with_associations(quiz.id)
        assert loaded is not None
        loaded.questions = [Question(type=QuestionType.OPEN, text="Only one left")]
        uow.commit()

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.quizzes.get_with_associations(quiz.id)
        assert loaded is not None
        assert [q.text for q in loaded.questions] == ["Only one left"]
        remaining = uow.session.execute(select(question_table)).all()
        assert len(remaining) == 1


def test_import_hash_lookup_is_scoped_per_creator(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    category = Category(name="Geography")
    alice, bob = uuid4(), uuid4()
    with sqlite_unit_of_work() as uow:
        uow.repositories.categories.add(category)
        uow.repositories.quizzes.add(_quiz(category, creator_id=alice, import_hash="ABC"))
        uow.repositories.quizzes.add(_quiz(category, creator_id=bob, import_hash="ABC"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        quizzes = uow.repositories.quizzes
        found = quizzes.find_by_creator_and_import_hash(alice, "ABC")
        assert found is not None
        assert found.creator_id == alice
        assert quizzes.find_by_creator_and_import_hash(uuid4(), "ABC") is None
