"""Reconcile parsed import records against the quiz catalog.

The engine walks records strictly in order. Each record is reconciled inside its
own transaction on the run's unit of work: a successful record is committed
before the next one starts, a failing record is rolled back and turned into a
summary entry. No record-level failure aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from quizport.domain.model import UpsertStrategy

from .errors import (
    ForbiddenError,
    ImportFailure,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from .hashing import import_content_hash
from .merge import ResolvedReferences, apply_merge, build_quiz, plan_merge
from .references import ReferenceCache, ReferenceResolver
from .summary import RecordOutcome, SummaryAggregator
from .validation import validate_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from quizport.domain.model import Actor, Category, Quiz
    from quizport.domain.ports import ImportRepositories, ImportUnitOfWork, ModerationPolicy

    from .records import ImportOptions, ImportRecord
    from .summary import ImportSummary


log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _RunContext:
    """State shared by the records of one run."""

    repositories: ImportRepositories
    options: ImportOptions
    actor: Actor
    resolver: ReferenceResolver
    default_category: Category | None = field(default=None)


@dataclass(slots=True)
class ReconciliationEngine:
    """Apply an upsert strategy to a batch of import records."""

    unit_of_work_factory: Callable[[], ImportUnitOfWork]
    moderation_policy: ModerationPolicy
    default_category_id: UUID | None = None
    now_provider: Callable[[], datetime] = _utcnow

    def run(
        self,
        records: Sequence[ImportRecord],
        *,
        options: ImportOptions,
        actor: Actor,
    ) -> ImportSummary:
        """Reconcile ``records`` for ``actor`` and return the aggregated summary.

        Raises ``LimitExceededError`` before touching storage when ``records``
        holds more items than ``options.max_items``.
        """

        if len(records) > options.max_items:
            raise LimitExceededError(options.max_items)

        aggregator = SummaryAggregator(total=len(records), dry_run=options.dry_run)
        cache = ReferenceCache()
        log.info(
            "Reconciling %s record(s): strategy=%s, dry_run=%s, actor=%s",
            len(records),
            options.strategy,
            options.dry_run,
            actor.id,
        )

        try:
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                context = _RunContext(
                    repositories=repositories,
                    options=options,
                    actor=actor,
                    resolver=ReferenceResolver(
                        categories=repositories.categories,
                        tags=repositories.tags,
                        cache=cache,
                        persist=not options.dry_run,
                    ),
                )
                for index, record in enumerate(records):
                    self._process(uow, context, cache, aggregator, index, record)
        finally:
            cache.clear()

        summary = aggregator.build()
        log.info(
            "Finished reconciliation: total=%s, created=%s, updated=%s, skipped=%s, failed=%s",
            summary.total,
            summary.created,
            summary.updated,
            summary.skipped,
            summary.failed,
        )
        return summary

    def _process(  # noqa: PLR0913
        self,
        uow: ImportUnitOfWork,
        context: _RunContext,
        cache: ReferenceCache,
        aggregator: SummaryAggregator,
        index: int,
        record: ImportRecord,
    ) -> None:
        try:
            outcome = self._reconcile(context, record)
            if context.options.dry_run:
                uow.rollback()
            else:
                uow.commit()
        except ImportFailure as exc:
            uow.rollback()
            cache.discard_pending()
            log.warning("Record %s failed: %s", index, exc)
            aggregator.fail(index, exc, quiz_id=record.id)
            return
        except Exception as exc:  # noqa: BLE001
            uow.rollback()
            cache.discard_pending()
            log.exception("Unexpected error while reconciling record %s", index)
            aggregator.fail(index, exc, quiz_id=record.id)
            return

        cache.commit_pending()
        aggregator.record(outcome)

    def _reconcile(self, context: _RunContext, record: ImportRecord) -> RecordOutcome:
        strategy = context.options.strategy
        validate_record(record, strategy)

        quizzes = context.repositories.quizzes
        if (
            strategy is UpsertStrategy.SKIP_ON_DUPLICATE
            and record.id is not None
            and quizzes.exists(record.id)
        ):
            return RecordOutcome.SKIPPED

        references = self._resolve_references(context, record)

        if strategy is UpsertStrategy.CREATE_ONLY:
            return self._create(context, record, references)

        if strategy is UpsertStrategy.UPSERT_BY_ID:
            if record.id is None:
                raise ValidationError("UPSERT_BY_ID requires quiz id")
            existing = quizzes.get_with_associations(record.id)
            if existing is None:
                return self._create(context, record, references, quiz_id=record.id)
            self._require_owner_or_moderator(context, existing)
            return self._merge(context, existing, record, references)

        import_hash = import_content_hash(record)
        existing = quizzes.find_by_creator_and_import_hash(context.actor.id, import_hash)
        if strategy is UpsertStrategy.SKIP_ON_DUPLICATE:
            if existing is not None:
                return RecordOutcome.SKIPPED
            return self._create(context, record, references, import_hash=import_hash)

        if existing is None:
            return self._create(context, record, references, import_hash=import_hash)
        return self._merge(context, existing, record, references, import_hash=import_hash)

    def _resolve_references(self, context: _RunContext, record: ImportRecord) -> ResolvedReferences:
        options = context.options
        category = context.resolver.resolve_category(
            record.category_name,
            auto_create=options.auto_create_category,
        )
        if category is None:
            category = self._default_category(context)
        tags = context.resolver.resolve_tags(
            record.tag_names,
            auto_create=options.auto_create_tags,
        )
        return ResolvedReferences(category=category, tags=frozenset(tags))

    def _default_category(self, context: _RunContext) -> Category:
        if context.default_category is not None:
            return context.default_category
        if self.default_category_id is None:
            raise NotFoundError("Default category is not configured")
        category = context.repositories.categories.get(self.default_category_id)
        if category is None:
            raise NotFoundError(f"Default category {self.default_category_id} not found")
        context.default_category = category
        return category

    def _is_moderator(self, context: _RunContext) -> bool:
        return self.moderation_policy.has_moderation_capability(context.actor)

    def _require_owner_or_moderator(self, context: _RunContext, quiz: Quiz) -> None:
        if quiz.creator_id == context.actor.id or self._is_moderator(context):
            return
        raise ForbiddenError(f"Not allowed to modify quiz {quiz.id}")

    def _create(
        self,
        context: _RunContext,
        record: ImportRecord,
        references: ResolvedReferences,
        *,
        quiz_id: UUID | None = None,
        import_hash: str | None = None,
    ) -> RecordOutcome:
        quiz = build_quiz(
            record,
            creator_id=context.actor.id,
            references=references,
            moderator=self._is_moderator(context),
            now=self.now_provider(),
            quiz_id=quiz_id,
            import_hash=import_hash,
        )
        if not context.options.dry_run:
            context.repositories.quizzes.add(quiz)
        log.debug("Created quiz %s (%s)", quiz.id, quiz.status)
        return RecordOutcome.CREATED

    def _merge(  # noqa: PLR0913
        self,
        context: _RunContext,
        quiz: Quiz,
        record: ImportRecord,
        references: ResolvedReferences,
        *,
        import_hash: str | None = None,
    ) -> RecordOutcome:
        plan = plan_merge(
            quiz,
            record,
            references=references,
            moderator=self._is_moderator(context),
            import_hash=import_hash,
        )
        if not context.options.dry_run:
            apply_merge(quiz, plan, now=self.now_provider())
        log.debug(
            "Merged quiz %s: status=%s, content_changed=%s",
            quiz.id,
            plan.status,
            plan.content_changed,
        )
        return RecordOutcome.UPDATED
