"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from quizport.adapters.access import PermissionModerationPolicy
from quizport.adapters.parsers import get_parser
from quizport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from quizport.config import get_import_config
from quizport.domain.imports import ImportOptions, ReconciliationEngine
from quizport.domain.model import Category, ImportFormat
from quizport.domain.ports import DuplicateEntityError, ImportUnitOfWork

if TYPE_CHECKING:
    from quizport.config import ImportConfig
    from quizport.domain.imports import ImportSummary
    from quizport.domain.model import Actor
    from quizport.domain.ports import ImportParser, ModerationPolicy

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]


log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyImportUnitOfWork


def import_quizzes(  # noqa: PLR0913
    payload: bytes,
    *,
    import_format: ImportFormat,
    options: ImportOptions | None = None,
    actor: Actor,
    parser: ImportParser | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    moderation_policy: ModerationPolicy | None = None,
    config: ImportConfig | None = None,
) -> ImportSummary:
    """Parse ``payload`` and reconcile its quizzes into the catalog on behalf of ``actor``.

    Parse-time failures (``FormatError``, ``LimitExceededError``) propagate before
    storage is touched; record-level failures are reported in the summary.
    """

    effective_config = config or get_import_config()
    effective_options = options or ImportOptions(max_items=effective_config.max_items)
    effective_parser = parser or get_parser(ImportFormat(import_format), effective_config)
    log.info(
        "Starting %s import: bytes=%s, strategy=%s, dry_run=%s, max_items=%s",
        import_format,
        len(payload),
        effective_options.strategy,
        effective_options.dry_run,
        effective_options.max_items,
    )

    records = effective_parser.parse(payload, effective_options)

    engine = ReconciliationEngine(
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work_factory(),
        moderation_policy=moderation_policy or PermissionModerationPolicy(),
        default_category_id=effective_config.default_category_id,
    )
    summary = engine.run(records, options=effective_options, actor=actor)

    log.info(
        "Finished %s import: total=%s, created=%s, updated=%s, skipped=%s, failed=%s",
        import_format,
        summary.total,
        summary.created,
        summary.updated,
        summary.skipped,
        summary.failed,
    )
    return summary


def create_category(
    name: str,
    description: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Category:
    """Create a category, e.g. the default category imports fall back to."""

    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Category name must not be blank")

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        categories = uow.repositories.categories
        if categories.find_by_name(trimmed) is not None:
            raise DuplicateEntityError(f"Category {trimmed} already exists")
        category = Category(name=trimmed, description=description)
        categories.add(category)
        uow.commit()

    log.info("Created category %s (%s)", category.name, category.id)
    return category
