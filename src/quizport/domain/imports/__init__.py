"""Bulk quiz import: records, reference resolution and reconciliation.

Flow:
1) a format parser decodes the payload into ``ImportRecord``s
2) every record is validated
3) category and tag names are resolved (and optionally created)
4) the selected ``UpsertStrategy`` decides between create, merge and skip
5) outcomes are aggregated into an ``ImportSummary``
"""

from __future__ import annotations

from .engine import ReconciliationEngine
from .errors import (
    ConflictError,
    ForbiddenError,
    FormatError,
    ImportFailure,
    LimitExceededError,
    NotFoundError,
    RecordError,
    UnsupportedQuestionTypeError,
    ValidationError,
)
from .hashing import import_content_hash, quiz_content_hash, quiz_presentation_hash
from .merge import MergePlan, ResolvedReferences, apply_merge, build_quiz, plan_merge
from .records import (
    DEFAULT_MAX_ITEMS,
    DEFAULT_SCHEMA_VERSION,
    ImportOptions,
    ImportRecord,
    QuestionRecord,
)
from .references import ReferenceCache, ReferenceResolver, retry_once_after_conflict
from .summary import ImportErrorEntry, ImportSummary, RecordOutcome, SummaryAggregator

__all__ = [
    "DEFAULT_MAX_ITEMS",
    "DEFAULT_SCHEMA_VERSION",
    "ConflictError",
    "ForbiddenError",
    "FormatError",
    "ImportErrorEntry",
    "ImportFailure",
    "ImportOptions",
    "ImportRecord",
    "ImportSummary",
    "LimitExceededError",
    "MergePlan",
    "NotFoundError",
    "QuestionRecord",
    "ReconciliationEngine",
    "RecordError",
    "RecordOutcome",
    "ReferenceCache",
    "ReferenceResolver",
    "ResolvedReferences",
    "SummaryAggregator",
    "UnsupportedQuestionTypeError",
    "ValidationError",
    "apply_merge",
    "build_quiz",
    "import_content_hash",
    "plan_merge",
    "quiz_content_hash",
    "quiz_presentation_hash",
    "retry_once_after_conflict",
]
