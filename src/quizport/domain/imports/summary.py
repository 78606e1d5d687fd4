"""Outcome aggregation for one import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class RecordOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportErrorEntry:
    index: int
    message: str
    quiz_id: UUID | None = None
    code: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportSummary:
    total: int
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: tuple[ImportErrorEntry, ...] = ()


@dataclass(slots=True)
class SummaryAggregator:
    """Mutable accumulator that seals into an immutable ``ImportSummary``.

    In dry-run mode the persistence counters are reported as zero; ``total`` and
    ``failed`` always reflect what was attempted.
    """

    total: int
    dry_run: bool = False
    _counts: dict[RecordOutcome, int] = field(
        default_factory=lambda: dict.fromkeys(RecordOutcome, 0)
    )
    _errors: list[ImportErrorEntry] = field(default_factory=list[ImportErrorEntry])

    def record(self, outcome: RecordOutcome) -> None:
        self._counts[outcome] += 1

    def fail(
        self,
        index: int,
        error: BaseException,
        *,
        quiz_id: UUID | None = None,
    ) -> None:
        self._errors.append(
            ImportErrorEntry(
                index=index,
                message=str(error) or type(error).__name__,
                quiz_id=quiz_id,
                code=type(error).__name__,
            )
        )

    @property
    def failed(self) -> int:
        return len(self._errors)

    def build(self) -> ImportSummary:
        if self.dry_run:
            created = updated = skipped = 0
        else:
            created = self._counts[RecordOutcome.CREATED]
            updated = self._counts[RecordOutcome.UPDATED]
            skipped = self._counts[RecordOutcome.SKIPPED]
        return ImportSummary(
            total=self.total,
            created=created,
            updated=updated,
            skipped=skipped,
            failed=self.failed,
            errors=tuple(self._errors),
        )
