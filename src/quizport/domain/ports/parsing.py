"""Ports for decoding import payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from quizport.domain.imports.records import ImportOptions, ImportRecord


@runtime_checkable
class ImportParser(Protocol):
    """Decode one raw payload into canonical import records, in payload order.

    Implementations raise ``FormatError`` for undecodable payloads and
    ``LimitExceededError`` when the payload holds more than
    ``options.max_items`` quizzes.
    """

    def parse(self, payload: bytes, options: ImportOptions) -> list[ImportRecord]: ...


__all__ = ["ImportParser"]
