"""Decode JSON import documents into import records.

Accepted top-level shapes: an array of quiz objects, or a wrapper object
``{"schemaVersion": ..., "quizzes": [...]}``. Unknown keys are ignored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError as PydanticValidationError

from quizport.config.importing import DEFAULT_ATTACHMENT_HOST
from quizport.domain.imports.errors import FormatError, LimitExceededError

from .schema import QuizDocument
from .translator import to_import_record

if TYPE_CHECKING:
    from quizport.domain.imports.records import ImportOptions, ImportRecord

log = logging.getLogger(__name__)


@dataclass(slots=True)
class JsonImportParser:
    """Document import channel backed by ``pydantic``."""

    attachment_host: str = DEFAULT_ATTACHMENT_HOST

    def parse(self, payload: bytes, options: ImportOptions) -> list[ImportRecord]:
        if not payload.strip():
            return []
        try:
            document = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FormatError("Malformed JSON import payload") from exc

        schema_version: int | None = None
        if isinstance(document, list):
            items = cast("list[object]", document)
        elif isinstance(document, dict):
            wrapper = cast("dict[str, object]", document)
            schema_version = _read_schema_version(wrapper.get("schemaVersion"))
            quizzes = wrapper.get("quizzes")
            if quizzes is None:
                items = []
            elif isinstance(quizzes, list):
                items = cast("list[object]", quizzes)
            else:
                raise FormatError("Expected 'quizzes' to be an array")
        else:
            raise FormatError("Import payload must be a JSON array or object wrapper")

        records: list[ImportRecord] = []
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise FormatError("Each quiz item must be a JSON object")
            if position >= options.max_items:
                raise LimitExceededError(options.max_items)
            records.append(self._to_record(position, item, schema_version))
        log.debug("Parsed %s quiz record(s) from JSON document", len(records))
        return records

    def _to_record(self, position: int, item: object, schema_version: int | None) -> ImportRecord:
        try:
            document = QuizDocument.model_validate(item)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise FormatError(
                f"Invalid quiz at position {position}: {location}: {first['msg']}"
            ) from exc
        return to_import_record(
            document,
            schema_version=schema_version,
            attachment_host=self.attachment_host,
        )


def _read_schema_version(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return int(value.strip())
        except ValueError as exc:
            raise FormatError("schemaVersion must be a number") from exc
    raise FormatError("schemaVersion must be a number")
