"""Format dispatch for import payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quizport.config.importing import ImportConfig
from quizport.domain.model import ImportFormat

from .json_document import JsonImportParser
from .xlsx import XlsxImportParser

if TYPE_CHECKING:
    from quizport.domain.ports import ImportParser


def get_parser(import_format: ImportFormat, config: ImportConfig | None = None) -> ImportParser:
    """Return the parser for ``import_format``, configured with ``config``."""

    effective = config or ImportConfig()
    match ImportFormat(import_format):
        case ImportFormat.JSON:
            return JsonImportParser(attachment_host=effective.attachment_host)
        case ImportFormat.XLSX:
            return XlsxImportParser(attachment_host=effective.attachment_host)
