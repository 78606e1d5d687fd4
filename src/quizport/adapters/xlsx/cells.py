"""Scalar decoding rules for spreadsheet cells.

Every reader accepts the raw value ``openpyxl`` yields for a cell (``None``,
``str``, ``int``, ``float``, ``bool`` or a date/time) and applies one rule
uniformly across sheets. Violations raise ``FormatError``.
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, time
from enum import StrEnum
from typing import Final
from uuid import UUID

from quizport.domain.imports.errors import FormatError

TRUE_TOKENS: Final[frozenset[str]] = frozenset({"yes", "true", "1", "y", "compliant", "correct"})
FALSE_TOKENS: Final[frozenset[str]] = frozenset(
    {"no", "false", "0", "n", "non-compliant", "incorrect"}
)


def cell_text(value: object) -> str | None:
    """Render a cell the way it reads in a spreadsheet; blank becomes ``None``."""

    if value is None:
        return None
    if isinstance(value, bool):
        text = "TRUE" if value else "FALSE"
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, datetime | date | time):
        text = value.isoformat()
    else:
        text = str(value)
    text = text.strip()
    return text or None


def is_blank_row(row: tuple[object, ...] | None) -> bool:
    return row is None or all(cell_text(value) is None for value in row)


def read_uuid(value: object, field_name: str) -> UUID | None:
    text = cell_text(value)
    if text is None:
        return None
    try:
        return UUID(text)
    except ValueError as exc:
        raise FormatError(f"{field_name} must be a valid UUID") from exc


def read_enum[E: StrEnum](value: object, enum_type: type[E]) -> E | None:
    text = cell_text(value)
    if text is None:
        return None
    try:
        return enum_type(text.upper())
    except ValueError as exc:
        raise FormatError(f"Invalid value '{text}' for {enum_type.__name__}") from exc


def read_int(value: object) -> int | None:
    """Numeric cells truncate toward zero; numeric text is accepted too."""

    if isinstance(value, bool):
        raise FormatError(f"Expected numeric value but got '{cell_text(value)}'")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _truncate(value, repr(value))
    text = cell_text(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError as exc:
        raise FormatError(f"Expected numeric value but got '{text}'") from exc
    return _truncate(number, text)


def read_positive_int(value: object) -> int | None:
    """Like ``read_int`` but non-positive numbers mean "unset"."""

    number = read_int(value)
    if number is None or number <= 0:
        return None
    return number


def read_timestamp(value: object) -> datetime | None:
    """Best effort: anything that does not look like a timestamp is ``None``."""

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    text = cell_text(value)
    if text is None:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def read_tags(value: object) -> tuple[str, ...]:
    text = cell_text(value)
    if text is None:
        return ()
    return tuple(part.strip() for part in text.split(",") if part.strip())


def read_bool(value: object, field_name: str, *, required: bool = False) -> bool:
    text = cell_text(value)
    if text is None:
        if required:
            raise FormatError(f"Missing boolean value for {field_name}")
        return False
    token = text.lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise FormatError(f"Invalid boolean value for {field_name}: {text}")


def _truncate(number: float, raw: str) -> int:
    if math.isnan(number) or math.isinf(number):
        raise FormatError(f"Expected numeric value but got '{raw}'")
    return int(number)

