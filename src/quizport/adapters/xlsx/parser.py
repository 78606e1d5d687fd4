"""Decode quiz workbooks into import records.

Layout:

- ``Quizzes`` (required): one quiz per row below a header row. The first row
  may instead carry ``schemaVersion | <n>``, pushing the header to row two.
- ``Metadata`` (optional): a ``schemaVersion | <n>`` row, used when the
  ``Quizzes`` sheet does not declare a version itself.
- one sheet per question type, named after the type (``MCQ_SINGLE``,
  ``FILL_GAP``...). Rows reference their quiz through the ``Quiz ID`` column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING, Any, Final
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from quizport.adapters.attachments import validate_attachment_url
from quizport.config.importing import DEFAULT_ATTACHMENT_HOST
from quizport.domain.imports.errors import (
    FormatError,
    LimitExceededError,
    UnsupportedQuestionTypeError,
)
from quizport.domain.imports.records import DEFAULT_SCHEMA_VERSION, ImportRecord, QuestionRecord
from quizport.domain.model import Difficulty, QuestionType, Visibility

from .cells import (
    cell_text,
    is_blank_row,
    read_bool,
    read_enum,
    read_int,
    read_positive_int,
    read_tags,
    read_timestamp,
    read_uuid,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from uuid import UUID

    from openpyxl.workbook.workbook import Workbook

    from quizport.domain.imports.records import ImportOptions

log = logging.getLogger(__name__)

QUIZZES_SHEET: Final = "Quizzes"
METADATA_SHEET: Final = "Metadata"
SCHEMA_VERSION_KEY: Final = "schemaversion"

MAX_OPTIONS: Final = 6
MAX_GAPS: Final = 10
MAX_ORDERING_ITEMS: Final = 10
MAX_STATEMENTS: Final = 10

ESTIMATED_TIME_COLUMNS: Final = ("Estimated Time (min)", "Estimated Time")

_UNSUPPORTED_SHEETS: Final[dict[QuestionType, str]] = {
    QuestionType.HOTSPOT: "HOTSPOT questions are not supported for import",
    QuestionType.MATCHING: "MATCHING questions require the JSON import format",
}

type Content = dict[str, Any]


@dataclass(frozen=True, slots=True)
class _Header:
    sheet: str
    columns: dict[str, int]

    @classmethod
    def from_row(cls, sheet: str, row: Sequence[object]) -> _Header:
        columns: dict[str, int] = {}
        for index, value in enumerate(row):
            name = cell_text(value)
            if name is not None:
                columns[name] = index  # last duplicate wins
        return cls(sheet=sheet, columns=columns)

    def require(self, name: str) -> None:
        if name not in self.columns:
            raise FormatError(f"Missing required column '{name}' in sheet {self.sheet}")


@dataclass(frozen=True, slots=True)
class _Row:
    header: _Header
    values: Sequence[object]

    def get(self, *names: str) -> object:
        """Value of the first present column among ``names``; ``None`` if none is present."""

        for name in names:
            index = self.header.columns.get(name)
            if index is not None:
                return self.values[index] if index < len(self.values) else None
        return None

    def text(self, name: str) -> str | None:
        return cell_text(self.get(name))


@dataclass(slots=True)
class XlsxImportParser:
    """Tabular import channel backed by ``openpyxl``."""

    attachment_host: str = DEFAULT_ATTACHMENT_HOST

    def parse(self, payload: bytes, options: ImportOptions) -> list[ImportRecord]:
        workbook = _open_workbook(payload)
        try:
            records = self._parse_workbook(workbook)
        finally:
            workbook.close()

        if len(records) > options.max_items:
            raise LimitExceededError(options.max_items)
        log.debug("Parsed %s quiz record(s) from workbook", len(records))
        return records

    def _parse_workbook(self, workbook: Workbook) -> list[ImportRecord]:
        if QUIZZES_SHEET not in workbook.sheetnames:
            raise FormatError(f"Missing required '{QUIZZES_SHEET}' sheet")

        quiz_rows = _sheet_rows(workbook, QUIZZES_SHEET)
        schema_version, header_index = _declared_schema_version(quiz_rows)
        if schema_version is None:
            schema_version = _metadata_schema_version(workbook)
        quizzes = _parse_quizzes(
            quiz_rows,
            header_index=header_index,
            schema_version=DEFAULT_SCHEMA_VERSION if schema_version is None else schema_version,
        )

        declared_ids = {quiz.id for quiz in quizzes if quiz.id is not None}
        questions_by_quiz: dict[UUID, list[QuestionRecord]] = {}
        for sheet_name in workbook.sheetnames:
            question_type = _sheet_question_type(sheet_name)
            if question_type is None:
                continue
            if question_type in _UNSUPPORTED_SHEETS:
                raise UnsupportedQuestionTypeError(_UNSUPPORTED_SHEETS[question_type])
            for quiz_id, question in self._parse_question_sheet(
                sheet_name, question_type, _sheet_rows(workbook, sheet_name)
            ):
                if quiz_id not in declared_ids:
                    raise FormatError(
                        f"Quiz ID {quiz_id} referenced in questions but not found in quizzes sheet"
                    )
                questions_by_quiz.setdefault(quiz_id, []).append(question)

        return [
            _with_questions(quiz, questions_by_quiz.get(quiz.id, []) if quiz.id else [])
            for quiz in quizzes
        ]

    def _parse_question_sheet(
        self,
        sheet_name: str,
        question_type: QuestionType,
        rows: list[tuple[object, ...]],
    ) -> Iterator[tuple[UUID, QuestionRecord]]:
        if not rows:
            return
        header = _Header.from_row(sheet_name, rows[0])
        header.require("Quiz ID")
        header.require("Question Text")

        for values in rows[1:]:
            if is_blank_row(values):
                continue
            row = _Row(header, values)
            quiz_id = read_uuid(row.get("Quiz ID"), "Quiz ID")
            if quiz_id is None:
                raise FormatError(f"Question row is missing Quiz ID in sheet {sheet_name}")
            text = row.text("Question Text")
            yield quiz_id, QuestionRecord(
                id=read_uuid(row.get("Question ID"), "Question ID"),
                type=question_type,
                difficulty=read_enum(row.get("Difficulty"), Difficulty),
                text=text,
                content=_build_content(question_type, row, text),
                hint=row.text("Hint"),
                explanation=row.text("Explanation"),
                attachment_url=validate_attachment_url(
                    row.text("Attachment URL"), host=self.attachment_host
                ),
            )


def _open_workbook(payload: bytes) -> Workbook:
    try:
        return load_workbook(BytesIO(payload), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise FormatError("Failed to parse XLSX import file") from exc


def _sheet_rows(workbook: Workbook, name: str) -> list[tuple[object, ...]]:
    return list(workbook[name].iter_rows(values_only=True))


def _find_sheet_name(workbook: Workbook, name: str) -> str | None:
    for sheet_name in workbook.sheetnames:
        if sheet_name.lower() == name.lower():
            return sheet_name
    return None


def _sheet_question_type(sheet_name: str) -> QuestionType | None:
    if sheet_name.lower() in (QUIZZES_SHEET.lower(), METADATA_SHEET.lower()):
        return None
    try:
        return QuestionType(sheet_name.strip().upper())
    except ValueError:
        return None


def _is_schema_version_row(row: Sequence[object]) -> bool:
    key = cell_text(row[0]) if row else None
    return key is not None and key.lower() == SCHEMA_VERSION_KEY


def _declared_schema_version(rows: list[tuple[object, ...]]) -> tuple[int | None, int]:
    """Return the version declared on the Quizzes sheet and the header row index."""

    if rows and _is_schema_version_row(rows[0]):
        first = rows[0]
        return read_int(first[1] if len(first) > 1 else None), 1
    return None, 0


def _metadata_schema_version(workbook: Workbook) -> int | None:
    sheet_name = _find_sheet_name(workbook, METADATA_SHEET)
    if sheet_name is None:
        return None
    for row in _sheet_rows(workbook, sheet_name):
        if _is_schema_version_row(row):
            return read_int(row[1] if len(row) > 1 else None)
    return None


def _parse_quizzes(
    rows: list[tuple[object, ...]],
    *,
    header_index: int,
    schema_version: int,
) -> list[ImportRecord]:
    if len(rows) <= header_index or is_blank_row(rows[header_index]):
        raise FormatError(f"{QUIZZES_SHEET} sheet is missing header row")
    header = _Header.from_row(QUIZZES_SHEET, rows[header_index])
    header.require("Title")

    quizzes: list[ImportRecord] = []
    for values in rows[header_index + 1 :]:
        if is_blank_row(values):
            continue
        row = _Row(header, values)
        quizzes.append(
            ImportRecord(
                schema_version=schema_version,
                id=read_uuid(row.get("Quiz ID"), "Quiz ID"),
                title=row.text("Title"),
                description=row.text("Description"),
                visibility=read_enum(row.get("Visibility"), Visibility),
                difficulty=read_enum(row.get("Difficulty"), Difficulty),
                estimated_time_minutes=read_positive_int(row.get(*ESTIMATED_TIME_COLUMNS)),
                tag_names=read_tags(row.get("Tags")),
                category_name=row.text("Category"),
                created_at=read_timestamp(row.get("Created At")),
                updated_at=read_timestamp(row.get("Updated At")),
                questions=(),
            )
        )
    return quizzes


def _with_questions(record: ImportRecord, questions: list[QuestionRecord]) -> ImportRecord:
    return ImportRecord(
        schema_version=record.schema_version,
        id=record.id,
        title=record.title,
        description=record.description,
        visibility=record.visibility,
        difficulty=record.difficulty,
        estimated_time_minutes=record.estimated_time_minutes,
        tag_names=record.tag_names,
        category_name=record.category_name,
        questions=tuple(questions),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _build_content(question_type: QuestionType, row: _Row, text: str | None) -> Content:
    match question_type:
        case QuestionType.MCQ_SINGLE | QuestionType.MCQ_MULTI:
            return _mcq_content(row)
        case QuestionType.TRUE_FALSE:
            row.header.require("Correct Answer")
            return {"answer": read_bool(row.get("Correct Answer"), "Correct Answer", required=True)}
        case QuestionType.OPEN:
            row.header.require("Sample Answer")
            answer = row.text("Sample Answer")
            return {"answer": answer} if answer is not None else {}
        case QuestionType.FILL_GAP:
            return _fill_gap_content(row, text)
        case QuestionType.ORDERING:
            return _ordering_content(row)
        case QuestionType.COMPLIANCE:
            return _compliance_content(row)
        case _:
            raise UnsupportedQuestionTypeError(f"Unsupported XLSX question type: {question_type}")


def _require_numbered(header: _Header, count: int, *templates: str) -> None:
    for n in range(1, count + 1):
        for template in templates:
            header.require(template.format(n=n))


def _mcq_content(row: _Row) -> Content:
    _require_numbered(row.header, MAX_OPTIONS, "Option {n}", "Option {n} Correct")
    options: list[Content] = []
    for n in range(1, MAX_OPTIONS + 1):
        column = f"Option {n}"
        option_text = row.text(column)
        if option_text is None:
            continue
        options.append(
            {
                "id": f"opt_{len(options) + 1}",
                "text": option_text,
                "correct": read_bool(row.get(f"{column} Correct"), f"{column} Correct"),
            }
        )
    return {"options": options}


def _fill_gap_content(row: _Row, text: str | None) -> Content:
    _require_numbered(row.header, MAX_GAPS, "Gap {n} Answer")
    content: Content = {}
    if text is not None:
        content["text"] = text
    gaps: list[Content] = []
    for n in range(1, MAX_GAPS + 1):
        answer = row.text(f"Gap {n} Answer")
        if answer is not None:
            gaps.append({"id": n, "answer": answer})
    content["gaps"] = gaps
    return content


def _ordering_content(row: _Row) -> Content:
    _require_numbered(row.header, MAX_ORDERING_ITEMS, "Item {n}")
    texts = [row.text(f"Item {n}") for n in range(1, MAX_ORDERING_ITEMS + 1)]
    items = [
        {"id": position, "text": item_text}
        for position, item_text in enumerate((t for t in texts if t is not None), start=1)
    ]
    if not items:
        return {}
    return {"items": items, "correctOrder": [item["id"] for item in items]}


def _compliance_content(row: _Row) -> Content:
    _require_numbered(row.header, MAX_STATEMENTS, "Statement {n}", "Statement {n} Compliant")
    statements: list[Content] = []
    for n in range(1, MAX_STATEMENTS + 1):
        column = f"Statement {n}"
        statement_text = row.text(column)
        if statement_text is None:
            continue
        statements.append(
            {
                "id": n,
                "text": statement_text,
                "compliant": read_bool(
                    row.get(f"{column} Compliant"), f"{column} Compliant", required=True
                ),
            }
        )
    return {"statements": statements}
