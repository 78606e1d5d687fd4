"""Deterministic digests used for change and duplicate detection.

Two families live here:

- the *import content hash* fingerprints an ``ImportRecord`` as it arrived, so
  the same payload imported twice by one creator can be recognised;
- the *quiz content/presentation hashes* fingerprint a persisted quiz, so the
  engine can tell whether a reconciled update changed anything substantive.

All text is normalised (NFKC, lower-cased, trimmed, whitespace collapsed) and
digests are upper-case SHA-256 hex strings.
"""

from __future__ import annotations

import hashlib
import json
import unicodedata
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quizport.domain.model import Difficulty, Question, Quiz, Tag

    from .records import ImportRecord, QuestionRecord

# Arrays whose order carries no meaning; items are sorted by ``id`` before hashing.
SORTED_ARRAY_FIELDS: Final[frozenset[str]] = frozenset(
    {"options", "statements", "right", "left", "items", "gaps"}
)


def normalize_text(value: str | None) -> str:
    if value is None:
        return ""
    text = unicodedata.normalize("NFKC", value).lower()
    return " ".join(text.split())


def sha256_hex(canonical: str) -> str:
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest().upper()


def import_content_hash(record: ImportRecord) -> str:
    """Fingerprint an import record, ignoring ids, timestamps and field order."""

    question_hashes = sorted(_question_record_hash(question) for question in record.questions or ())
    estimated = record.estimated_time_minutes
    parts = (
        f"t={normalize_text(record.title)}",
        f"d={normalize_text(record.description)}",
        f"df={record.difficulty.value if record.difficulty else ''}",
        f"cat={normalize_text(record.category_name)}",
        f"tags={_normalized_names(record.tag_names)}",
        f"et={estimated if estimated is not None else ''}",
        f"qs={','.join(question_hashes)}",
    )
    return sha256_hex("|".join(parts))


def quiz_content_hash(quiz: Quiz) -> str:
    """Fingerprint the substantive content of a persisted quiz."""

    return content_hash(
        title=quiz.title,
        description=quiz.description,
        difficulty=quiz.difficulty,
        tags=quiz.tags,
        questions=quiz.questions,
    )


def quiz_presentation_hash(quiz: Quiz) -> str:
    return presentation_hash(title=quiz.title, description=quiz.description)


def content_hash(
    *,
    title: str | None,
    description: str | None,
    difficulty: Difficulty | None,
    tags: Iterable[Tag],
    questions: Iterable[Question],
) -> str:
    tag_ids = sorted(str(tag.id) for tag in tags)
    question_hashes = sorted(_question_hash(question) for question in questions)
    parts = (
        f"t={normalize_text(title)}",
        f"d={normalize_text(description)}",
        f"df={difficulty.value if difficulty else ''}",
        f"tags=[{','.join(tag_ids)}]",
        f"qs={','.join(question_hashes)}",
    )
    return sha256_hex("|".join(parts))


def presentation_hash(*, title: str | None, description: str | None) -> str:
    """Fingerprint the fields that only affect how a quiz is presented."""

    return sha256_hex(f"t={normalize_text(title)}|d={normalize_text(description)}")


def _question_record_hash(question: QuestionRecord) -> str:
    return _fingerprint(
        type_name=question.type.value if question.type else "",
        difficulty=question.difficulty.value if question.difficulty else "",
        text=question.text,
        hint=question.hint,
        explanation=question.explanation,
        attachment_url=question.attachment_url,
        content=question.content,
    )


def _question_hash(question: Question) -> str:
    return _fingerprint(
        type_name=question.type.value,
        difficulty=question.difficulty.value,
        text=question.text,
        hint=question.hint,
        explanation=question.explanation,
        attachment_url=question.attachment_url,
        content=question.content,
    )


def _fingerprint(  # noqa: PLR0913
    *,
    type_name: str,
    difficulty: str,
    text: str | None,
    hint: str | None,
    explanation: str | None,
    attachment_url: str | None,
    content: Mapping[str, Any] | None,
) -> str:
    root = {
        "type": type_name,
        "difficulty": difficulty,
        "text": normalize_text(text),
        "hint": normalize_text(hint),
        "explanation": normalize_text(explanation),
        "attachmentUrl": (attachment_url or "").strip(),
        "content": canonicalize(content),
    }
    return sha256_hex(_canonical_json(root))


def canonicalize(node: object, field_name: str | None = None) -> object:
    """Return a JSON-compatible copy of ``node`` with a stable ordering."""

    if isinstance(node, Mapping):
        mapping: Mapping[str, object] = node  # type: ignore[assignment]
        has_correct_order = "correctOrder" in mapping
        result: dict[str, object] = {}
        for name in sorted(mapping):
            child = mapping[name]
            # items only carry meaning through their order when correctOrder is absent
            if name == "items" and not has_correct_order and _is_array(child):
                result[name] = [canonicalize(item) for item in child]  # type: ignore[union-attr]
            else:
                result[name] = canonicalize(child, name)
        return result
    if _is_array(node):
        items = [canonicalize(item) for item in node]  # type: ignore[union-attr]
        if field_name in SORTED_ARRAY_FIELDS:
            return sorted(items, key=_sort_key)
        return items
    return node


def _is_array(node: object) -> bool:
    return isinstance(node, Sequence) and not isinstance(node, (str, bytes))


def _sort_key(item: object) -> tuple[int, int, str]:
    if isinstance(item, Mapping):
        identifier = item.get("id")  # type: ignore[union-attr]
        if isinstance(identifier, int) and not isinstance(identifier, bool):
            return (0, identifier, "")
        if isinstance(identifier, str):
            return (1, 0, identifier)
    return (1, 0, _canonical_json(item))


def _canonical_json(node: object) -> str:
    return json.dumps(node, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def _normalized_names(names: Iterable[str]) -> str:
    normalized = {normalize_text(name) for name in names if name}
    normalized.discard("")
    return "[" + ",".join(sorted(normalized)) + "]"
