"""Resolve category and tag names to persisted references.

Lookups are case-insensitive. Missing names are either reported
(``NotFoundError``) or created, depending on the import options. A creation that
loses a uniqueness race against a concurrent writer is recovered by querying
again exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from quizport.domain.model import Category, Tag
from quizport.domain.ports.persistence import DuplicateEntityError

from .errors import ConflictError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from quizport.domain.ports.persistence import CategoryRepository, TagRepository

DEFAULT_CATEGORY_DESCRIPTION = "Category created by import"

log = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def retry_once_after_conflict[T](
    attempt: Callable[[], T],
    requery: Callable[[], T | None],
    *,
    describe: str,
) -> T:
    """Run ``attempt``; after a uniqueness conflict, re-query once instead.

    Raises ``ConflictError`` when the re-query still finds nothing.
    """

    try:
        return attempt()
    except DuplicateEntityError as exc:
        log.info("Lost creation race for %s, retrying lookup", describe)
        found = requery()
        if found is None:
            raise ConflictError(f"Could not create or find {describe}") from exc
        return found


@dataclass(slots=True)
class ReferenceCache:
    """Run-scoped memo of resolved references keyed by normalized name.

    Entries created while a unit of work is open are *pending* until
    ``commit_pending`` seals them; ``discard_pending`` drops them after a
    rollback so later records never point at unsaved rows.
    """

    categories: dict[str, Category] = field(default_factory=dict[str, Category])
    tags: dict[str, Tag] = field(default_factory=dict[str, Tag])
    _pending: list[tuple[dict[str, Category] | dict[str, Tag], str]] = field(
        default_factory=list[tuple[dict[str, Category] | dict[str, Tag], str]]
    )

    def remember_category(self, key: str, category: Category, *, created: bool = False) -> None:
        self.categories[key] = category
        if created:
            self._pending.append((self.categories, key))

    def remember_tag(self, key: str, tag: Tag, *, created: bool = False) -> None:
        self.tags[key] = tag
        if created:
            self._pending.append((self.tags, key))

    def commit_pending(self) -> None:
        self._pending.clear()

    def discard_pending(self) -> None:
        for mapping, key in self._pending:
            mapping.pop(key, None)
        self._pending.clear()

    def clear(self) -> None:
        self.categories.clear()
        self.tags.clear()
        self._pending.clear()

    def __len__(self) -> int:
        return len(self.categories) + len(self.tags)


@dataclass(slots=True)
class ReferenceResolver:
    """Resolve names against one unit of work's repositories.

    A resolver is cheap and bound to a single record's repositories; the
    ``cache`` it writes to is shared across the records of one run. With
    ``persist=False`` (dry runs) missing references are built in memory only.
    """

    categories: CategoryRepository
    tags: TagRepository
    cache: ReferenceCache
    persist: bool = True

    def resolve_category(self, name: str | None, *, auto_create: bool) -> Category | None:
        if name is None or not name.strip():
            return None
        trimmed = name.strip()
        key = normalize_name(trimmed)
        cached = self.cache.categories.get(key)
        if cached is not None:
            return cached

        existing = self.categories.find_by_name(trimmed)
        if existing is not None:
            self.cache.remember_category(key, existing)
            return existing
        if not auto_create:
            raise NotFoundError(f"Category {trimmed} not found")

        def create() -> Category:
            category = Category(name=trimmed, description=DEFAULT_CATEGORY_DESCRIPTION)
            if self.persist:
                self.categories.add(category)
            return category

        resolved = retry_once_after_conflict(
            create,
            lambda: self.categories.find_by_name(trimmed),
            describe=f"category {trimmed}",
        )
        self.cache.remember_category(key, resolved, created=self.persist)
        log.debug("Created category %s", trimmed)
        return resolved

    def resolve_tags(self, names: Iterable[str] | None, *, auto_create: bool) -> set[Tag]:
        if not names:
            return set()

        resolved: dict[str, Tag] = {}
        originals: dict[str, str] = {}
        for name in names:
            if not name or not name.strip():
                continue
            trimmed = name.strip()
            key = normalize_name(trimmed)
            cached = self.cache.tags.get(key)
            if cached is not None:
                resolved[key] = cached
                continue
            originals.setdefault(key, trimmed)

        unresolved = [key for key in originals if key not in resolved]
        if unresolved:
            self._absorb_existing(unresolved, resolved)
            unresolved = [key for key in unresolved if key not in resolved]

        if unresolved:
            if not auto_create:
                missing = ", ".join(originals[key] for key in unresolved)
                raise NotFoundError(f"Tag(s) not found: {missing}")
            self._create_tags(unresolved, originals, resolved)

        return set(resolved.values())

    def _absorb_existing(self, keys: list[str], resolved: dict[str, Tag]) -> None:
        for tag in self.tags.find_by_names(keys):
            key = normalize_name(tag.name)
            self.cache.remember_tag(key, tag)
            resolved[key] = tag

    def _create_tags(
        self,
        keys: list[str],
        originals: dict[str, str],
        resolved: dict[str, Tag],
    ) -> None:
        def create() -> dict[str, Tag]:
            created = {key: Tag(name=originals[key]) for key in keys}
            if self.persist:
                self.tags.add_all(created.values())
            return created

        def requery() -> dict[str, Tag] | None:
            found = {normalize_name(tag.name): tag for tag in self.tags.find_by_names(keys)}
            if any(key not in found for key in keys):
                return None
            return found

        names = ", ".join(originals[key] for key in keys)
        created = retry_once_after_conflict(create, requery, describe=f"tag(s) {names}")
        for key, tag in created.items():
            self.cache.remember_tag(key, tag, created=self.persist)
            resolved[key] = tag
