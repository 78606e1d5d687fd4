"""The identity on whose behalf an import runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class Actor:
    id: UUID
    username: str
    permissions: frozenset[str] = field(default_factory=frozenset[str])
