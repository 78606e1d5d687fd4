"""Authorization facts consumed (not computed) by the import engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from quizport.domain.model import Actor


@runtime_checkable
class ModerationPolicy(Protocol):
    def has_moderation_capability(self, actor: Actor) -> bool: ...
