"""Permission-name based authorization facts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from quizport.domain.model import Actor

QUIZ_MODERATE: Final = "QUIZ_MODERATE"
QUIZ_ADMIN: Final = "QUIZ_ADMIN"


@dataclass(frozen=True, slots=True)
class PermissionModerationPolicy:
    """An actor can moderate when holding any of ``moderation_permissions``."""

    moderation_permissions: frozenset[str] = field(
        default_factory=lambda: frozenset({QUIZ_MODERATE, QUIZ_ADMIN})
    )

    def has_moderation_capability(self, actor: Actor) -> bool:
        return not self.moderation_permissions.isdisjoint(actor.permissions)


if TYPE_CHECKING:
    from quizport.domain.ports import ModerationPolicy

    _policy_check: ModerationPolicy = PermissionModerationPolicy()
