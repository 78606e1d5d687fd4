"""Import channel configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from quizport.domain.imports.records import DEFAULT_MAX_ITEMS

from .env import optional_env_var, optional_int_env_var, optional_uuid_env_var

if TYPE_CHECKING:
    from uuid import UUID

DEFAULT_ATTACHMENT_HOST = "cdn.quizzence.com"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    """Holds settings shared by the import parsers and the reconciliation engine.

    ``attachment_host`` is the only host question attachment URLs may point at.
    ``default_category_id`` is used for records that name no category.
    """

    attachment_host: str = DEFAULT_ATTACHMENT_HOST
    default_category_id: UUID | None = None
    max_items: int = DEFAULT_MAX_ITEMS


def get_import_config() -> ImportConfig:
    max_items = optional_int_env_var("QUIZPORT_MAX_ITEMS", minimum=1)
    return ImportConfig(
        attachment_host=optional_env_var("QUIZPORT_ATTACHMENT_HOST") or DEFAULT_ATTACHMENT_HOST,
        default_category_id=optional_uuid_env_var("QUIZPORT_DEFAULT_CATEGORY_ID"),
        max_items=max_items if max_items is not None else DEFAULT_MAX_ITEMS,
    )
