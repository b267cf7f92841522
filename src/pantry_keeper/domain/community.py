"""Domain models for community sharing."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pantry_keeper.domain.recipes import Ingredient


@dataclass(frozen=True)
class CommunitySnapshot:
    """Publish-time copy of a recipe version."""

    id: UUID
    title: str
    description: str
    ingredients: tuple[Ingredient, ...]
    steps: tuple[str, ...]
    author_id: UUID
    created_at: datetime
    source_recipe_id: UUID | None = None
    author_label: str | None = None
    like_count: int = 0
    view_count: int = 0


@dataclass(frozen=True)
class Comment:
    """Comment on a community snapshot, optionally replying to a root comment."""

    id: UUID
    snapshot_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    parent_id: UUID | None = None
