"""Persistence gateway interface shared by all services."""

from collections.abc import Mapping
from typing import Protocol

RECIPES = "recipes"
INVENTORY = "inventory"
COMMUNITY_SNAPSHOTS = "community_snapshots"
COMMENTS = "comments"
SNAPSHOT_LIKES = "snapshot_likes"


class RecordStore(Protocol):
    """Generic record store keyed by record id."""

    def get(self, collection: str, record_id: str) -> dict[str, object] | None:
        """Return a record by id, if present."""

    def list(
        self, collection: str, filters: Mapping[str, object] | None = None
    ) -> list[dict[str, object]]:
        """Return records matching all equality filters."""

    def insert(self, collection: str, record: dict[str, object]) -> dict[str, object]:
        """Insert a record and return it as stored."""

    def update(
        self, collection: str, record_id: str, fields: dict[str, object]
    ) -> None:
        """Update fields of an existing record."""

    def delete(self, collection: str, record_id: str) -> None:
        """Delete a record by id."""
