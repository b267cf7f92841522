"""Community snapshots: publish, edit, re-import, likes and comments."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from pantry_keeper.domain.community import Comment, CommunitySnapshot
from pantry_keeper.domain.errors import GatewayFailure, InvariantViolation, NotFound
from pantry_keeper.domain.recipes import (
    INITIAL_VERSION_LABEL,
    Ingredient,
    Recipe,
    RecipeVersion,
)
from pantry_keeper.mappers import (
    comment_from_row,
    comment_to_row,
    ingredient_to_row,
    snapshot_from_row,
    snapshot_to_row,
)
from pantry_keeper.services.gateway import (
    COMMENTS,
    COMMUNITY_SNAPSHOTS,
    SNAPSHOT_LIKES,
    RecordStore,
)
from pantry_keeper.services.identity import IdentityProvider, require_user_id
from pantry_keeper.services.recipes import RecipeLineageService

_logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"title", "description", "ingredients", "steps"}


def provenance_note(author_label: str) -> str:
    """Change note recorded on a recipe imported from the community."""
    return f"Imported from community recipe by {author_label}"


@dataclass
class CommunitySnapshotService:
    """Publishes independent copies of recipe versions and re-imports them."""

    store: RecordStore
    identity: IdentityProvider
    recipes: RecipeLineageService

    def publish(  # noqa: PLR0913
        self,
        recipe: Recipe,
        version: RecipeVersion | None = None,
        *,
        title: str | None = None,
        description: str | None = None,
        author_label: str | None = None,
    ) -> CommunitySnapshot:
        """Copy a recipe version into a new snapshot.

        Change notes and private memos are never copied.
        """
        author_id = require_user_id(self.identity)
        source = version or recipe.current_version or recipe.versions[0]
        resolved_title = (title if title is not None else recipe.title).strip()
        if not resolved_title:
            raise InvariantViolation("Snapshot title must not be empty")
        snapshot = CommunitySnapshot(
            id=uuid4(),
            title=resolved_title,
            description=description if description is not None else recipe.description,
            ingredients=_copy_ingredients(source.ingredients),
            steps=tuple(source.steps),
            author_id=author_id,
            created_at=datetime.now(tz=UTC),
            source_recipe_id=recipe.id,
            author_label=author_label or str(author_id),
        )
        row = self.store.insert(COMMUNITY_SNAPSHOTS, snapshot_to_row(snapshot))
        stored = snapshot_from_row(row)
        _logger.info(
            "Snapshot published: snapshot_id=%s recipe_id=%s label=%s",
            stored.id,
            recipe.id,
            source.version_label,
        )
        return stored

    def get_snapshot(self, snapshot_id: UUID) -> CommunitySnapshot:
        row = self.store.get(COMMUNITY_SNAPSHOTS, str(snapshot_id))
        if row is None:
            raise NotFound(f"Snapshot {snapshot_id} not found")
        return snapshot_from_row(row)

    def list_snapshots(self, query: str | None = None) -> list[CommunitySnapshot]:
        """Return snapshots newest first, optionally filtered by title."""
        needle = (query or "").strip().lower()
        snapshots = [
            snapshot_from_row(row) for row in self.store.list(COMMUNITY_SNAPSHOTS)
        ]
        if needle:
            snapshots = [s for s in snapshots if needle in s.title.lower()]
        return _newest_first(snapshots)

    def list_by_author(self, author_id: UUID) -> list[CommunitySnapshot]:
        rows = self.store.list(COMMUNITY_SNAPSHOTS, {"author_id": str(author_id)})
        return _newest_first([snapshot_from_row(row) for row in rows])

    def edit_snapshot(
        self, snapshot_id: UUID, updates: dict[str, object]
    ) -> CommunitySnapshot:
        """Update the snapshot's own content; the source recipe is untouched."""
        unknown = set(updates) - _EDITABLE_FIELDS
        if unknown:
            raise InvariantViolation(
                f"Snapshot fields cannot be edited: {', '.join(sorted(unknown))}"
            )
        snapshot = self.get_snapshot(snapshot_id)
        changes: dict[str, object] = {}
        if "title" in updates:
            title = str(updates["title"]).strip()
            if not title:
                raise InvariantViolation("Snapshot title must not be empty")
            changes["title"] = title
        if "description" in updates:
            changes["description"] = str(updates["description"])
        if "ingredients" in updates:
            changes["ingredients"] = _copy_ingredients(updates["ingredients"])
        if "steps" in updates:
            changes["steps"] = tuple(str(step) for step in updates["steps"])
        if not changes:
            return snapshot
        updated = replace(snapshot, **changes)
        fields = dict(changes)
        if "ingredients" in fields:
            fields["ingredients"] = [
                ingredient_to_row(ing) for ing in updated.ingredients
            ]
        if "steps" in fields:
            fields["steps"] = list(updated.steps)
        self.store.update(COMMUNITY_SNAPSHOTS, str(snapshot_id), fields)
        return updated

    def delete_snapshot(self, snapshot_id: UUID) -> None:
        """Remove a snapshot; the recipe it was published from is kept."""
        self.store.delete(COMMUNITY_SNAPSHOTS, str(snapshot_id))

    def import_snapshot(self, snapshot: CommunitySnapshot) -> Recipe:
        """Create a new independent recipe from a snapshot."""
        owner_id = require_user_id(self.identity)
        author_label = snapshot.author_label or str(snapshot.author_id)
        initial = RecipeVersion(
            version_label=INITIAL_VERSION_LABEL,
            ingredients=_copy_ingredients(snapshot.ingredients),
            steps=tuple(snapshot.steps),
            change_notes=provenance_note(author_label),
            created_at=datetime.now(tz=UTC),
        )
        recipe = self.recipes.insert_recipe(
            owner_id,
            snapshot.title,
            snapshot.description,
            initial,
            source_author_label=author_label,
        )
        _logger.info(
            "Snapshot imported: snapshot_id=%s recipe_id=%s", snapshot.id, recipe.id
        )
        return recipe

    def increment_views(self, snapshot_id: UUID) -> int:
        """Count one view and return the new total."""
        snapshot = self.get_snapshot(snapshot_id)
        views = snapshot.view_count + 1
        self.store.update(COMMUNITY_SNAPSHOTS, str(snapshot_id), {"views_count": views})
        return views

    def toggle_like(self, snapshot_id: UUID) -> bool:
        """Flip the current user's like; return True if the snapshot is now liked.

        The counter is written before the like row and restored if the row
        write fails, so a failed toggle can be retried as the same toggle.
        """
        user_id = require_user_id(self.identity)
        snapshot = self.get_snapshot(snapshot_id)
        existing = self.store.list(
            SNAPSHOT_LIKES,
            {"snapshot_id": str(snapshot_id), "user_id": str(user_id)},
        )
        liked = not existing
        likes = snapshot.like_count + 1 if liked else max(snapshot.like_count - 1, 0)
        self._set_like_count(snapshot_id, likes)
        try:
            if liked:
                self.store.insert(
                    SNAPSHOT_LIKES,
                    {
                        "id": str(uuid4()),
                        "snapshot_id": str(snapshot_id),
                        "user_id": str(user_id),
                    },
                )
            else:
                for row in existing:
                    self.store.delete(SNAPSHOT_LIKES, str(row["id"]))
        except GatewayFailure:
            _logger.warning(
                "Like write failed, restoring count: snapshot_id=%s", snapshot_id
            )
            self._set_like_count(snapshot_id, snapshot.like_count)
            raise
        return liked

    def add_comment(
        self, snapshot_id: UUID, content: str, parent_id: UUID | None = None
    ) -> Comment:
        """Add a root comment or a reply to a root comment."""
        author_id = require_user_id(self.identity)
        if not content.strip():
            raise InvariantViolation("Comment must not be empty")
        self.get_snapshot(snapshot_id)
        if parent_id is not None:
            parent = self._get_comment(parent_id)
            if parent.snapshot_id != snapshot_id:
                raise InvariantViolation(
                    "Reply must target a comment on the same recipe"
                )
            if parent.parent_id is not None:
                raise InvariantViolation("Replies can only target root comments")
        comment = Comment(
            id=uuid4(),
            snapshot_id=snapshot_id,
            author_id=author_id,
            content=content.strip(),
            created_at=datetime.now(tz=UTC),
            parent_id=parent_id,
        )
        row = self.store.insert(COMMENTS, comment_to_row(comment))
        return comment_from_row(row)

    def list_comments(self, snapshot_id: UUID) -> list[Comment]:
        rows = self.store.list(COMMENTS, {"recipe_id": str(snapshot_id)})
        return sorted(
            (comment_from_row(row) for row in rows),
            key=lambda comment: comment.created_at,
        )

    def delete_comment(self, comment_id: UUID) -> None:
        """Delete a comment along with its replies."""
        comment = self._get_comment(comment_id)
        if comment.parent_id is None:
            for reply in self.store.list(COMMENTS, {"parent_id": str(comment_id)}):
                self.store.delete(COMMENTS, str(reply["id"]))
        self.store.delete(COMMENTS, str(comment_id))

    def _set_like_count(self, snapshot_id: UUID, likes: int) -> None:
        self.store.update(COMMUNITY_SNAPSHOTS, str(snapshot_id), {"likes_count": likes})

    def _get_comment(self, comment_id: UUID) -> Comment:
        row = self.store.get(COMMENTS, str(comment_id))
        if row is None:
            raise NotFound(f"Comment {comment_id} not found")
        return comment_from_row(row)


def _copy_ingredients(ingredients: object) -> tuple[Ingredient, ...]:
    copied = []
    for ing in ingredients if isinstance(ingredients, list | tuple) else []:
        if isinstance(ing, Ingredient):
            copied.append(replace(ing))
        elif isinstance(ing, dict):
            copied.append(
                Ingredient(
                    name=str(ing.get("name") or ""),
                    amount_text=str(ing.get("amount_text") or ing.get("amount") or ""),
                    is_required=bool(ing.get("is_required")),
                )
            )
    return tuple(copied)


def _newest_first(snapshots: list[CommunitySnapshot]) -> list[CommunitySnapshot]:
    return sorted(snapshots, key=lambda snapshot: snapshot.created_at, reverse=True)
