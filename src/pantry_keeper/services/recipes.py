"""Recipe lineage management.

A recipe always keeps at least one version, and its current label always
names one of them. Every operation validates against the cached aggregate,
builds the updated value, writes it through the gateway and only then
replaces the cache entry.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID, uuid4

from pantry_keeper.domain.errors import InvariantViolation, NotFound
from pantry_keeper.domain.recipes import INITIAL_VERSION_LABEL, Recipe, RecipeVersion
from pantry_keeper.mappers import recipe_from_row, recipe_to_row, version_to_row
from pantry_keeper.services.gateway import RECIPES, RecordStore
from pantry_keeper.services.identity import IdentityProvider, require_user_id

_logger = logging.getLogger(__name__)

INITIAL_CHANGE_NOTES = "Initial version"
ORIGIN_MINE = "mine"
ORIGIN_IMPORTED = "imported"


@dataclass
class RecipeLineageService:
    """Owns recipe aggregates and their version history."""

    store: RecordStore
    identity: IdentityProvider
    cache: dict[UUID, Recipe] = field(default_factory=dict)

    def load_recipes(self, owner_id: UUID | None = None) -> list[Recipe]:
        """Refresh the cache with the owner's recipes from the gateway."""
        owner = owner_id or require_user_id(self.identity)
        rows = self.store.list(RECIPES, {"user_id": str(owner)})
        recipes = [recipe_from_row(row) for row in rows]
        for stale_id in [
            recipe_id
            for recipe_id, recipe in self.cache.items()
            if recipe.owner_id == owner
        ]:
            del self.cache[stale_id]
        for recipe in recipes:
            self.cache[recipe.id] = recipe
        return recipes

    def get_recipe(self, recipe_id: UUID) -> Recipe:
        """Return a recipe from the cache, falling back to the gateway."""
        cached = self.cache.get(recipe_id)
        if cached is not None:
            return cached
        row = self.store.get(RECIPES, str(recipe_id))
        if row is None:
            raise NotFound(f"Recipe {recipe_id} not found")
        recipe = recipe_from_row(row)
        self.cache[recipe.id] = recipe
        return recipe

    def list_recipes(
        self,
        owner_id: UUID | None = None,
        origin: str | None = None,
        query: str | None = None,
    ) -> list[Recipe]:
        """Return cached recipes filtered by origin and title substring."""
        owner = owner_id or require_user_id(self.identity)
        needle = (query or "").strip().lower()
        results = []
        for recipe in self.cache.values():
            if recipe.owner_id != owner:
                continue
            if origin == ORIGIN_MINE and recipe.is_imported:
                continue
            if origin == ORIGIN_IMPORTED and not recipe.is_imported:
                continue
            if needle and needle not in recipe.title.lower():
                continue
            results.append(recipe)
        return results

    def create_recipe(self, title: str, description: str = "") -> Recipe:
        """Create a recipe holding a single empty version labeled 1.0."""
        owner = require_user_id(self.identity)
        initial = RecipeVersion(
            version_label=INITIAL_VERSION_LABEL,
            change_notes=INITIAL_CHANGE_NOTES,
            created_at=datetime.now(tz=UTC),
            sequence=1,
        )
        return self.insert_recipe(owner, title, description, initial)

    def insert_recipe(
        self,
        owner_id: UUID,
        title: str,
        description: str,
        initial_version: RecipeVersion,
        source_author_label: str | None = None,
    ) -> Recipe:
        """Persist a new single-version recipe aggregate."""
        if not title.strip():
            raise InvariantViolation("Recipe title must not be empty")
        _require_label(initial_version.version_label)
        recipe = Recipe(
            id=uuid4(),
            title=title.strip(),
            description=description,
            current_version_label=initial_version.version_label,
            owner_id=owner_id,
            versions=(replace(initial_version, sequence=1),),
            source_author_label=source_author_label,
        )
        row = self.store.insert(RECIPES, recipe_to_row(recipe))
        stored = recipe_from_row(row)
        self.cache[stored.id] = stored
        _logger.info("Recipe created: recipe_id=%s owner=%s", stored.id, owner_id)
        return stored

    def append_version(self, recipe_id: UUID, version: RecipeVersion) -> Recipe:
        """Append a version and make it current."""
        require_user_id(self.identity)
        recipe = self.get_recipe(recipe_id)
        _require_label(version.version_label)
        _require_unique_label(recipe, version.version_label, skip_index=None)
        appended = replace(
            version,
            created_at=version.created_at or datetime.now(tz=UTC),
            sequence=_next_sequence(recipe),
        )
        updated = replace(
            recipe,
            versions=(*recipe.versions, appended),
            current_version_label=appended.version_label,
        )
        self._save_lineage(updated)
        _logger.info(
            "Recipe version appended: recipe_id=%s label=%s",
            recipe_id,
            appended.version_label,
        )
        return updated

    def edit_version(
        self, recipe_id: UUID, index: int, new_content: RecipeVersion
    ) -> Recipe:
        """Replace the version at ``index`` keeping its creation time."""
        recipe = self.get_recipe(recipe_id)
        _require_index(recipe, index)
        _require_label(new_content.version_label)
        _require_unique_label(recipe, new_content.version_label, skip_index=index)
        original = recipe.versions[index]
        edited = replace(
            new_content,
            created_at=original.created_at,
            sequence=original.sequence,
        )
        versions = list(recipe.versions)
        versions[index] = edited
        current_label = recipe.current_version_label
        is_latest = index == len(recipe.versions) - 1
        if is_latest or original.version_label == current_label:
            current_label = edited.version_label
        updated = replace(
            recipe, versions=tuple(versions), current_version_label=current_label
        )
        self._save_lineage(updated)
        _logger.info(
            "Recipe version edited: recipe_id=%s index=%s label=%s",
            recipe_id,
            index,
            edited.version_label,
        )
        return updated

    def delete_version(self, recipe_id: UUID, index: int) -> Recipe:
        """Remove a version; the last remaining version cannot be deleted."""
        recipe = self.get_recipe(recipe_id)
        if len(recipe.versions) <= 1:
            raise InvariantViolation("A recipe must keep at least one version")
        _require_index(recipe, index)
        removed = recipe.versions[index]
        versions = recipe.versions[:index] + recipe.versions[index + 1 :]
        current_label = recipe.current_version_label
        if removed.version_label == current_label:
            current_label = versions[-1].version_label
        updated = replace(
            recipe, versions=versions, current_version_label=current_label
        )
        self._save_lineage(updated)
        _logger.info(
            "Recipe version deleted: recipe_id=%s label=%s",
            recipe_id,
            removed.version_label,
        )
        return updated

    def set_primary(self, recipe_id: UUID, label: str) -> Recipe:
        """Make an existing version current."""
        recipe = self.get_recipe(recipe_id)
        if all(version.version_label != label for version in recipe.versions):
            raise InvariantViolation(f"Recipe has no version labeled {label!r}")
        updated = replace(recipe, current_version_label=label)
        self.store.update(RECIPES, str(recipe_id), {"current_version": label})
        self.cache[recipe_id] = updated
        return updated

    def update_details(
        self,
        recipe_id: UUID,
        title: str | None = None,
        description: str | None = None,
    ) -> Recipe:
        """Update the title and/or description of a recipe."""
        recipe = self.get_recipe(recipe_id)
        fields: dict[str, object] = {}
        if title is not None:
            if not title.strip():
                raise InvariantViolation("Recipe title must not be empty")
            fields["title"] = title.strip()
        if description is not None:
            fields["description"] = description
        if not fields:
            return recipe
        updated = replace(recipe, **fields)
        self.store.update(RECIPES, str(recipe_id), fields)
        self.cache[recipe_id] = updated
        return updated

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe; published snapshots are not affected."""
        self.store.delete(RECIPES, str(recipe_id))
        self.cache.pop(recipe_id, None)
        _logger.info("Recipe deleted: recipe_id=%s", recipe_id)

    def _save_lineage(self, recipe: Recipe) -> None:
        self.store.update(
            RECIPES,
            str(recipe.id),
            {
                "versions": [version_to_row(version) for version in recipe.versions],
                "current_version": recipe.current_version_label,
            },
        )
        self.cache[recipe.id] = recipe


def display_versions(recipe: Recipe) -> list[tuple[int, RecipeVersion]]:
    """Return (storage index, version) pairs, current first then newest first."""
    indexed = list(enumerate(recipe.versions))
    primary = next(
        (
            pair
            for pair in indexed
            if pair[1].version_label == recipe.current_version_label
        ),
        None,
    )
    others = [pair for pair in indexed if pair is not primary]
    others.reverse()
    return [primary, *others] if primary else others


def suggest_next_label(recipe: Recipe) -> str:
    """Suggest a display label for the next recorded version."""
    if not recipe.versions:
        return INITIAL_VERSION_LABEL
    latest = recipe.versions[-1].version_label.strip()
    try:
        number = Decimal(latest)
    except InvalidOperation:
        return f"{latest}.1"
    if not number.is_finite():
        return f"{latest}.1"
    return str((number + Decimal("0.1")).quantize(Decimal("0.1")))


def _next_sequence(recipe: Recipe) -> int:
    return max((version.sequence for version in recipe.versions), default=0) + 1


def _require_index(recipe: Recipe, index: int) -> None:
    if not 0 <= index < len(recipe.versions):
        raise InvariantViolation(f"Version index {index} is out of range")


def _require_label(label: str) -> None:
    if not label.strip():
        raise InvariantViolation("Version label must not be empty")


def _require_unique_label(recipe: Recipe, label: str, skip_index: int | None) -> None:
    for idx, version in enumerate(recipe.versions):
        if idx != skip_index and version.version_label == label:
            raise InvariantViolation(f"Recipe already has a version labeled {label!r}")
