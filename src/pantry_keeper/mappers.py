"""Two-way mapping between domain objects and flat gateway rows."""

from datetime import UTC, date, datetime
from uuid import UUID

from pantry_keeper.domain.community import Comment, CommunitySnapshot
from pantry_keeper.domain.inventory import InventoryItem, StorageLocation
from pantry_keeper.domain.recipes import Ingredient, Recipe, RecipeVersion

_EPOCH = datetime.min.replace(tzinfo=UTC)


def ingredient_to_row(ingredient: Ingredient) -> dict[str, object]:
    return {
        "name": ingredient.name,
        "amount": ingredient.amount_text,
        "is_required": ingredient.is_required,
    }


def ingredient_from_row(row: dict[str, object]) -> Ingredient:
    return Ingredient(
        name=str(row.get("name") or ""),
        amount_text=str(row.get("amount") or ""),
        is_required=bool(row.get("is_required") or row.get("isRequired")),
    )


def version_to_row(version: RecipeVersion) -> dict[str, object]:
    """Serialize a version into the JSON shape stored in ``recipes.versions``."""
    return {
        "version": version.version_label,
        "sequence": version.sequence,
        "ingredients": [ingredient_to_row(ing) for ing in version.ingredients],
        "steps": list(version.steps),
        "notes": version.change_notes,
        "memo": version.private_memo,
        "created_at": _format_datetime(version.created_at),
    }


def version_from_row(row: dict[str, object], position: int) -> RecipeVersion:
    """Parse a stored version; legacy rows get their sequence from position."""
    raw_sequence = row.get("sequence")
    raw_created = row.get("created_at") or row.get("createdAt")
    return RecipeVersion(
        version_label=str(row.get("version") or ""),
        ingredients=tuple(
            ingredient_from_row(ing) for ing in _as_list(row.get("ingredients"))
        ),
        steps=tuple(str(step) for step in _as_list(row.get("steps"))),
        change_notes=str(row.get("notes") or ""),
        private_memo=_optional_str(row.get("memo")),
        created_at=_parse_datetime(raw_created),
        sequence=int(raw_sequence) if isinstance(raw_sequence, int) else position + 1,
    )


def recipe_to_row(recipe: Recipe) -> dict[str, object]:
    return {
        "id": str(recipe.id),
        "title": recipe.title,
        "description": recipe.description,
        "current_version": recipe.current_version_label,
        "versions": [version_to_row(version) for version in recipe.versions],
        "user_id": str(recipe.owner_id),
        "source_author": recipe.source_author_label,
    }


def recipe_from_row(row: dict[str, object]) -> Recipe:
    versions = tuple(
        version_from_row(version, position)
        for position, version in enumerate(_as_list(row.get("versions")))
    )
    return Recipe(
        id=UUID(str(row["id"])),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        current_version_label=str(row.get("current_version") or ""),
        owner_id=UUID(str(row["user_id"])),
        versions=versions,
        source_author_label=_optional_str(row.get("source_author")),
    )


def inventory_to_row(
    item: InventoryItem, owner_id: UUID | None = None
) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(item.id),
        "name": item.name,
        "detail": item.detail,
        "storage_type": item.storage_location.value,
        "quantity": item.quantity_text,
        "expiry_date": item.expiry_date.isoformat(),
        "registered_at": item.registered_at.isoformat(),
        "barcode": item.barcode,
    }
    if owner_id is not None:
        row["user_id"] = str(owner_id)
    return row


def inventory_from_row(row: dict[str, object]) -> InventoryItem:
    registered_at = _parse_datetime(row.get("registered_at"))
    return InventoryItem(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or ""),
        storage_location=StorageLocation(str(row.get("storage_type") or "FRIDGE")),
        quantity_text=str(row.get("quantity") or ""),
        expiry_date=_parse_date(row.get("expiry_date")),
        registered_at=registered_at or _EPOCH,
        detail=_optional_str(row.get("detail")),
        barcode=_optional_str(row.get("barcode")),
    )


def snapshot_to_row(snapshot: CommunitySnapshot) -> dict[str, object]:
    return {
        "id": str(snapshot.id),
        "original_recipe_id": (
            str(snapshot.source_recipe_id) if snapshot.source_recipe_id else None
        ),
        "title": snapshot.title,
        "description": snapshot.description,
        "ingredients": [ingredient_to_row(ing) for ing in snapshot.ingredients],
        "steps": list(snapshot.steps),
        "author_id": str(snapshot.author_id),
        "author_name": snapshot.author_label,
        "created_at": snapshot.created_at.isoformat(),
        "likes_count": snapshot.like_count,
        "views_count": snapshot.view_count,
    }


def snapshot_from_row(row: dict[str, object]) -> CommunitySnapshot:
    source_id = row.get("original_recipe_id")
    return CommunitySnapshot(
        id=UUID(str(row["id"])),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        ingredients=tuple(
            ingredient_from_row(ing) for ing in _as_list(row.get("ingredients"))
        ),
        steps=tuple(str(step) for step in _as_list(row.get("steps"))),
        author_id=UUID(str(row["author_id"])),
        created_at=_parse_datetime(row.get("created_at")) or _EPOCH,
        source_recipe_id=UUID(str(source_id)) if source_id else None,
        author_label=_optional_str(row.get("author_name")),
        like_count=int(row.get("likes_count") or 0),
        view_count=int(row.get("views_count") or 0),
    )


def comment_to_row(comment: Comment) -> dict[str, object]:
    return {
        "id": str(comment.id),
        "recipe_id": str(comment.snapshot_id),
        "parent_id": str(comment.parent_id) if comment.parent_id else None,
        "user_id": str(comment.author_id),
        "content": comment.content,
        "created_at": comment.created_at.isoformat(),
    }


def comment_from_row(row: dict[str, object]) -> Comment:
    parent_id = row.get("parent_id")
    return Comment(
        id=UUID(str(row["id"])),
        snapshot_id=UUID(str(row["recipe_id"])),
        author_id=UUID(str(row["user_id"])),
        content=str(row.get("content") or ""),
        created_at=_parse_datetime(row.get("created_at")) or _EPOCH,
        parent_id=UUID(str(parent_id)) if parent_id else None,
    )


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        return None
    # naive timestamps are stored as UTC
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
