"""Request bodies accepted by the HTTP API."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from pantry_keeper.domain.inventory import StorageLocation
from pantry_keeper.domain.recipes import Ingredient, RecipeVersion


class IngredientPayload(BaseModel):
    """Ingredient line of a recipe or snapshot."""

    name: str
    amount: str = ""
    is_required: bool = False

    def to_domain(self) -> Ingredient:
        return Ingredient(
            name=self.name, amount_text=self.amount, is_required=self.is_required
        )


class RecipeCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""


class RecipeDetailsUpdate(BaseModel):
    title: str | None = None
    description: str | None = None


class VersionPayload(BaseModel):
    """Content of a recorded or edited recipe version."""

    version: str = Field(min_length=1)
    ingredients: list[IngredientPayload] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    notes: str = ""
    memo: str | None = None

    def to_domain(self) -> RecipeVersion:
        # blank rows left over from form editing are dropped
        return RecipeVersion(
            version_label=self.version.strip(),
            ingredients=tuple(
                ing.to_domain() for ing in self.ingredients if ing.name.strip()
            ),
            steps=tuple(step for step in self.steps if step.strip()),
            change_notes=self.notes,
            private_memo=self.memo,
        )


class PrimaryVersion(BaseModel):
    label: str


class InventoryCreate(BaseModel):
    name: str = Field(min_length=1)
    expiry_date: date
    storage_location: StorageLocation = StorageLocation.FRIDGE
    quantity: str = ""
    detail: str | None = None
    barcode: str | None = None


class InventoryUpdate(BaseModel):
    name: str | None = None
    expiry_date: date | None = None
    storage_location: StorageLocation | None = None
    quantity: str | None = None
    detail: str | None = None
    barcode: str | None = None


class PublishRequest(BaseModel):
    """Publish a recipe version; the current version is used by default."""

    recipe_id: UUID
    version_index: int | None = None
    title: str | None = None
    description: str | None = None
    author_label: str | None = None


class SnapshotUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    ingredients: list[IngredientPayload] | None = None
    steps: list[str] | None = None


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    parent_id: UUID | None = None
