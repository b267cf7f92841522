"""Inventory stock management."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from pantry_keeper.domain.errors import InvariantViolation, NotFound
from pantry_keeper.domain.inventory import InventoryItem, StorageLocation
from pantry_keeper.mappers import inventory_from_row, inventory_to_row
from pantry_keeper.services.gateway import INVENTORY, RecordStore
from pantry_keeper.services.identity import IdentityProvider, require_user_id
from pantry_keeper.services.matching import expiring_soon

_FIELD_COLUMNS = {
    "name": "name",
    "detail": "detail",
    "storage_location": "storage_type",
    "quantity_text": "quantity",
    "expiry_date": "expiry_date",
    "barcode": "barcode",
}


@dataclass
class InventoryService:
    """Application service for the current user's stock."""

    store: RecordStore
    identity: IdentityProvider

    def add_item(  # noqa: PLR0913
        self,
        name: str,
        expiry_date: date,
        storage_location: StorageLocation = StorageLocation.FRIDGE,
        quantity_text: str = "",
        detail: str | None = None,
        barcode: str | None = None,
    ) -> InventoryItem:
        """Register a stock item for the current user."""
        owner_id = require_user_id(self.identity)
        if not name.strip():
            raise InvariantViolation("Inventory item name must not be empty")
        item = InventoryItem(
            id=uuid4(),
            name=name.strip(),
            storage_location=storage_location,
            quantity_text=quantity_text,
            expiry_date=expiry_date,
            registered_at=datetime.now(tz=UTC),
            detail=detail,
            barcode=barcode,
        )
        row = self.store.insert(INVENTORY, inventory_to_row(item, owner_id))
        return inventory_from_row(row)

    def get_item(self, item_id: UUID) -> InventoryItem:
        row = self.store.get(INVENTORY, str(item_id))
        if row is None:
            raise NotFound(f"Inventory item {item_id} not found")
        return inventory_from_row(row)

    def update_item(self, item_id: UUID, updates: dict[str, object]) -> InventoryItem:
        """Update selected fields of a stock item."""
        unknown = set(updates) - set(_FIELD_COLUMNS)
        if unknown:
            raise InvariantViolation(
                f"Inventory fields cannot be edited: {', '.join(sorted(unknown))}"
            )
        item = self.get_item(item_id)
        updated = replace(item, **_coerce_updates(updates))
        if not updated.name.strip():
            raise InvariantViolation("Inventory item name must not be empty")
        row = inventory_to_row(updated)
        fields = {_FIELD_COLUMNS[key]: row[_FIELD_COLUMNS[key]] for key in updates}
        if fields:
            self.store.update(INVENTORY, str(item_id), fields)
        return updated

    def delete_item(self, item_id: UUID) -> None:
        """Delete a stock item; recipes simply stop matching it."""
        self.store.delete(INVENTORY, str(item_id))

    def list_items(self, owner_id: UUID | None = None) -> list[InventoryItem]:
        """Return the owner's stock ordered by expiry date."""
        owner = owner_id or require_user_id(self.identity)
        rows = self.store.list(INVENTORY, {"user_id": str(owner)})
        items = [inventory_from_row(row) for row in rows]
        return sorted(items, key=lambda item: item.expiry_date)

    def expiring_soon(self, today: date | None = None) -> list[InventoryItem]:
        """Return the current user's items due within a week."""
        return expiring_soon(self.list_items(), today)


def _coerce_updates(updates: dict[str, object]) -> dict[str, object]:
    coerced = dict(updates)
    if "storage_location" in coerced:
        coerced["storage_location"] = StorageLocation(str(coerced["storage_location"]))
    expiry = coerced.get("expiry_date")
    if isinstance(expiry, str):
        coerced["expiry_date"] = date.fromisoformat(expiry)
    if "name" in coerced:
        coerced["name"] = str(coerced["name"]).strip()
    return coerced
