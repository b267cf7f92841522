"""Domain models for kitchen inventory."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID


class StorageLocation(StrEnum):
    """Where an inventory item is kept."""

    FRIDGE = "FRIDGE"
    FREEZER = "FREEZER"
    PANTRY = "PANTRY"


@dataclass(frozen=True)
class InventoryItem:
    """A stocked ingredient with its expiry date."""

    id: UUID
    name: str
    storage_location: StorageLocation
    quantity_text: str
    expiry_date: date
    registered_at: datetime
    detail: str | None = None
    barcode: str | None = None
