"""Tests for inventory management."""

from datetime import date
from uuid import UUID, uuid4

import pytest

from pantry_keeper.domain.errors import InvariantViolation, NotFound, Unauthenticated
from pantry_keeper.domain.inventory import StorageLocation
from pantry_keeper.services.gateway import INVENTORY
from pantry_keeper.services.identity import StaticIdentityProvider
from pantry_keeper.services.inventory import InventoryService
from tests.conftest import TODAY


def test_add_item_stores_owner_and_location(services, record_store, user_id) -> None:
    item = services.inventory.add_item(
        " Milk ",
        date(2024, 5, 12),
        StorageLocation.FRIDGE,
        quantity_text="1 L",
        barcode="880123",
    )

    assert item.name == "Milk"
    assert item.barcode == "880123"
    row = record_store.rows(INVENTORY)[0]
    assert row["user_id"] == str(user_id)
    assert row["storage_type"] == "FRIDGE"
    assert row["expiry_date"] == "2024-05-12"


def test_add_item_requires_identity(record_store) -> None:
    service = InventoryService(record_store, StaticIdentityProvider(None))

    with pytest.raises(Unauthenticated):
        service.add_item("Milk", TODAY)


def test_add_item_rejects_blank_name(services) -> None:
    with pytest.raises(InvariantViolation):
        services.inventory.add_item("   ", TODAY)


def test_list_items_is_scoped_to_owner_and_sorted(container, services) -> None:
    services.inventory.add_item("Rice", date(2024, 8, 1), StorageLocation.PANTRY)
    services.inventory.add_item("Egg", date(2024, 5, 11))
    other = container.services_for(StaticIdentityProvider(UUID(int=7)))
    other.inventory.add_item("Beef", date(2024, 5, 10), StorageLocation.FREEZER)

    assert [item.name for item in services.inventory.list_items()] == ["Egg", "Rice"]


def test_update_item_coerces_and_persists(services, record_store) -> None:
    item = services.inventory.add_item("Tofu", date(2024, 5, 15))

    updated = services.inventory.update_item(
        item.id,
        {"storage_location": "FREEZER", "expiry_date": "2024-06-30", "name": " Tofu "},
    )

    assert updated.storage_location is StorageLocation.FREEZER
    assert updated.expiry_date == date(2024, 6, 30)
    assert services.inventory.get_item(item.id) == updated
    row = record_store.rows(INVENTORY)[0]
    assert row["storage_type"] == "FREEZER"
    assert row["name"] == "Tofu"


def test_update_item_rejects_unknown_field(services) -> None:
    item = services.inventory.add_item("Tofu", TODAY)

    with pytest.raises(InvariantViolation):
        services.inventory.update_item(item.id, {"registered_at": "2020-01-01"})


def test_delete_item(services) -> None:
    item = services.inventory.add_item("Tofu", TODAY)

    services.inventory.delete_item(item.id)

    with pytest.raises(NotFound):
        services.inventory.get_item(item.id)
    with pytest.raises(NotFound):
        services.inventory.delete_item(uuid4())


def test_expiring_soon_uses_current_stock(services) -> None:
    services.inventory.add_item("Spinach", date(2024, 5, 12))
    services.inventory.add_item("Cream", date(2024, 5, 1))
    services.inventory.add_item("Rice", date(2024, 9, 1))

    upcoming = services.inventory.expiring_soon(today=TODAY)

    assert [item.name for item in upcoming] == ["Spinach"]
