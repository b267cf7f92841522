"""Tests for the HTTP API."""

from datetime import date, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from pantry_keeper.api.app import create_app
from tests.conftest import InMemoryRecordStore

AUTH_A = {"Authorization": "Bearer token-a"}
AUTH_B = {"Authorization": "Bearer token-b"}


def _client(container) -> TestClient:
    return TestClient(create_app(container))


def _version(label: str, *names: str, memo: str | None = None) -> dict[str, object]:
    return {
        "version": label,
        "ingredients": [{"name": name, "amount": "1"} for name in names],
        "steps": ["Cook"],
        "notes": f"Notes for {label}",
        "memo": memo,
    }


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_recipe_requires_bearer_token(container) -> None:
    client = _client(container)

    missing = client.post("/recipes", json={"title": "Soup"})
    wrong_scheme = client.post(
        "/recipes", json={"title": "Soup"}, headers={"Authorization": "Basic x"}
    )

    assert missing.status_code == 401
    assert missing.json()["error"] == "Unauthenticated"
    assert wrong_scheme.status_code == 401


def test_recipe_version_flow(container) -> None:
    client = _client(container)
    created = client.post(
        "/recipes", json={"title": "Omelette"}, headers=AUTH_A
    ).json()
    recipe_id = created["id"]
    assert created["next_version_label"] == "1.1"

    appended = client.post(
        f"/recipes/{recipe_id}/versions",
        json=_version("1.1", "Egg", ""),
        headers=AUTH_A,
    )
    assert appended.status_code == 201
    body = appended.json()
    assert body["current_version"] == "1.1"
    assert [v["index"] for v in body["versions"]] == [1, 0]
    assert [i["name"] for i in body["versions"][0]["ingredients"]] == ["Egg"]

    primary = client.post(
        f"/recipes/{recipe_id}/primary", json={"label": "1.0"}, headers=AUTH_A
    )
    assert primary.json()["current_version"] == "1.0"

    deleted = client.delete(f"/recipes/{recipe_id}/versions/0", headers=AUTH_A)
    assert deleted.status_code == 200
    assert deleted.json()["current_version"] == "1.1"

    last = client.delete(f"/recipes/{recipe_id}/versions/0", headers=AUTH_A)
    assert last.status_code == 409
    assert last.json()["error"] == "InvariantViolation"

    listed = client.get("/recipes", headers=AUTH_A).json()["recipes"]
    assert [recipe["id"] for recipe in listed] == [recipe_id]


def test_unknown_recipe_is_404(container) -> None:
    response = _client(container).get(f"/recipes/{uuid4()}", headers=AUTH_A)

    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_gateway_failure_is_502(container, record_store: InMemoryRecordStore) -> None:
    record_store.failing.add("insert")

    response = _client(container).post(
        "/recipes", json={"title": "Soup"}, headers=AUTH_A
    )

    assert response.status_code == 502
    assert response.json()["error"] == "GatewayFailure"


def test_inventory_and_recommendations(container) -> None:
    client = _client(container)
    today = date.today()
    recipe_id = client.post(
        "/recipes", json={"title": "Omelette"}, headers=AUTH_A
    ).json()["id"]
    client.post(
        f"/recipes/{recipe_id}/versions",
        json=_version("1.1", "Egg"),
        headers=AUTH_A,
    )
    egg = client.post(
        "/inventory",
        json={"name": "egg", "expiry_date": (today + timedelta(days=2)).isoformat()},
        headers=AUTH_A,
    )
    assert egg.status_code == 201

    expiring = client.get("/inventory/expiring", headers=AUTH_A).json()["items"]
    assert [item["name"] for item in expiring] == ["egg"]

    ranked = client.get("/recommendations", headers=AUTH_A).json()
    assert ranked["recommendations"][0]["title"] == "Omelette"
    assert ranked["recommendations"][0]["score"] == 21
    assert ranked["recommendations"][0]["reasons"] == ["Egg"]

    patched = client.patch(
        f"/inventory/{egg.json()['id']}",
        json={"storage_location": "FREEZER"},
        headers=AUTH_A,
    )
    assert patched.json()["storage_location"] == "FREEZER"

    client.delete(f"/inventory/{egg.json()['id']}", headers=AUTH_A)
    empty = client.get("/recommendations", headers=AUTH_A).json()
    assert empty["recommendations"] == []


def test_publish_and_import_between_users(container) -> None:
    client = _client(container)
    recipe_id = client.post(
        "/recipes", json={"title": "Pancake"}, headers=AUTH_A
    ).json()["id"]
    client.post(
        f"/recipes/{recipe_id}/versions",
        json=_version("1.1", "Flour", memo="secret"),
        headers=AUTH_A,
    )

    published = client.post(
        "/community",
        json={"recipe_id": recipe_id, "author_label": "Mina"},
        headers=AUTH_A,
    )
    assert published.status_code == 201
    snapshot = published.json()
    assert "memo" not in str(snapshot)

    out_of_range = client.post(
        "/community",
        json={"recipe_id": recipe_id, "version_index": 5},
        headers=AUTH_A,
    )
    assert out_of_range.status_code == 409

    imported = client.post(f"/community/{snapshot['id']}/import", headers=AUTH_B)
    assert imported.status_code == 201
    recipe = imported.json()
    assert recipe["source_author"] == "Mina"
    assert recipe["versions"][0]["notes"] == (
        "Imported from community recipe by Mina"
    )

    liked = client.post(f"/community/{snapshot['id']}/like", headers=AUTH_B).json()
    assert liked == {"liked": True, "likes_count": 1}

    comment = client.post(
        f"/community/{snapshot['id']}/comments",
        json={"content": "Tasty"},
        headers=AUTH_B,
    )
    assert comment.status_code == 201
    comments = client.get(f"/community/{snapshot['id']}/comments").json()
    assert [c["content"] for c in comments["comments"]] == ["Tasty"]

    listing = client.get("/community", params={"q": "pan"}).json()
    assert [item["id"] for item in listing["recipes"]] == [snapshot["id"]]


def test_recommendations_respect_explicit_zero_top_n(container) -> None:
    client = _client(container)
    recipe_id = client.post(
        "/recipes", json={"title": "Omelette"}, headers=AUTH_A
    ).json()["id"]
    client.post(
        f"/recipes/{recipe_id}/versions", json=_version("1.1", "Egg"), headers=AUTH_A
    )
    client.post(
        "/inventory",
        json={"name": "egg", "expiry_date": date.today().isoformat()},
        headers=AUTH_A,
    )

    none = client.get("/recommendations", params={"top_n": 0}, headers=AUTH_A)
    default = client.get("/recommendations", headers=AUTH_A)

    assert none.json()["recommendations"] == []
    assert len(default.json()["recommendations"]) == 1
