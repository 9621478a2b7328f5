import json
import os

import pytest
from fastapi.testclient import TestClient

# Keep stray get_store() calls away from the working directory
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("LOG_JSON", "false")

from src.api.errors import PersistenceError  # noqa: E402
from src.api.main import app  # noqa: E402
from src.api.repositories import InMemoryStore, JsonFileStore, get_store  # noqa: E402

client = TestClient(app)

URL = "/api/activities"


class FailingStore(InMemoryStore):
    def save(self, activities):
        raise PersistenceError("Failed to save activities")


@pytest.fixture()
def store(tmp_path):
    s = JsonFileStore(str(tmp_path / "data" / "activities.json"))
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.clear()


def stored(store):
    with open(store.path, encoding="utf-8") as f:
        return json.load(f)


def create_activity_payload(title="Standup", start="2024-01-01", **extra):
    payload = {"title": title, "start": start}
    payload.update(extra)
    return payload


def assert_activity_shape(activity: dict):
    for key in ["id", "title", "start", "end", "userId", "description", "type", "created"]:
        assert key in activity
    assert isinstance(activity["id"], str) and activity["id"]
    assert activity["created"].endswith("Z")


class TestHealth:
    def test_health_check(self, store):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] == "json"


class TestCreate:
    def test_create_defaults(self, store):
        res = client.post(URL, json=create_activity_payload(title="T", start="2024-01-01"))
        assert res.status_code == 201
        activity = res.json()
        assert_activity_shape(activity)
        assert activity["end"] == "2024-01-01"
        assert activity["userId"] == "default"
        assert activity["description"] == ""
        assert activity["type"] == "default"
        assert "updated" not in activity

        persisted = stored(store)
        assert len(persisted) == 1
        assert persisted[0]["end"] == "2024-01-01"
        assert persisted[0]["id"] == activity["id"]

    def test_create_all_fields(self, store):
        payload = create_activity_payload(
            title="Run",
            start="2024-02-01T07:00",
            end="2024-02-01T08:00",
            userId="u1",
            description="5k",
            type="sport",
        )
        res = client.post(URL, json=payload)
        assert res.status_code == 201
        activity = res.json()
        for key, value in payload.items():
            assert activity[key] == value

    def test_create_ids_are_unique(self, store):
        ids = {client.post(URL, json=create_activity_payload()).json()["id"] for _ in range(5)}
        assert len(ids) == 5

    @pytest.mark.parametrize(
        "payload",
        [
            {"start": "2024-01-01"},
            {"title": "T"},
            {"title": "", "start": "2024-01-01"},
            {"title": "   ", "start": "2024-01-01"},
            {"title": "T", "start": ""},
            {"end": "2024-01-02", "userId": "u1", "description": "d", "type": "x"},
        ],
    )
    def test_create_missing_required_fields(self, store, payload):
        res = client.post(URL, json=payload)
        assert res.status_code == 400
        assert res.json() == {"error": "Title and start date are required"}
        assert stored(store) == []

    def test_create_malformed_body(self, store):
        res = client.post(URL, content="{not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid request body"}

    def test_create_body_not_an_object(self, store):
        res = client.post(URL, json=[{"title": "T", "start": "2024-01-01"}])
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid request body"}

    def test_create_persistence_failure(self):
        app.dependency_overrides[get_store] = lambda: FailingStore()
        try:
            res = client.post(URL, json=create_activity_payload())
        finally:
            app.dependency_overrides.clear()
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to save activity"}


class TestList:
    def test_list_empty(self, store):
        res = client.get(URL)
        assert res.status_code == 200
        assert res.json() == []

    def test_list_scoped_to_user(self, store):
        client.post(URL, json=create_activity_payload(title="mine", userId="u1"))
        client.post(URL, json=create_activity_payload(title="theirs", userId="u2"))

        res = client.get(URL, params={"userId": "u1"})
        assert res.status_code == 200
        items = res.json()
        assert [a["title"] for a in items] == ["mine"]
        assert all(a["userId"] == "u1" for a in items)

    def test_list_defaults_to_default_user(self, store):
        client.post(URL, json=create_activity_payload(title="anon"))
        client.post(URL, json=create_activity_payload(title="u1", userId="u1"))

        assert [a["title"] for a in client.get(URL).json()] == ["anon"]
        assert [a["title"] for a in client.get(URL, params={"userId": ""}).json()] == ["anon"]

    def test_create_n_then_list_returns_n_in_order(self, store):
        created = [
            client.post(URL, json=create_activity_payload(title=f"A{i}", userId="u9")).json()
            for i in range(4)
        ]
        listed = client.get(URL, params={"userId": "u9"}).json()
        assert listed == created

    def test_list_survives_corrupt_document(self, store):
        with open(store.path, "w", encoding="utf-8") as f:
            f.write("{broken")
        res = client.get(URL)
        assert res.status_code == 200
        assert res.json() == []

    def test_list_returns_loosely_shaped_records_as_stored(self, store):
        seeded = [
            {"id": "1", "title": "T", "start": "2024-01-01", "userId": "default"},
            {"id": 2, "title": "numeric id", "userId": "default", "color": "red"},
            {"id": "3", "title": "other user", "userId": "u2"},
        ]
        with open(store.path, "w", encoding="utf-8") as f:
            json.dump(seeded, f)

        res = client.get(URL)
        assert res.status_code == 200
        assert res.json() == seeded[:2]


class TestUpdate:
    def test_update_replaces_mutable_fields(self, store):
        created = client.post(
            URL,
            json=create_activity_payload(title="Old", end="2024-01-05", userId="u1", description="d", type="work"),
        ).json()

        res = client.put(URL, json={"id": created["id"], "title": "New", "start": "2024-03-01", "userId": "u1"})
        assert res.status_code == 200
        updated = res.json()
        assert updated["id"] == created["id"]
        assert updated["userId"] == "u1"
        assert updated["created"] == created["created"]
        assert updated["title"] == "New"
        assert updated["start"] == "2024-03-01"
        # omitted optional fields are reset, not kept
        assert updated["end"] == "2024-03-01"
        assert updated["description"] == ""
        assert updated["type"] == "default"
        assert updated["updated"].endswith("Z")

        assert stored(store) == [updated]

    def test_update_not_found_leaves_collection_unchanged(self, store):
        client.post(URL, json=create_activity_payload())
        before = stored(store)

        res = client.put(URL, json={"id": "missing", "title": "X", "start": "2024-01-01"})
        assert res.status_code == 404
        assert res.json() == {"error": "Activity not found"}
        assert stored(store) == before

    def test_update_wrong_user_is_not_found(self, store):
        created = client.post(URL, json=create_activity_payload(userId="u1")).json()
        res = client.put(URL, json={"id": created["id"], "title": "X", "start": "2024-01-01", "userId": "u2"})
        assert res.status_code == 404
        assert client.get(URL, params={"userId": "u1"}).json() == [created]

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "T", "start": "2024-01-01"},
            {"id": "1", "start": "2024-01-01"},
            {"id": "1", "title": "T"},
            {"id": "", "title": "T", "start": "2024-01-01"},
            {"id": "1", "title": "T", "start": "", "end": "2024-01-02", "description": "d"},
        ],
    )
    def test_update_missing_required_fields(self, store, payload):
        res = client.put(URL, json=payload)
        assert res.status_code == 400
        assert res.json() == {"error": "ID, title and start date are required"}

    def test_update_malformed_body(self, store):
        res = client.put(URL, content="nope", headers={"Content-Type": "application/json"})
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid request body"}

    def test_update_persistence_failure(self):
        failing = FailingStore()
        InMemoryStore.save(failing, [
            {
                "id": "a1",
                "title": "T",
                "start": "2024-01-01",
                "end": "2024-01-01",
                "userId": "default",
                "description": "",
                "type": "default",
                "created": "2024-01-01T00:00:00.000Z",
            }
        ])
        app.dependency_overrides[get_store] = lambda: failing
        try:
            res = client.put(URL, json={"id": "a1", "title": "X", "start": "2024-01-02"})
        finally:
            app.dependency_overrides.clear()
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to update activity"}

    def test_update_keeps_extra_stored_fields(self, store):
        with open(store.path, "w", encoding="utf-8") as f:
            json.dump(
                [{"id": "a1", "title": "T", "start": "2024-01-01", "userId": "default", "color": "red"}], f
            )

        res = client.put(URL, json={"id": "a1", "title": "X", "start": "2024-02-01"})
        assert res.status_code == 200
        assert res.json()["color"] == "red"
        assert res.json()["title"] == "X"
        assert stored(store)[0]["color"] == "red"
        assert client.get(URL).json()[0]["color"] == "red"

    def test_update_null_user_id_matches_nothing(self, store):
        created = client.post(URL, json=create_activity_payload()).json()

        res = client.put(URL, json={"id": created["id"], "title": "X", "start": "2024-01-01", "userId": None})
        assert res.status_code == 404
        assert res.json() == {"error": "Activity not found"}

        res_default = client.put(URL, json={"id": created["id"], "title": "X", "start": "2024-01-01"})
        assert res_default.status_code == 200
        assert res_default.json()["userId"] == "default"


class TestDelete:
    def test_delete_then_list_excludes_record(self, store):
        keep = client.post(URL, json=create_activity_payload(title="keep", userId="u1")).json()
        gone = client.post(URL, json=create_activity_payload(title="gone", userId="u1")).json()

        res = client.delete(URL, params={"id": gone["id"], "userId": "u1"})
        assert res.status_code == 200
        assert res.json() == {"message": "Activity deleted successfully"}

        assert client.get(URL, params={"userId": "u1"}).json() == [keep]
        # deleting again is a 404 and the record stays absent
        res_again = client.delete(URL, params={"id": gone["id"], "userId": "u1"})
        assert res_again.status_code == 404
        assert res_again.json() == {"error": "Activity not found"}
        assert client.get(URL, params={"userId": "u1"}).json() == [keep]

    def test_delete_requires_id(self, store):
        res = client.delete(URL)
        assert res.status_code == 400
        assert res.json() == {"error": "Activity ID is required"}

    def test_delete_scoped_to_user(self, store):
        created = client.post(URL, json=create_activity_payload(userId="u1")).json()
        res = client.delete(URL, params={"id": created["id"]})
        assert res.status_code == 404
        assert len(stored(store)) == 1

    def test_delete_persistence_failure(self):
        failing = FailingStore()
        InMemoryStore.save(failing, [{"id": "a1", "userId": "default"}])
        app.dependency_overrides[get_store] = lambda: failing
        try:
            res = client.delete(URL, params={"id": "a1"})
        finally:
            app.dependency_overrides.clear()
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to delete activity"}
