"""Tests for the FastAPI API endpoints."""

import pytest
from fastapi.testclient import TestClient

from reorder_kernel.api.app import create_app
from reorder_kernel.collection.store import CollectionStore


@pytest.fixture
def store():
    return CollectionStore(db_path=":memory:")


@pytest.fixture
def client(store):
    """Create a test client over a fresh store."""
    return TestClient(create_app(store=store))


def _seed(client, *entity_ids, keyspace=None):
    body = {"id": "board"}
    if keyspace:
        body["keyspace"] = keyspace
    assert client.post("/collections", json=body).status_code == 200
    for entity_id in entity_ids:
        response = client.post(
            "/collections/board/entities",
            json={"entity_id": entity_id, "properties": {"title": entity_id}},
        )
        assert response.status_code == 200


def _ids(client) -> list:
    return [e["id"] for e in client.get("/collections/board/entities").json()]


class TestCollectionEndpoints:
    def test_create_collection(self, client):
        response = client.post("/collections", json={
            "id": "board",
            "keyspace": {"kind": "padded_numeric", "width": 6},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["keyspace"]["kind"] == "padded_numeric"
        assert data["keyspace"]["width"] == 6

    def test_duplicate_collection(self, client):
        _seed(client)
        response = client.post("/collections", json={"id": "board"})
        assert response.status_code == 422

    def test_get_missing_collection(self, client):
        response = client.get("/collections/nope")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "NotFoundError"

    def test_get_collection_counts_entities(self, client):
        _seed(client, "A", "B")
        assert client.get("/collections/board").json()["entity_count"] == 2


class TestEntityEndpoints:
    def test_append_and_list(self, client):
        _seed(client, "A", "B", "C")
        assert _ids(client) == ["A", "B", "C"]

    def test_remove(self, client):
        _seed(client, "A", "B")
        response = client.delete("/collections/board/entities/A")
        assert response.status_code == 200
        assert _ids(client) == ["B"]

    def test_remove_missing(self, client):
        _seed(client, "A")
        response = client.delete("/collections/board/entities/Z")
        assert response.status_code == 404


class TestReorderEndpoints:
    def test_reorder(self, client):
        _seed(client, "A", "B", "C")
        response = client.post("/collections/board/reorder", json={
            "target_id": "C",
            "to_first": True,
            "before_id": "A",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["committed"] is True
        assert data["target_index"] == 0
        assert _ids(client) == ["C", "A", "B"]

    def test_reorder_not_adjacent(self, client):
        _seed(client, "A", "B", "C", "D")
        response = client.post("/collections/board/reorder", json={
            "target_id": "D",
            "after_id": "A",
            "before_id": "C",
        })
        assert response.status_code == 422
        assert "adjacent" in response.json()["detail"]["message"]
        assert _ids(client) == ["A", "B", "C", "D"]

    def test_reorder_unknown_target(self, client):
        _seed(client, "A", "B")
        response = client.post("/collections/board/reorder", json={
            "target_id": "Z",
            "after_id": "A",
            "before_id": "B",
        })
        assert response.status_code == 404

    def test_exhausted_then_renumber(self, client):
        _seed(client, "A", "B", keyspace={"kind": "padded_numeric", "width": 1})
        # A=4, B=5
        client.post("/collections/board/entities", json={"entity_id": "C"})
        # C=6; squeeze C between A and B until the gap closes
        statuses = []
        for _ in range(5):
            order = _ids(client)
            response = client.post("/collections/board/reorder", json={
                "target_id": order[2],
                "after_id": order[0],
                "before_id": order[1],
            })
            statuses.append(response.status_code)
        assert 409 in statuses

        response = client.post("/collections/board/renumber")
        assert response.status_code == 200
        assert [e["sort_key"] for e in response.json()] == ["2", "4", "6"]

    def test_stale_commit_conflict(self, client, store):
        _seed(client, "A", "B", "C")
        original = store.commit_sort_key

        def stale_commit(collection_id, entity_id, new_key, expected_version=None):
            return original(collection_id, entity_id, new_key, expected_version + 1)

        store.commit_sort_key = stale_commit
        response = client.post("/collections/board/reorder", json={
            "target_id": "C",
            "to_first": True,
            "before_id": "A",
        })
        assert response.status_code == 409
        assert _ids(client) == ["A", "B", "C"]
