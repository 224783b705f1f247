"""REST API tests through the full container, over a SQLite file."""

from collections.abc import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI

from datareg.application.api.rest.app import create_app
from datareg.config import Config, DatabaseConfig

ALICE = {"X-Actor-Id": "alice"}
BOB = {"X-Actor-Id": "bob"}


@pytest.fixture
async def app(engine, database_url) -> AsyncIterator[FastAPI]:
    # `engine` has already created the schema in the same file
    app = create_app(Config(database=DatabaseConfig(url=database_url, auto_migrate=False)))
    yield app
    await app.state.dishka_container.close()


@pytest.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as client:
        yield client


async def _upload(client, ref: str, headers=ALICE, **body) -> int:
    body = {"dataset_ref": ref, "is_public": False, **body}
    response = await client.post("/datasets", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestUpload:
    async def test_sequential_ids(self, client):
        assert await _upload(client, "bafy-0") == 0
        assert await _upload(client, "bafy-1", headers=BOB) == 1

    async def test_requires_actor(self, client):
        body = {"dataset_ref": "bafy-0", "is_public": False}
        response = await client.post("/datasets", json=body)
        assert response.status_code == 401
        assert response.json()["code"] == "missing_actor"

    async def test_blank_actor_header_is_anonymous(self, client):
        response = await client.post(
            "/datasets",
            json={"dataset_ref": "bafy-0", "is_public": False},
            headers={"X-Actor-Id": "  "},
        )
        assert response.status_code == 401

    async def test_empty_ref(self, client):
        response = await client.post(
            "/datasets", json={"dataset_ref": "", "is_public": False}, headers=ALICE
        )
        assert response.status_code == 422
        assert response.json() == {
            "code": "VALIDATION_ERROR",
            "message": "dataset_ref must not be empty",
            "field": "dataset_ref",
        }

    async def test_whitespace_ref_is_a_valid_reference(self, client):
        dataset_id = await _upload(client, "   ")

        response = await client.get(f"/datasets/{dataset_id}", headers=ALICE)

        assert response.json()["dataset_ref"] == "   "

    async def test_visibility_must_be_given(self, client):
        response = await client.post("/datasets", json={"dataset_ref": "bafy-0"}, headers=ALICE)
        assert response.status_code == 422
        assert (await client.get("/stats")).json() == {"datasets": 0}

    async def test_duplicate_ref(self, client):
        await _upload(client, "bafy-0")
        response = await client.post(
            "/datasets", json={"dataset_ref": "bafy-0", "is_public": False}, headers=BOB
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_REFERENCE"


class TestRead:
    async def test_owner_sees_private(self, client):
        dataset_id = await _upload(client, "bafy-0", analysis_ref="bafy-a")

        response = await client.get(f"/datasets/{dataset_id}", headers=ALICE)

        assert response.status_code == 200
        body = response.json()
        assert body["owner"] == "alice"
        assert body["analysis_ref"] == "bafy-a"
        assert body["is_public"] is False
        assert (body["views"], body["downloads"], body["citations"]) == (0, 0, 0)

    @pytest.mark.parametrize("headers", [BOB, {}])
    async def test_others_denied_private(self, client, headers):
        dataset_id = await _upload(client, "bafy-0")
        response = await client.get(f"/datasets/{dataset_id}", headers=headers)
        assert response.status_code == 403
        assert response.json()["code"] == "ACCESS_DENIED"

    async def test_unknown_id(self, client):
        response = await client.get("/datasets/7")
        assert response.status_code == 404

    @pytest.mark.parametrize("dataset_id", [-1, 2**63, 99999999999999999999])
    async def test_id_outside_storable_range_is_not_found(self, client, dataset_id):
        response = await client.get(f"/datasets/{dataset_id}")
        assert response.status_code == 404
        assert response.json()["code"] == "NotFoundError"

    async def test_list_public_and_mine(self, client):
        await _upload(client, "bafy-0", is_public=True)
        await _upload(client, "bafy-1")
        await _upload(client, "bafy-2", headers=BOB, is_public=True)

        public = (await client.get("/datasets")).json()["items"]
        mine = (await client.get("/datasets/mine", headers=ALICE)).json()["items"]
        page = (await client.get("/datasets", params={"limit": 1, "offset": 1})).json()["items"]

        assert [d["id"] for d in public] == [0, 2]
        assert [d["id"] for d in mine] == [0, 1]
        assert [d["id"] for d in page] == [2]

    async def test_mine_requires_actor(self, client):
        assert (await client.get("/datasets/mine")).status_code == 401

    async def test_bad_limit(self, client):
        response = await client.get("/datasets", params={"limit": 0})
        assert response.status_code == 422
        assert response.json()["field"] == "limit"

    async def test_stats_counts_private(self, client):
        await _upload(client, "bafy-0")
        await _upload(client, "bafy-1", is_public=True)
        assert (await client.get("/stats")).json() == {"datasets": 2}


class TestOwnerChanges:
    async def test_update_analysis_and_visibility(self, client):
        dataset_id = await _upload(client, "bafy-0")

        analysis = await client.put(
            f"/datasets/{dataset_id}/analysis", json={"analysis_ref": "bafy-new"}, headers=ALICE
        )
        visibility = await client.put(
            f"/datasets/{dataset_id}/visibility", json={"is_public": True}, headers=ALICE
        )

        assert analysis.json()["analysis_ref"] == "bafy-new"
        assert visibility.json()["is_public"] is True
        assert (await client.get(f"/datasets/{dataset_id}")).status_code == 200

    async def test_non_owner_forbidden(self, client):
        dataset_id = await _upload(client, "bafy-0", is_public=True)

        response = await client.put(
            f"/datasets/{dataset_id}/visibility", json={"is_public": False}, headers=BOB
        )

        assert response.status_code == 403
        assert response.json()["code"] == "NOT_OWNER"
        assert (await client.get(f"/datasets/{dataset_id}")).json()["is_public"] is True


class TestUsage:
    async def test_counters_on_public_dataset(self, client):
        dataset_id = await _upload(client, "bafy-0", is_public=True)

        for counter in ("views", "views", "downloads", "citations"):
            response = await client.post(f"/datasets/{dataset_id}/{counter}")
            assert response.json() == {"counted": True}

        body = (await client.get(f"/datasets/{dataset_id}")).json()
        assert (body["views"], body["downloads"], body["citations"]) == (2, 1, 1)

    async def test_private_dataset_silent_no_op(self, client):
        dataset_id = await _upload(client, "bafy-0")

        response = await client.post(f"/datasets/{dataset_id}/views", headers=BOB)

        assert response.status_code == 200
        assert response.json() == {"counted": False}
        body = (await client.get(f"/datasets/{dataset_id}", headers=ALICE)).json()
        assert body["views"] == 0

    async def test_counter_on_id_outside_storable_range_is_not_found(self, client):
        response = await client.post(f"/datasets/{2**63}/views", headers=ALICE)
        assert response.status_code == 404
        assert (await client.get("/events")).json()["events"] == []

    async def test_unknown_counter(self, client):
        dataset_id = await _upload(client, "bafy-0", is_public=True)
        response = await client.post(f"/datasets/{dataset_id}/likes")
        assert response.status_code == 422


class TestEvents:
    async def test_changefeed_in_commit_order(self, client):
        dataset_id = await _upload(client, "bafy-0", is_public=True)
        await client.post(f"/datasets/{dataset_id}/views")
        await client.post(f"/datasets/{dataset_id}/views", headers=BOB)
        await client.put(
            f"/datasets/{dataset_id}/visibility", json={"is_public": False}, headers=ALICE
        )
        await client.post(f"/datasets/{dataset_id}/views", headers=BOB)  # not counted

        body = (await client.get("/events")).json()

        assert [e["type"] for e in body["events"]] == [
            "DatasetUploaded",
            "DatasetViewed",
            "DatasetViewed",
            "VisibilityChanged",
        ]
        assert body["total"] == 4
        assert body["has_more"] is False
        assert body["events"][0]["data"]["owner"] == "alice"

    async def test_pagination_and_lookup(self, client):
        await _upload(client, "bafy-0")
        await _upload(client, "bafy-1")

        first = (await client.get("/events", params={"limit": 1})).json()
        second = (await client.get("/events", params={"limit": 1, "after": first["cursor"]})).json()
        single = await client.get(f"/events/{first['cursor']}")

        assert first["has_more"] is True
        assert second["events"][0]["data"]["dataset_ref"] == "bafy-1"
        assert single.json()["data"]["dataset_ref"] == "bafy-0"

    async def test_unknown_event(self, client):
        response = await client.get("/events/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
