"""HTTP tests for /api/data."""
import pytest

from passvault.app.core.errors import (
    MSG_INTEGRITY_CHECK_FAILED,
    MSG_NO_USER_ID_PROVIDED,
    MSG_VERSION_CONFLICT,
)

pytestmark = pytest.mark.asyncio


def item(cid, payload=None, hash=None):
    return {"client_side_id": cid, "payload": payload or f"enc({cid})", "hash": hash or f"h({cid})"}


def versioned(cid, version, payload=None):
    return {**item(cid, payload or f"enc-v{version + 1}({cid})"), "version": version}


class TestUpload:
    async def test_created(self, api):
        response = await api.upload([item("a"), item("b")])
        assert response.status_code == 201

        records = (await api.all()).json()
        assert [(r["client_side_id"], r["version"], r["deleted"]) for r in records] == [
            ("a", 0, False),
            ("b", 0, False),
        ]
        assert records[0]["payload"] == "enc(a)"
        assert records[0]["user_id"] == api.user_id

    async def test_duplicate(self, api):
        await api.upload([item("a")])
        response = await api.upload([item("a")])
        assert response.status_code == 409
        assert "client_side_id=a" in response.text

    async def test_tampered_body(self, api):
        body = api.upload_body([item("a")])
        body["payload_list"][0]["payload"] = "tampered"

        response = await api.client.post("/api/data/", json=body, headers=api.headers)
        assert response.status_code == 400
        assert response.text == MSG_INTEGRITY_CHECK_FAILED
        assert (await api.all()).json() == []

    async def test_wrong_hash(self, api):
        body = api.upload_body([item("a")])
        body["hash"] = "0" * 64
        response = await api.client.post("/api/data/", json=body, headers=api.headers)
        assert response.status_code == 400

    async def test_foreign_user_id(self, api, other_user):
        response = await api.upload([item("a")], user_id=other_user.id)
        assert response.status_code == 403

    async def test_missing_user_id(self, api):
        body = api.upload_body([item("a")])
        del body["user_id"]
        response = await api.client.post("/api/data/", json=body, headers=api.headers)
        assert response.status_code == 400
        assert response.text == MSG_NO_USER_ID_PROVIDED

    async def test_empty_list(self, api):
        response = await api.upload([])
        assert response.status_code == 400

    async def test_invalid_json(self, api):
        response = await api.client.post(
            "/api/data/",
            content=b"{not json",
            headers={**api.headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    async def test_length_is_informational(self, api):
        body = api.upload_body([item("a")])
        body["length"] = 99
        response = await api.client.post("/api/data/", json=body, headers=api.headers)
        assert response.status_code == 201

    async def test_unauthenticated_before_integrity(self, api):
        body = api.upload_body([item("a")])
        body["hash"] = "bad"
        response = await api.client.post("/api/data/", json=body)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestUpdate:
    async def test_version_increments(self, api):
        await api.upload([item("a")])

        response = await api.update([versioned("a", 0)])
        assert response.status_code == 200

        [record] = (await api.all()).json()
        assert record["version"] == 1
        assert record["payload"] == "enc-v1(a)"

    async def test_stale_version(self, api):
        await api.upload([item("a")])
        await api.update([versioned("a", 0)])

        response = await api.update([versioned("a", 0)])
        assert response.status_code == 409
        assert response.text.startswith(MSG_VERSION_CONFLICT)

    async def test_unknown_record(self, api):
        response = await api.update([versioned("ghost", 0)])
        assert response.status_code == 404

    async def test_missing_version(self, api):
        await api.upload([item("a")])
        response = await api.update([item("a")])
        assert response.status_code == 400

    async def test_tampered_body(self, api):
        await api.upload([item("a")])
        body = api.update_body([versioned("a", 0)])
        body["private_data_updates"][0]["payload"] = "tampered"

        response = await api.client.put("/api/data/update", json=body, headers=api.headers)
        assert response.status_code == 400
        assert response.text == MSG_INTEGRITY_CHECK_FAILED

        [record] = (await api.all()).json()
        assert (record["payload"], record["hash"], record["version"]) == ("enc(a)", "h(a)", 0)

    async def test_foreign_user_id(self, api, other_api):
        await other_api.upload([item("theirs")])

        response = await api.update([versioned("theirs", 0)], user_id=other_api.user_id)
        assert response.status_code == 403

        [record] = (await other_api.all()).json()
        assert (record["payload"], record["version"]) == ("enc(theirs)", 0)


class TestDelete:
    async def test_tombstone(self, api):
        await api.upload([item("a"), item("b")])

        response = await api.delete([{"client_side_id": "a", "version": 0}])
        assert response.status_code == 200

        assert [r["client_side_id"] for r in (await api.all()).json()] == ["b"]
        states = (await api.sync()).json()["states"]
        assert {s["client_side_id"]: (s["version"], s["deleted"]) for s in states} == {
            "a": (1, True),
            "b": (0, False),
        }

    async def test_stale_version(self, api):
        await api.upload([item("a")])
        await api.update([versioned("a", 0)])
        response = await api.delete([{"client_side_id": "a", "version": 0}])
        assert response.status_code == 409

    async def test_missing_version(self, api):
        await api.upload([item("a")])
        response = await api.delete([{"client_side_id": "a"}])
        assert response.status_code == 400

    async def test_foreign_user_id(self, api, other_api):
        await other_api.upload([item("theirs")])

        response = await api.delete([{"client_side_id": "theirs", "version": 0}], user_id=other_api.user_id)
        assert response.status_code == 403

        [record] = (await other_api.all()).json()
        assert (record["deleted"], record["version"]) == (False, 0)
        [state] = (await other_api.sync()).json()["states"]
        assert (state["deleted"], state["version"]) == (False, 0)


class TestDownload:
    async def test_selected(self, api):
        await api.upload([item("a"), item("b"), item("c")])

        response = await api.download(["c", "a", "unknown"])
        assert response.status_code == 200
        assert [r["client_side_id"] for r in response.json()] == ["a", "c"]

    async def test_empty(self, api):
        response = await api.download([])
        assert response.status_code == 400

    async def test_isolated_between_users(self, api, other_api):
        await other_api.upload([item("secret")])

        assert (await api.all()).json() == []
        assert (await api.download(["secret"])).json() == []

    async def test_foreign_user_id(self, api, other_user):
        response = await api.download(["a"], user_id=other_user.id)
        assert response.status_code == 403
