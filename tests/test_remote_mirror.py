"""Unit tests for promptforge/storage/remote_mirror.py"""
import httpx
import pytest

from promptforge.storage import RemoteMirror


@pytest.mark.asyncio
async def test_insert_posts_record_with_auth_headers(mirror, remote):
    ok = await mirror.table("prompts").insert({"id": "p1", "title": "Hello"})

    assert ok is True
    request = remote.calls("POST", "prompts")[0]
    assert str(request.url) == "https://remote.test/rest/v1/prompts"
    assert remote.body(request) == {"id": "p1", "title": "Hello"}
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer user-token"


@pytest.mark.asyncio
async def test_update_and_delete_filter_by_id(mirror, remote):
    await mirror.table("prompts").update("p1", {"title": "New"})
    await mirror.table("prompts").delete("p1")

    patch = remote.calls("PATCH", "prompts")[0]
    delete = remote.calls("DELETE", "prompts")[0]
    assert patch.url.params["id"] == "eq.p1"
    assert remote.body(patch) == {"title": "New"}
    assert delete.url.params["id"] == "eq.p1"


@pytest.mark.asyncio
async def test_delete_match_uses_every_filter(mirror, remote):
    await mirror.table("prompt_tags").delete_match({"prompt_id": "p1", "tag_id": "t1"})

    request = remote.calls("DELETE", "prompt_tags")[0]
    assert request.url.params["prompt_id"] == "eq.p1"
    assert request.url.params["tag_id"] == "eq.t1"


@pytest.mark.asyncio
async def test_list_by_owner(mirror, remote):
    remote.rows = [{"id": "p1"}]

    rows = await mirror.table("prompts").list_by_owner("owner-1")

    assert rows == [{"id": "p1"}]
    request = remote.calls("GET", "prompts")[0]
    assert request.url.params["user_id"] == "eq.owner-1"
    assert request.url.params["order"] == "updated_at.desc"


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", ["down", "reject"])
async def test_failures_are_swallowed(mirror, remote, mode, caplog):
    remote.mode = mode

    assert await mirror.table("prompts").insert({"id": "p1"}) is False
    assert await mirror.table("prompts").update("p1", {}) is False
    assert await mirror.table("prompts").delete("p1") is False
    assert await mirror.table("prompts").list_by_owner("owner-1") is None
    assert "kept locally only" in caplog.text


@pytest.mark.asyncio
async def test_list_with_invalid_json_returns_none():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"not json"))
    async with httpx.AsyncClient(transport=transport) as client:
        mirror = RemoteMirror("https://remote.test", client=client)
        assert await mirror.table("prompts").list_by_owner("owner-1") is None


@pytest.mark.asyncio
async def test_list_with_non_list_payload_returns_none():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"message": "nope"}))
    async with httpx.AsyncClient(transport=transport) as client:
        mirror = RemoteMirror("https://remote.test", client=client)
        assert await mirror.table("prompts").list_by_owner("owner-1") is None


@pytest.mark.asyncio
async def test_disabled_mirror_is_a_no_op():
    mirror = RemoteMirror(None)

    assert mirror.enabled is False
    assert await mirror.table("prompts").insert({"id": "p1"}) is False
    assert await mirror.table("prompts").list_by_owner("owner-1") is None


def test_api_key_used_as_bearer_without_user_token():
    mirror = RemoteMirror("https://remote.test", api_key="anon-key")
    assert mirror._headers()["Authorization"] == "Bearer anon-key"
