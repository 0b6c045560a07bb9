"""
Test suite for the /v1 chat endpoints.

Covers:
- Appending a message returns the full conversation with the AI reply.
- Listing and clearing the caller's conversation.
- Identity checks and the error status policy.
- Validation errors on bad payloads.
"""

from __future__ import annotations

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from app.core.config import settings
from app.models.schemas import ChatTurn
from conftest import BOT_REPLY, build_app


@pytest.mark.asyncio
async def test_new_message_returns_user_and_bot_turns(test_client):
    """A first message yields exactly the user turn followed by the reply."""
    resp = await test_client.post("/v1/chat/new", json={"message": "hello"})
    assert resp.status_code == 200
    data = resp.json()

    assert data["message"] == "OK"
    assert [(c["role"], c["content"]) for c in data["chats"]] == [
        ("user", "hello"),
        ("assistant", BOT_REPLY),
    ]
    assert all(c["id"] for c in data["chats"])


@pytest.mark.asyncio
async def test_persisted_turns_match_listing(test_client):
    """Turns returned by the append endpoint are exactly what a later listing shows."""
    last = None
    for i in range(3):
        r = await test_client.post("/v1/chat/new", json={"message": f"turn {i}"})
        assert r.status_code == 200
        last = r.json()["chats"]

    listing = await test_client.get("/v1/chat/all-chats")
    assert listing.status_code == 200
    assert listing.json()["chats"] == last
    assert len(last) == 6


@pytest.mark.asyncio
async def test_clear_is_idempotent(test_client):
    await test_client.post("/v1/chat/new", json={"message": "hello"})

    for _ in range(2):
        resp = await test_client.delete("/v1/chat/delete")
        assert resp.status_code == 200
        assert resp.json() == {"message": "OK", "chats": []}

    listing = await test_client.get("/v1/chat/all-chats")
    assert listing.json()["chats"] == []


@pytest.mark.asyncio
async def test_user_scoped_routes_reject_other_users(test_client, store):
    """Reading or clearing another existing user's chats is forbidden."""
    assert "user-2" in store.users

    resp = await test_client.get("/v1/users/user-2/chats")
    assert resp.status_code == 403
    assert resp.json() == {"message": "ERROR", "cause": "Permissions didn't match"}

    resp = await test_client.delete("/v1/users/user-2/chats")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_user_scoped_routes_allow_self(test_client):
    await test_client.post("/v1/chat/new", json={"message": "hello"})

    resp = await test_client.get("/v1/users/user-1/chats")
    assert resp.status_code == 200
    assert len(resp.json()["chats"]) == 2

    resp = await test_client.delete("/v1/users/user-1/chats")
    assert resp.status_code == 200
    assert resp.json()["chats"] == []


@pytest.mark.asyncio
async def test_unknown_user_returns_401_without_ai_call(test_client, llm):
    resp = await test_client.post(
        "/v1/chat/new",
        json={"message": "hello"},
        headers={"X-User-Id": "ghost"},
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "ERROR"
    assert llm.calls == []

    resp = await test_client.get("/v1/chat/all-chats", headers={"X-User-Id": "ghost"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_missing_identity_returns_401(test_client):
    resp = await test_client.get("/v1/chat/all-chats", headers={"X-User-Id": ""})
    assert resp.status_code == 401
    assert resp.json() == {"message": "ERROR", "cause": "Missing caller identity"}


@pytest.mark.asyncio
async def test_ai_failure_returns_502_and_persists_nothing(test_client, llm, store):
    llm.fail = True
    resp = await test_client.post("/v1/chat/new", json={"message": "hello"})
    assert resp.status_code == 502
    assert resp.json()["message"] == "ERROR"
    assert store.users["user-1"].chats == []


@pytest.mark.asyncio
async def test_busy_lock_returns_409(test_client, lock):
    lock.held.add("user-1")
    resp = await test_client.post("/v1/chat/new", json={"message": "hello"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_validation_missing_message_returns_422(test_client):
    """Checks that missing 'message' field returns a 422 validation error."""
    resp = await test_client.post("/v1/chat/new", json={})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_validation_blank_message_returns_422(test_client, llm):
    resp = await test_client.post("/v1/chat/new", json={"message": "   "})
    assert resp.status_code == 422
    assert llm.calls == []


@pytest.mark.asyncio
async def test_health(test_client):
    resp = await test_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_identity_header_ignored_when_not_configured(store, llm, lock, monkeypatch):
    """Without IDENTITY_HEADER a client-sent X-User-Id must not authenticate anyone."""
    monkeypatch.setattr(settings, "identity_header", None)
    store.users["user-1"].chats = [ChatTurn(role="user", content="secret")]
    app = build_app(store, llm, lock)

    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            resp = await client.get("/v1/chat/all-chats", headers={"X-User-Id": "user-1"})

    assert resp.status_code == 401
    assert resp.json() == {"message": "ERROR", "cause": "Missing caller identity"}
    assert store.full_reads == 0
