# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/15 16:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : HTTP 接口：会话读取、webhook、翻译
"""
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from api.routes import get_bot, get_manager, get_translation_orchestrator
from server import app
from sessions import SessionManager
from sessions.redis_store import RedisSessionStore
from translation import TranslationOrchestrator

CHAT_ID = 4242


def webhook_payload(text=None, update_id=1, forward_origin=None):
    message = {
        "message_id": update_id * 10,
        "date": 1760529600,
        "chat": {"id": CHAT_ID, "type": "private"},
    }
    if text is not None:
        message["text"] = text
    if forward_origin is not None:
        message["forward_origin"] = forward_origin
    return {"update_id": update_id, "message": message}


@pytest.fixture
def bot():
    bot = AsyncMock()
    # Update.de_json reads tz defaults from the bot
    bot.defaults = None
    return bot


@pytest.fixture
def orchestrator(fake_backend):
    return TranslationOrchestrator(fake_backend)


@pytest_asyncio.fixture
async def client(manager, bot, orchestrator):
    app.dependency_overrides[get_manager] = lambda: manager
    app.dependency_overrides[get_bot] = lambda: bot
    app.dependency_overrides[get_translation_orchestrator] = lambda: orchestrator
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


async def closed_session(manager, make_unit, *texts) -> str:
    code = await manager.create_session(str(CHAT_ID))
    for i, text in enumerate(texts, start=1):
        await manager.append_message(code, make_unit(text, message_id=i, attribution="Ana"))
    await manager.close_session(code)
    return code


class TestGetMessages:
    @pytest.mark.asyncio
    async def test_closed_session_returns_messages_in_camel_case(
        self, client, manager, make_unit
    ):
        code = await closed_session(manager, make_unit, "教授: 市场很好", "32: 好的")

        response = await client.get("/api/bot/get-messages", params={"code": f" {code.lower()} "})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["code"] == code
        assert body["messageCount"] == 2
        assert {"createdAt", "expiresAt"} <= body.keys()
        first = body["messages"][0]
        assert first["text"] == "教授: 市场很好"
        assert first["attribution"] == "Ana"
        assert first["originMessageId"] == 1

    @pytest.mark.asyncio
    async def test_missing_code(self, client):
        response = await client.get("/api/bot/get-messages")
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "code_required"

    @pytest.mark.asyncio
    async def test_unknown_code(self, client):
        response = await client.get("/api/bot/get-messages", params={"code": "ABCDEF"})
        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_active_session_is_not_yet_readable(self, client, manager):
        code = await manager.create_session(str(CHAT_ID))

        response = await client.get("/api/bot/get-messages", params={"code": code})

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "still_active"

    @pytest.mark.asyncio
    async def test_expired_session(self, client, manager, make_unit, clock):
        code = await closed_session(manager, make_unit, "32: 好的")
        clock.advance(hours=2)

        response = await client.get("/api/bot/get-messages", params={"code": code})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_fixture_session(self, client):
        response = await client.get("/api/bot/get-messages", params={"code": "test99"})

        assert response.status_code == 200
        assert response.json()["messageCount"] == 3

    @pytest.mark.asyncio
    async def test_storage_outage_is_not_reported_as_missing(self, client, clock):
        redis_client = AsyncMock()
        redis_client.get.side_effect = RedisConnectionError("Connection refused")
        broken = SessionManager(RedisSessionStore(redis_client, clock=clock), clock=clock)
        app.dependency_overrides[get_manager] = lambda: broken

        response = await client.get("/api/bot/get-messages", params={"code": "ABCDEF"})

        assert response.status_code == 503
        assert response.json()["detail"]["error_code"] == "storage_unavailable"


class TestDebugSessions:
    @pytest.mark.asyncio
    async def test_lists_sessions(self, client, manager):
        await manager.create_session("1")
        await manager.create_session("2")

        body = (await client.get("/api/bot/debug-sessions")).json()

        assert body["count"] == 2
        assert {s["originId"] for s in body["sessions"]} == {"1", "2"}
        assert all(s["active"] for s in body["sessions"])


class TestWebhook:
    @pytest.mark.asyncio
    async def test_new_then_forward_then_done(self, client, manager, bot):
        forward_origin = {
            "type": "user",
            "date": 1760108520,
            "sender_user": {"id": 7, "is_bot": False, "first_name": "Ana"},
        }

        r1 = await client.post("/api/bot/webhook", json=webhook_payload("/new", update_id=1))
        r2 = await client.post(
            "/api/bot/webhook",
            json=webhook_payload("教授: 市场很好", update_id=2, forward_origin=forward_origin),
        )
        session = await manager.get_active_session(str(CHAT_ID))
        r3 = await client.post("/api/bot/webhook", json=webhook_payload("/done", update_id=3))

        assert [r.status_code for r in (r1, r2, r3)] == [200, 200, 200]
        assert r1.json() == {"ok": True}
        assert bot.send_message.await_count == 3
        assert session.messages[0].attribution == "Ana"

        result = await manager.get_messages_for_retrieval(session.code)
        assert result.ok

    @pytest.mark.asyncio
    async def test_plain_message_gets_guidance(self, client, bot):
        response = await client.post("/api/bot/webhook", json=webhook_payload("hola"))

        assert response.status_code == 200
        assert "reenviá (forward)" in bot.send_message.await_args.kwargs["text"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"foo": "bar"}, {"update_id": 9}])
    async def test_malformed_or_empty_updates_still_answer_200(self, client, bot, payload):
        response = await client.post("/api/bot/webhook", json=payload)

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        bot.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_json_body(self, client):
        response = await client.post(
            "/api/bot/webhook", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unconfigured_bot(self, client):
        app.dependency_overrides[get_bot] = lambda: None
        response = await client.post("/api/bot/webhook", json=webhook_payload("/new"))
        assert response.json() == {"ok": True}


class TestTranslate:
    @pytest.mark.asyncio
    async def test_translate_text(self, client, fake_backend):
        fake_backend.fail_on = {"我同意"}

        response = await client.post(
            "/api/translate", json={"text": "教授: 市场很好\n30(女): 我同意"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message_count"] == 2
        assert body["messages"][0]["translation"] == "S[professor](市场很好)"
        assert body["messages"][0]["original_with_format"] == "教授: 市场很好"
        assert body["messages"][1]["translation"].startswith("[Error: ")
        assert "🔹 🔹 🔹" in body["consolidated"]

    @pytest.mark.asyncio
    async def test_translate_by_code(self, client, manager, make_unit, fake_backend):
        code = await closed_session(manager, make_unit, "教授: 市场很好", "32: 好的")

        response = await client.post("/api/translate", json={"code": code.lower()})

        assert response.status_code == 200
        assert [m["original"] for m in response.json()["messages"]] == ["市场很好", "好的"]

    @pytest.mark.asyncio
    async def test_translate_by_active_code(self, client, manager):
        code = await manager.create_session(str(CHAT_ID))
        response = await client.post("/api/translate", json={"code": code})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_translate_requires_input(self, client):
        response = await client.post("/api/translate", json={"text": "  "})
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "text_required"

    @pytest.mark.asyncio
    async def test_retranslate(self, client):
        response = await client.post(
            "/api/retranslate",
            json={"id": 4, "original": "好的", "type": "client", "client_number": 32, "gender": "male"},
        )

        assert response.status_code == 200
        assert response.json()["literal_translation"] == "L(好的)"

    @pytest.mark.asyncio
    async def test_health(self, client):
        assert (await client.get("/")).json()["status"] == "ok"
