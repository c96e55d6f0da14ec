# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 14:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 网页端读取会话、Telegram webhook 与翻译接口
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from telegram import Bot, Update

from api.schemas import (
    DebugSessionsResponse,
    ErrorResponse,
    SessionMessagesResponse,
    SessionSummary,
)
from mybot.services import ingestion_service
from sessions import (
    RetrievalStatus,
    Session,
    SessionManager,
    StorageUnavailableError,
    get_session_manager,
    normalize_code,
)
from transcript.models import ParsedMessage
from translation.export import render_consolidated
from translation.models import TranslateRequest, TranslateResponse, TranslatedMessage
from translation.orchestrator import TranslationOrchestrator
from translation.pipeline import get_orchestrator, messages_to_transcript, translate_transcript

bot_router = APIRouter(tags=["bot"])
translate_router = APIRouter(tags=["translation"])

NOT_FOUND_MESSAGE = "El código no existe, expiró (1 hora) o ya fue usado."
STILL_ACTIVE_MESSAGE = "La sesión todavía está activa. Enviá /done al bot primero."
STORAGE_UNAVAILABLE_MESSAGE = "Error al obtener mensajes. Intentá de nuevo."

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing code or text"},
    404: {"model": ErrorResponse, "description": "Session not found or expired"},
    409: {"model": ErrorResponse, "description": "Session still active"},
    503: {"model": ErrorResponse, "description": "Session storage unavailable"},
}


def get_manager() -> SessionManager:
    return get_session_manager()


def get_bot(request: Request) -> Bot | None:
    return getattr(request.app.state, "bot", None)


def get_translation_orchestrator() -> TranslationOrchestrator:
    return get_orchestrator()


def _error(status_code: int, error: str, error_code: str, message: str | None = None) -> HTTPException:
    detail = ErrorResponse(error=error, error_code=error_code, message=message)
    return HTTPException(status_code=status_code, detail=detail.model_dump())


async def _retrieve_closed_session(code: str | None, manager: SessionManager) -> Session:
    normalized = normalize_code(code)
    if not normalized:
        raise _error(400, "Code parameter required", "code_required")

    try:
        result = await manager.get_messages_for_retrieval(normalized)
    except StorageUnavailableError as err:
        logger.error(f"Retrieval of {normalized} failed: {err}")
        raise _error(503, "Session storage unavailable", "storage_unavailable", STORAGE_UNAVAILABLE_MESSAGE)

    if result.status == RetrievalStatus.NOT_FOUND:
        raise _error(404, "Session not found or expired", "not_found", NOT_FOUND_MESSAGE)
    if result.status == RetrievalStatus.STILL_ACTIVE:
        raise _error(409, "Session still active", "still_active", STILL_ACTIVE_MESSAGE)
    return result.session


@bot_router.get("/get-messages", response_model=SessionMessagesResponse, responses=ERROR_RESPONSES)
async def get_messages(
    code: str | None = Query(default=None, description="6 位会话码，大小写不敏感"),
    manager: SessionManager = Depends(get_manager),
):
    """
    Return the messages of a closed session.

    The code is trimmed and upper-cased before lookup. Missing or expired sessions,
    sessions still collecting messages and storage outages are distinct error codes,
    so the client can show the right guidance for each.
    """
    session = await _retrieve_closed_session(code, manager)
    logger.info(f"Session {session.code} retrieved with {session.message_count} messages")
    return SessionMessagesResponse.from_session(session)


@bot_router.get("/debug-sessions", response_model=DebugSessionsResponse)
async def debug_sessions(manager: SessionManager = Depends(get_manager)):
    try:
        sessions = await manager.list_sessions()
    except StorageUnavailableError:
        raise _error(503, "Session storage unavailable", "storage_unavailable")

    summaries = [
        SessionSummary(
            code=s.code,
            origin_id=s.origin_id,
            message_count=s.message_count,
            active=s.active,
            created_at=s.created_at,
            expires_at=s.expires_at,
        )
        for s in sessions
    ]
    return DebugSessionsResponse(count=len(summaries), sessions=summaries)


@bot_router.post("/webhook")
async def telegram_webhook(
    request: Request,
    manager: SessionManager = Depends(get_manager),
    bot: Bot | None = Depends(get_bot),
):
    """
    Telegram webhook. Always answers 200, internal failures are only logged,
    otherwise Telegram retries the same update over and over.
    """
    if bot is None:
        logger.error("Webhook called but TELEGRAM_BOT_API_TOKEN is not configured")
        return {"ok": True}

    try:
        payload = await request.json()
        update = Update.de_json(payload, bot)
        await manager.sweep_expired()
        await ingestion_service.handle_update(update, bot, manager)
    except Exception as err:
        logger.exception(f"Webhook error: {err}")

    return {"ok": True}


@translate_router.post("/translate", response_model=TranslateResponse, responses=ERROR_RESPONSES)
async def translate(
    body: TranslateRequest,
    manager: SessionManager = Depends(get_manager),
    orchestrator: TranslationOrchestrator = Depends(get_translation_orchestrator),
):
    """
    Translate a pasted transcript (`text`) or the messages of a closed session (`code`).
    Per-message failures come back as `[Error: ...]` values, never as an HTTP error.
    """
    if body.code:
        session = await _retrieve_closed_session(body.code, manager)
        raw_text = messages_to_transcript(session.messages)
    elif body.text and body.text.strip():
        raw_text = body.text
    else:
        raise _error(400, "Either text or code is required", "text_required")

    messages = await translate_transcript(raw_text, orchestrator)
    return TranslateResponse(
        message_count=len(messages), messages=messages, consolidated=render_consolidated(messages)
    )


@translate_router.post("/retranslate", response_model=TranslatedMessage)
async def retranslate(
    message: ParsedMessage,
    orchestrator: TranslationOrchestrator = Depends(get_translation_orchestrator),
):
    """重新翻译单条已清洗的消息"""
    return await orchestrator.translate_one(message)
