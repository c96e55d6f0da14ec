# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 把 Telegram 消息映射为会话操作，并回复确认消息
"""
import asyncio
from contextlib import asynccontextmanager
from enum import Enum
from typing import Dict, Tuple

from loguru import logger
from telegram import (
    Bot,
    Message,
    MessageOrigin,
    MessageOriginChannel,
    MessageOriginChat,
    MessageOriginHiddenUser,
    MessageOriginUser,
    Update,
)
from telegram.constants import ParseMode

from mybot.boundary import ingestion_boundary
from mybot.templates import (
    CREATE_SESSION_FIRST_TPL,
    EMPTY_FORWARD_TPL,
    FORWARD_REQUIRED_TPL,
    HELP_TPL,
    MESSAGE_ADDED_TPL,
    MESSAGE_NOT_ADDED_TPL,
    NO_ACTIVE_SESSION_TPL,
    SESSION_CANCELLED_TPL,
    SESSION_CREATED_TPL,
    SESSION_DONE_TPL,
    SESSION_EXISTS_TPL,
    UNKNOWN_COMMAND_TPL,
)
from sessions import SessionManager, get_session_manager
from sessions.models import UNKNOWN_ATTRIBUTION, MessageUnit
from settings import settings


class EventKind(str, Enum):
    COMMAND = "command"
    """
    以 / 开头的指令
    """

    FORWARDED = "forwarded"
    """
    从其他聊天转发而来的消息，唯一允许进入会话的内容
    """

    PLAIN = "plain"
    """
    用户自己输入的普通消息
    """


def classify_message(message: Message) -> Tuple[EventKind, str]:
    """
    Returns:
        (kind, command_name)，非指令时 command_name 为空字符串
    """
    text = (message.text or "").strip()
    if text.startswith("/"):
        parts = text[1:].split()
        command = parts[0].split("@")[0].lower() if parts else ""
        return EventKind.COMMAND, command
    if message.forward_origin is not None:
        return EventKind.FORWARDED, ""
    return EventKind.PLAIN, ""


def resolve_attribution(origin: MessageOrigin | None) -> str:
    """尽力还原被转发消息的原始发送者名称"""
    if isinstance(origin, MessageOriginUser) and origin.sender_user:
        user = origin.sender_user
        return user.first_name or user.username or UNKNOWN_ATTRIBUTION
    if isinstance(origin, MessageOriginHiddenUser):
        return origin.sender_user_name or UNKNOWN_ATTRIBUTION
    if isinstance(origin, MessageOriginChat) and origin.sender_chat:
        return origin.sender_chat.title or origin.sender_chat.username or UNKNOWN_ATTRIBUTION
    if isinstance(origin, MessageOriginChannel) and origin.chat:
        return origin.chat.title or origin.chat.username or UNKNOWN_ATTRIBUTION
    return UNKNOWN_ATTRIBUTION


def build_message_unit(message: Message) -> MessageUnit:
    origin = message.forward_origin
    timestamp = getattr(origin, "date", None) or message.date
    return MessageUnit(
        text=message.text or message.caption or "",
        attribution=resolve_attribution(origin),
        timestamp=timestamp,
        origin_message_id=message.message_id,
    )


async def send_ack(bot: Bot, chat_id: int, text: str) -> bool:
    """
    发送确认消息

    发送失败只记录日志，不重试，也不回滚已经发生的状态变更。
    """
    try:
        await bot.send_message(chat_id=chat_id, text=text.strip(), parse_mode=ParseMode.MARKDOWN)
        return True
    except Exception as err:
        logger.error(f"Failed to send ack to chat {chat_id}: {err}")
        return False


async def on_help(bot: Bot, chat_id: int) -> None:
    await send_ack(bot, chat_id, HELP_TPL.format(web_app_url=settings.WEB_APP_URL))


async def on_new(bot: Bot, chat_id: int, manager: SessionManager) -> None:
    origin_id = str(chat_id)
    if existing := await manager.store.find_active_by_origin(origin_id):
        await send_ack(bot, chat_id, SESSION_EXISTS_TPL.format(code=existing))
        return

    code = await manager.create_session(origin_id)
    ttl_minutes = max(1, settings.SESSION_TTL_SECONDS // 60)
    await send_ack(bot, chat_id, SESSION_CREATED_TPL.format(code=code, ttl_minutes=ttl_minutes))


async def on_done(bot: Bot, chat_id: int, manager: SessionManager) -> None:
    session = await manager.get_active_session(str(chat_id))
    if session is None or not await manager.close_session(session.code):
        await send_ack(bot, chat_id, NO_ACTIVE_SESSION_TPL)
        return

    await send_ack(
        bot,
        chat_id,
        SESSION_DONE_TPL.format(
            code=session.code, count=session.message_count, web_app_url=settings.WEB_APP_URL
        ),
    )


async def on_cancel(bot: Bot, chat_id: int, manager: SessionManager) -> None:
    # Same transition as /done, only the acknowledgement differs
    session = await manager.get_active_session(str(chat_id))
    if session is None or not await manager.close_session(session.code):
        await send_ack(bot, chat_id, NO_ACTIVE_SESSION_TPL)
        return

    logger.info(f"Session {session.code} cancelled by chat {chat_id}")
    await send_ack(bot, chat_id, SESSION_CANCELLED_TPL)


async def on_forwarded(bot: Bot, message: Message, manager: SessionManager) -> None:
    chat_id = message.chat.id
    code = await manager.store.find_active_by_origin(str(chat_id))
    if not code:
        await send_ack(bot, chat_id, CREATE_SESSION_FIRST_TPL)
        return

    unit = build_message_unit(message)
    if not unit.text.strip():
        await send_ack(bot, chat_id, EMPTY_FORWARD_TPL)
        return

    if not await manager.append_message(code, unit):
        await send_ack(bot, chat_id, MESSAGE_NOT_ADDED_TPL)
        return

    session = await manager.get_session(code)
    count = session.message_count if session else "?"
    await send_ack(bot, chat_id, MESSAGE_ADDED_TPL.format(count=count))


# Per-chat locks, an entry lives only while some event of that chat holds or awaits it
_origin_locks: Dict[int, asyncio.Lock] = {}
_origin_waiters: Dict[int, int] = {}


def get_locked_origins_count() -> int:
    return len(_origin_locks)


@asynccontextmanager
async def origin_lock(chat_id: int):
    """
    串行处理同一聊天的事件，append 的读-改-写不会与同聊天的其他事件交错
    """
    lock = _origin_locks.setdefault(chat_id, asyncio.Lock())
    _origin_waiters[chat_id] = _origin_waiters.get(chat_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _origin_waiters[chat_id] -= 1
        if _origin_waiters[chat_id] == 0:
            _origin_waiters.pop(chat_id, None)
            _origin_locks.pop(chat_id, None)


COMMANDS = {
    "start": lambda bot, chat_id, manager: on_help(bot, chat_id),
    "help": lambda bot, chat_id, manager: on_help(bot, chat_id),
    "new": on_new,
    "done": on_done,
    "cancel": on_cancel,
}


@ingestion_boundary("handle_update")
async def handle_update(update: Update, bot: Bot, manager: SessionManager | None = None) -> None:
    """
    Ingestion entry point shared by polling handlers and the webhook route.

    Every new message gets exactly one acknowledgement. Only `update.message` is
    routed: edited messages, channel posts, callback queries and member updates
    never add to a session and get no reply.

    Events of the same chat are handled one at a time, in both transport modes.
    """
    message = update.message
    if not message or not message.chat:
        logger.debug(f"Ignoring update {update.update_id} without a new message")
        return

    manager = manager or get_session_manager()
    chat_id = message.chat.id
    kind, command = classify_message(message)
    logger.debug(f"Inbound {kind.value} event from chat {chat_id} {command=}")

    async with origin_lock(chat_id):
        if kind == EventKind.COMMAND:
            if handler := COMMANDS.get(command):
                await handler(bot, chat_id, manager)
            else:
                await send_ack(bot, chat_id, UNKNOWN_COMMAND_TPL)
        elif kind == EventKind.FORWARDED:
            await on_forwarded(bot, message, manager)
        else:
            await send_ack(bot, chat_id, FORWARD_REQUIRED_TPL)
