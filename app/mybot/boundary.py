# -*- coding: utf-8 -*-
"""
Error boundary between the Telegram transport and the session core
"""
import functools
from contextlib import suppress
from typing import Callable

from loguru import logger
from telegram import Update
from telegram.constants import ParseMode

from mybot.templates import INTERNAL_ERROR_TPL


def _chat_id_of(update: Update | None) -> int | None:
    message = update.message if update else None
    if message and message.chat:
        return message.chat.id
    return None


def ingestion_boundary(handler_name: str = "unknown"):
    """
    Decorator for ingestion entry points with the signature ``(update, bot, ...)``.

    Nothing raised inside the handler reaches the transport: a webhook must answer
    200 even on internal failure, otherwise Telegram keeps redelivering the update.
    If the handler failed before acknowledging, a generic error ack is sent instead,
    so the event still gets exactly one reply.

    Usage:
        @ingestion_boundary("handle_update")
        async def handle_update(update, bot):
            ...
    """

    def decorator(handler_func: Callable):
        @functools.wraps(handler_func)
        async def wrapper(update: Update, bot, *args, **kwargs):
            try:
                return await handler_func(update, bot, *args, **kwargs)
            except Exception as e:
                logger.exception(f"Error in {handler_name} handler: {e}")

                chat_id = None
                with suppress(Exception):
                    chat_id = _chat_id_of(update)
                if chat_id is None:
                    return None

                try:
                    await bot.send_message(
                        chat_id=chat_id, text=INTERNAL_ERROR_TPL, parse_mode=ParseMode.MARKDOWN
                    )
                except Exception as send_err:
                    logger.error(f"Failed to send error ack to chat {chat_id}: {send_err}")
                return None

        return wrapper

    return decorator
