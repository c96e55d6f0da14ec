# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 11:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 轮询模式下的消息入口，与 webhook 共用同一套路由
"""
from telegram import Update
from telegram.ext import ContextTypes

from mybot.services import ingestion_service


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Commands, forwarded and plain messages all go through one router so polling
    and webhook deliveries behave the same. Runs blocking: one event per chat is
    finished before the next one is handled, which keeps append order.
    """
    await ingestion_service.handle_update(update, context.bot)
