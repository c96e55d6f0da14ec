# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 15:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : HTTP 服务：网页端读取会话码、Telegram webhook、翻译接口
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from telegram import Bot

from api import bot_router, translate_router
from sessions import get_session_manager
from settings import settings, LOG_DIR
from translation.pipeline import get_orchestrator
from utils import init_log


@asynccontextmanager
async def lifespan(app: FastAPI):
    token = settings.TELEGRAM_BOT_API_TOKEN.get_secret_value()
    app.state.bot = None
    if token:
        bot = Bot(token)
        try:
            await bot.initialize()
            app.state.bot = bot
            logger.success(f"Webhook bot ready: @{bot.username}")
        except Exception as e:
            logger.error(f"Failed to initialize bot, webhook disabled: {e}")
    else:
        logger.warning("TELEGRAM_BOT_API_TOKEN not set, webhook disabled")

    logger.success(f"Session store backend: {settings.SESSION_STORE_BACKEND}")

    yield

    if app.state.bot:
        await app.state.bot.shutdown()
    if get_session_manager.cache_info().currsize:
        await get_session_manager().store.close()
    if get_orchestrator.cache_info().currsize:
        await get_orchestrator().backend.aclose()


app = FastAPI(
    title="Transcript Translator API",
    description="Bot session retrieval and bilingual transcript translation",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(bot_router, prefix="/api/bot")
app.include_router(translate_router, prefix="/api")


@app.get("/", tags=["health"])
async def root():
    """Health check endpoint"""
    return {"status": "ok", "message": "Transcript Translator API is running", "version": "1.0.0"}


def main() -> None:
    init_log(
        runtime=LOG_DIR.joinpath("server.log"),
        error=LOG_DIR.joinpath("error.log"),
        serialize=LOG_DIR.joinpath("serialize.log"),
    )
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT)


if __name__ == "__main__":
    main()
