# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 16:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 轮询模式启动机器人
"""
import json
import signal
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger
from telegram import BotCommand, Update
from telegram.ext import Application, MessageHandler, filters

from mybot.handlers import handle_message
from sessions import get_session_manager
from settings import settings, LOG_DIR
from utils import init_log

init_log(
    runtime=LOG_DIR.joinpath("runtime.log"),
    error=LOG_DIR.joinpath("error.log"),
    serialize=LOG_DIR.joinpath("serialize.log"),
)

scheduler = AsyncIOScheduler(timezone="Asia/Shanghai")


async def run_sweep_job():
    """清理过期会话"""
    try:
        removed = await get_session_manager().sweep_expired()
        if removed:
            logger.info(f"清理过期会话 {removed} 个")
    except Exception as e:
        logger.error(f"清理过期会话时发生错误: {e}")


async def setup_bot_commands(application: Application):
    """设置机器人的命令菜单，并启动定时清理任务"""
    commands = [
        BotCommand("new", "Crear nueva sesión"),
        BotCommand("done", "Finalizar sesión actual"),
        BotCommand("cancel", "Cancelar sesión actual"),
        BotCommand("help", "Ver ayuda"),
    ]

    try:
        await application.bot.set_my_commands(commands)
        logger.success(f"已设置机器人命令菜单: {[f'/{cmd.command}' for cmd in commands]}")
    except Exception as e:
        logger.error(f"设置机器人命令菜单失败: {e}")

    scheduler.add_job(
        run_sweep_job,
        trigger=IntervalTrigger(seconds=settings.SESSION_SWEEP_INTERVAL_SECONDS),
        id="session_sweep_job",
        name="过期会话清理",
        max_instances=1,
        replace_existing=True,
    )
    scheduler.start()
    logger.success(f"过期会话清理任务已启动，间隔 {settings.SESSION_SWEEP_INTERVAL_SECONDS} 秒")


async def teardown(application: Application):
    if scheduler.running:
        scheduler.shutdown(wait=False)
    await get_session_manager().store.close()


def main() -> None:
    """Start the bot."""
    sp = settings.model_dump(mode="json")
    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    if settings.ENABLE_DEV_MODE:
        logger.warning("🪄 开发模式已启动")

    if settings.SESSION_STORE_BACKEND == "memory":
        logger.warning("memory 存储仅供测试，网页端服务读取不到这里收集的会话")

    application = settings.get_default_application()
    application.post_init = setup_bot_commands
    application.post_shutdown = teardown

    # Commands, forwarded and plain messages share one router
    application.add_handler(MessageHandler(filters.ALL, handle_message))

    def shutdown_handler(signum, frame):
        logger.info("Receiving a shutdown signal that is stopping the bot...")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
