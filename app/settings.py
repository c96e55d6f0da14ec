import sys
from pathlib import Path
from typing import Any, List, Literal
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
LOG_DIR = PROJECT_DIR.joinpath("logs")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=30.0, description="HTTP 请求超时时间（秒），用于 Telegram API 调用。"
    )

    WEB_APP_URL: str = Field(
        default="https://traductor-app-two.vercel.app",
        description="网页客户端地址，会话结束后提示用户在此输入会话码",
    )

    # 会话存储配置
    SESSION_STORE_BACKEND: Literal["memory", "shared", "redis"] = Field(
        default="redis",
        description="""
        会话存储后端：
        `memory` 每个实例独立的内存存储（仅用于测试）；
        `shared` 进程内共享的内存存储；
        `redis` 外部持久化存储，写入时刷新过期时间（滑动过期）。
        """,
    )

    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis 连接 URL")

    REDIS_KEY_PREFIX: str = Field(default="bot", description="Redis 键前缀，用于隔离多个部署")

    SESSION_TTL_SECONDS: int = Field(
        default=3600, description="会话有效期（秒）。内存后端从创建时计算，Redis 后端从最后一次写入计算。"
    )

    SESSION_SWEEP_INTERVAL_SECONDS: int = Field(
        default=300, description="轮询模式下清理过期会话的间隔（秒）"
    )

    ENABLE_FIXTURE_SESSION: bool = Field(
        default=True, description="是否启用固定的测试会话 TEST99，便于网页端零配置冒烟测试"
    )

    # 翻译后端配置
    ANTHROPIC_API_KEY: SecretStr = Field(default="", description="Anthropic API KEY")

    ANTHROPIC_BASE_URL: str = Field(default="https://api.anthropic.com", description="Anthropic API 地址")

    ANTHROPIC_MODEL: str = Field(default="claude-sonnet-4-20250514", description="翻译使用的模型")

    ANTHROPIC_MAX_TOKENS: int = Field(default=2000)

    TRANSLATION_BATCH_SIZE: int = Field(
        default=5, description="每批并发翻译的消息数，用于控制对翻译后端的并发压力"
    )

    TRANSLATION_CALL_TIMEOUT: float = Field(
        default=60.0, description="单次翻译调用的超时时间（秒），超时后该字段记为错误标记"
    )

    TRANSLATION_CUSTOM_INSTRUCTIONS: List[str] = Field(
        default_factory=list, description="自定义翻译指令，优先级高于基础规则"
    )

    SERVER_HOST: str = Field(default="0.0.0.0")

    SERVER_PORT: int = Field(default=8000)

    ENABLE_DEV_MODE: bool = Field(
        default=False,
        description="""
        是否为开发模式，开发模式下会 MOCK 模型调用请求，立即响应模版信息。
        消息不会发送到翻译后端，所有请求均在本地环回。
        """,
    )

    ENABLE_TEST_MODE: bool = Field(
        default=False, description="是否为测试模式，测试模式下使用进程内共享存储而非 Redis。"
    )

    DEV_MODE_MOCKED_TEMPLATE: str = Field(
        default="[dev mode translation]", description="当开发模式开启时，将返回该模版作为译文。"
    )

    def model_post_init(self, context: Any, /) -> None:
        self.TRANSLATION_CUSTOM_INSTRUCTIONS = [
            i.strip() for i in self.TRANSLATION_CUSTOM_INSTRUCTIONS if i and i.strip()
        ]

        if self.TRANSLATION_BATCH_SIZE < 1:
            logger.warning(f"TRANSLATION_BATCH_SIZE 非法 - {self.TRANSLATION_BATCH_SIZE}，已重置为 5")
            self.TRANSLATION_BATCH_SIZE = 5

        # 防呆设置，假设 Linux 作为生产环境部署
        if "linux" in sys.platform:
            if self.ENABLE_DEV_MODE:
                logger.warning("开发模式已自动关闭，请勿在 Linux 上运行开发模式")
                self.ENABLE_DEV_MODE = False

            if self.ENABLE_TEST_MODE:
                logger.warning("测试模式已自动关闭，请勿在 Linux 上运行测试模式")
                self.ENABLE_TEST_MODE = False

        if self.ENABLE_TEST_MODE:
            if self.ENABLE_DEV_MODE:
                logger.warning("开发模式已自动关闭，开发模式和测试模式不能同时开启")
            self.ENABLE_DEV_MODE = False
            self.SESSION_STORE_BACKEND = "shared"

    def get_default_application(self) -> Application:
        _base_builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
        )
        if proxy_url := getproxies().get("http"):
            logger.success(f"使用代理: {proxy_url}")
            application = _base_builder.proxy(proxy_url).get_updates_proxy(proxy_url).build()
        else:
            application = _base_builder.build()

        return application


settings = Settings()  # type: ignore
