# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 18:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 机器人收集消息与网页端读取之间的会话交接
"""
import functools

from settings import settings
from .codes import CODE_ALPHABET, CODE_LENGTH, generate_code, normalize_code
from .fixtures import FIXTURE_CODE
from .manager import SessionManager
from .models import MessageUnit, RetrievalResult, RetrievalStatus, Session, is_expired
from .store import (
    MemorySessionStore,
    SessionStore,
    SessionStoreError,
    SharedMemorySessionStore,
    StorageUnavailableError,
    build_session_store,
)


@functools.cache
def get_session_manager() -> SessionManager:
    """按配置构建进程内唯一的 SessionManager"""
    store = build_session_store(
        settings.SESSION_STORE_BACKEND,
        redis_url=settings.REDIS_URL,
        key_prefix=settings.REDIS_KEY_PREFIX,
        ttl_seconds=settings.SESSION_TTL_SECONDS,
    )
    return SessionManager(
        store,
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        enable_fixture=settings.ENABLE_FIXTURE_SESSION,
    )


__all__ = [
    "CODE_ALPHABET",
    "CODE_LENGTH",
    "FIXTURE_CODE",
    "MemorySessionStore",
    "MessageUnit",
    "RetrievalResult",
    "RetrievalStatus",
    "Session",
    "SessionManager",
    "SessionStore",
    "SessionStoreError",
    "SharedMemorySessionStore",
    "StorageUnavailableError",
    "build_session_store",
    "generate_code",
    "get_session_manager",
    "is_expired",
    "normalize_code",
]
