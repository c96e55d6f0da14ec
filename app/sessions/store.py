# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 18:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话存储接口与内存实现
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Literal, Optional

from loguru import logger

from sessions.models import Session, is_expired, utc_now


class SessionStoreError(Exception):
    """会话存储异常基类"""


class StorageUnavailableError(SessionStoreError):
    """
    存储后端不可用

    调用方不能把它当作“会话不存在”处理。
    """


class SessionStore(ABC):
    """
    会话存储统一接口

    所有操作均以会话码为键。过期判断统一使用 `is_expired`，
    读取时已过期的记录一律视为不存在。
    """

    @abstractmethod
    async def put(self, session: Session) -> None:
        """写入（覆盖）完整的会话记录"""

    @abstractmethod
    async def get(self, code: str) -> Optional[Session]:
        """读取会话，已过期则返回 None"""

    @abstractmethod
    async def delete(self, code: str) -> None:
        """显式删除会话"""

    @abstractmethod
    async def find_active_by_origin(self, origin_id: str) -> Optional[str]:
        """返回该聊天当前活跃会话的会话码"""

    @abstractmethod
    async def list_all(self) -> List[Session]:
        """列出所有未过期的会话，仅用于调试"""

    @abstractmethod
    async def sweep_expired(self) -> int:
        """尽力清理过期会话，返回清理数量"""

    async def close(self) -> None:
        """释放后端连接"""


class MemorySessionStore(SessionStore):
    """
    进程内存存储

    过期时间从创建时开始计算（固定过期），读取时惰性删除。
    存取均做深拷贝，调用方修改返回值不会影响已存储的记录。
    """

    def __init__(self, clock: Callable = utc_now):
        self._sessions: Dict[str, Session] = {}
        self._clock = clock

    def _live(self, code: str) -> Optional[Session]:
        session = self._sessions.get(code)
        if session is None:
            return None
        if is_expired(session, self._clock()):
            self._sessions.pop(code, None)
            logger.debug(f"Lazily dropped expired session {code}")
            return None
        return session

    async def put(self, session: Session) -> None:
        self._sessions[session.code] = session.model_copy(deep=True)

    async def get(self, code: str) -> Optional[Session]:
        if session := self._live(code):
            return session.model_copy(deep=True)
        return None

    async def delete(self, code: str) -> None:
        self._sessions.pop(code, None)

    async def find_active_by_origin(self, origin_id: str) -> Optional[str]:
        for code in list(self._sessions):
            session = self._live(code)
            if session and session.active and session.origin_id == origin_id:
                return code
        return None

    async def list_all(self) -> List[Session]:
        return [s.model_copy(deep=True) for code in list(self._sessions) if (s := self._live(code))]

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired = [code for code, s in self._sessions.items() if is_expired(s, now)]
        for code in expired:
            self._sessions.pop(code, None)
        if expired:
            logger.info(f"Swept {len(expired)} expired sessions")
        return len(expired)


class SharedMemorySessionStore(MemorySessionStore):
    """
    进程级共享的内存存储

    整个进程只初始化一次，运行期间不会销毁。
    轮询模式与 webhook 服务在同一进程内时共用同一张会话表。
    """

    _instance: Optional["SharedMemorySessionStore"] = None

    @classmethod
    def instance(cls) -> "SharedMemorySessionStore":
        if cls._instance is None:
            cls._instance = cls()
            logger.debug("Initialized process-wide session table")
        return cls._instance


StoreBackend = Literal["memory", "shared", "redis"]


def build_session_store(
    backend: StoreBackend,
    *,
    redis_url: str = "",
    key_prefix: str = "bot",
    ttl_seconds: int = 3600,
) -> SessionStore:
    if backend == "memory":
        return MemorySessionStore()
    if backend == "shared":
        return SharedMemorySessionStore.instance()
    if backend == "redis":
        from sessions.redis_store import RedisSessionStore

        return RedisSessionStore.from_url(redis_url, key_prefix=key_prefix, ttl_seconds=ttl_seconds)
    raise ValueError(f"Unknown session store backend: {backend}")
