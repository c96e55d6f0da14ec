# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 19:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 基于 Redis 的持久化会话存储
"""
import functools
from datetime import timedelta
from typing import Callable, List, Optional

from loguru import logger
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from sessions.models import Session, is_expired, utc_now
from sessions.store import SessionStore, StorageUnavailableError


def _storage_errors(method: Callable):
    """把 Redis 连接类异常统一转换为 StorageUnavailableError"""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except RedisError as err:
            logger.error(f"Redis {method.__name__} failed: {err}")
            raise StorageUnavailableError(f"session storage unavailable: {err}") from err

    return wrapper


class RedisSessionStore(SessionStore):
    """
    Redis 会话存储

    过期策略为写入即刷新（滑动过期）：每次 put 都把键的 TTL 重置为 ttl_seconds，
    并同步改写记录中的 expiresAt。这与内存后端“从创建时起 1 小时”的固定过期不同，
    持续有消息写入的会话会一直存活。

    反向索引 `{prefix}:origin:{origin_id}` 指向该聊天的活跃会话码，
    在写入活跃会话时设置，在会话关闭或删除时清除。
    """

    def __init__(
        self,
        client: aioredis.Redis,
        *,
        key_prefix: str = "bot",
        ttl_seconds: int = 3600,
        clock: Callable = utc_now,
    ):
        self._client = client
        self._prefix = key_prefix
        self._ttl = ttl_seconds
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSessionStore":
        client = aioredis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    def _session_key(self, code: str) -> str:
        return f"{self._prefix}:session:{code}"

    def _origin_key(self, origin_id: str) -> str:
        return f"{self._prefix}:origin:{origin_id}"

    async def _clear_origin_index(self, origin_id: str, code: str) -> None:
        origin_key = self._origin_key(origin_id)
        if await self._client.get(origin_key) == code:
            await self._client.delete(origin_key)

    @_storage_errors
    async def put(self, session: Session) -> None:
        expires_at = self._clock() + timedelta(seconds=self._ttl)
        record = session.model_copy(update={"expires_at": expires_at})

        await self._client.set(self._session_key(record.code), record.dumps(), ex=self._ttl)
        if record.active:
            await self._client.set(self._origin_key(record.origin_id), record.code, ex=self._ttl)
        else:
            await self._clear_origin_index(record.origin_id, record.code)

    @_storage_errors
    async def get(self, code: str) -> Optional[Session]:
        raw = await self._client.get(self._session_key(code))
        if raw is None:
            return None

        session = Session.model_validate_json(raw)
        # The native TTL normally removes the key first; this only covers clock skew
        if is_expired(session, self._clock()):
            await self._client.delete(self._session_key(code))
            return None
        return session

    @_storage_errors
    async def delete(self, code: str) -> None:
        raw = await self._client.get(self._session_key(code))
        await self._client.delete(self._session_key(code))
        if raw is not None:
            session = Session.model_validate_json(raw)
            await self._clear_origin_index(session.origin_id, code)

    @_storage_errors
    async def find_active_by_origin(self, origin_id: str) -> Optional[str]:
        origin_key = self._origin_key(origin_id)
        code = await self._client.get(origin_key)
        if not code:
            return None

        session = await self.get(code)
        if session is None or not session.active or session.origin_id != origin_id:
            logger.debug(f"Dropping stale origin index {origin_key} -> {code}")
            await self._client.delete(origin_key)
            return None
        return code

    @_storage_errors
    async def list_all(self) -> List[Session]:
        sessions = []
        async for key in self._client.scan_iter(match=self._session_key("*")):
            code = key.rsplit(":", 1)[-1]
            if session := await self.get(code):
                sessions.append(session)
        return sessions

    async def sweep_expired(self) -> int:
        # Redis 原生 TTL 负责清理
        return 0

    async def close(self) -> None:
        await self._client.aclose()
