# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 20:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话生命周期管理 NONE -> ACTIVE -> CLOSED -> GONE
"""
from datetime import timedelta
from typing import Callable, List, Optional

from loguru import logger

from sessions.codes import generate_code, normalize_code
from sessions.fixtures import FIXTURE_CODE, build_fixture_session
from sessions.models import (
    MessageUnit,
    RetrievalResult,
    RetrievalStatus,
    Session,
    utc_now,
)
from sessions.store import SessionStore


class SessionManager:
    """
    Business rules on top of a SessionStore.

    - one active session per origin: `create_session` hands back the existing code
    - appends are only legal while the session is active
    - retrieval is only legal once the session is closed

    Store errors (StorageUnavailableError) are not caught here.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        ttl_seconds: int = 3600,
        clock: Callable = utc_now,
        enable_fixture: bool = True,
    ):
        self.store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._enable_fixture = enable_fixture

    def _is_fixture(self, code: str) -> bool:
        return self._enable_fixture and code == FIXTURE_CODE

    async def get_session(self, code: str) -> Optional[Session]:
        code = normalize_code(code)
        if self._is_fixture(code):
            return build_fixture_session()
        return await self.store.get(code)

    async def get_active_session(self, origin_id: str) -> Optional[Session]:
        if code := await self.store.find_active_by_origin(str(origin_id)):
            return await self.store.get(code)
        return None

    async def create_session(self, origin_id: str) -> str:
        origin_id = str(origin_id)

        # check-then-act, not atomic against a concurrent create for the same origin
        if existing := await self.store.find_active_by_origin(origin_id):
            logger.debug(f"Origin {origin_id} already owns active session {existing}")
            return existing

        now = self._clock()
        session = Session(
            code=generate_code(),
            origin_id=origin_id,
            created_at=now,
            expires_at=now + self._ttl,
            active=True,
        )
        await self.store.put(session)
        logger.info(f"Created session {session.code} for origin {origin_id}")
        return session.code

    async def append_message(self, code: str, unit: MessageUnit) -> bool:
        code = normalize_code(code)
        if self._is_fixture(code):
            return False

        session = await self.store.get(code)
        if session is None or not session.active:
            return False

        session.messages.append(unit)
        await self.store.put(session)
        return True

    async def close_session(self, code: str) -> bool:
        code = normalize_code(code)
        if self._is_fixture(code):
            return True

        session = await self.store.get(code)
        if session is None:
            return False

        session.active = False
        await self.store.put(session)
        logger.info(f"Closed session {code} with {session.message_count} messages")
        return True

    async def get_messages_for_retrieval(self, code: str) -> RetrievalResult:
        session = await self.get_session(code)
        if session is None:
            return RetrievalResult(status=RetrievalStatus.NOT_FOUND)
        if session.active:
            return RetrievalResult(status=RetrievalStatus.STILL_ACTIVE)
        return RetrievalResult(status=RetrievalStatus.OK, session=session)

    async def list_sessions(self) -> List[Session]:
        return await self.store.list_all()

    async def sweep_expired(self) -> int:
        return await self.store.sweep_expired()
