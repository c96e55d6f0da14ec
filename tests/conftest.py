# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/15 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Shared fixtures
"""
import asyncio
import fnmatch
from datetime import datetime, timedelta, UTC
from typing import Dict, Set

import pytest

from sessions import MemorySessionStore, SessionManager
from sessions.models import MessageUnit
from transcript.models import Gender, PersonaType
from translation.backend import TranslationBackend, TranslationBackendError


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 10, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the store makes."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttl: Dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        if ex is not None:
            self.ttl[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttl.pop(key, None)
        return removed

    async def scan_iter(self, match="*"):
        for key in list(self.data):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self):
        pass


class YieldingRedis(FakeRedis):
    """Gives up the event loop on every read and write, like a real network round trip."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value, ex=None):
        await asyncio.sleep(0)
        return await super().set(key, value, ex=ex)


class FakeTranslationBackend(TranslationBackend):
    """
    Deterministic backend: literal -> "L(<text>)", styled -> "S[<type>](<text>)".
    Texts listed in `fail_on` raise on both calls.
    """

    def __init__(self, fail_on: Set[str] | None = None, delays: Dict[str, float] | None = None):
        self.fail_on = fail_on or set()
        self.delays = delays or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _call(self, kind: str, text: str) -> None:
        self.calls.append((kind, text))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(text, 0))
            if text in self.fail_on:
                raise TranslationBackendError(f"backend rejected {text}")
        finally:
            self.in_flight -= 1

    async def translate_literal(self, text: str) -> str:
        await self._call("literal", text)
        return f"L({text})"

    async def translate_styled(self, persona: PersonaType, gender: Gender | None, text: str) -> str:
        await self._call("styled", text)
        return f"S[{persona.value}]({text})"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def yielding_redis():
    return YieldingRedis()


@pytest.fixture
def fake_backend():
    return FakeTranslationBackend()


@pytest.fixture
def memory_store(clock):
    return MemorySessionStore(clock=clock)


@pytest.fixture
def manager(memory_store, clock):
    return SessionManager(memory_store, ttl_seconds=3600, clock=clock)


@pytest.fixture
def make_unit(clock):
    def _make(text: str, message_id: int = 1, attribution: str = "Unknown") -> MessageUnit:
        return MessageUnit(
            text=text, attribution=attribution, timestamp=clock(), origin_message_id=message_id
        )

    return _make
