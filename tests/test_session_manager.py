# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/15 10:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Session lifecycle on the in-memory backends
"""
import asyncio

import pytest

from sessions import (
    CODE_ALPHABET,
    CODE_LENGTH,
    FIXTURE_CODE,
    MemorySessionStore,
    RetrievalStatus,
    SessionManager,
    SharedMemorySessionStore,
    build_session_store,
    generate_code,
    normalize_code,
)
from transcript import Gender, PersonaType, segment
from translation.pipeline import messages_to_transcript


class TestSessionCodes:
    def test_generated_codes_use_unambiguous_alphabet(self):
        for _ in range(200):
            code = generate_code()
            assert len(code) == CODE_LENGTH
            assert set(code) <= set(CODE_ALPHABET)
            assert not set(code) & {"0", "O", "1", "I"}

    def test_alphabet_has_32_symbols(self):
        assert len(set(CODE_ALPHABET)) == 32

    def test_normalize_code(self):
        assert normalize_code("  abc12x \n") == "ABC12X"
        assert normalize_code(None) == ""


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_create_twice_returns_same_code(self, manager):
        first = await manager.create_session("42")
        second = await manager.create_session("42")

        assert first == second
        assert len(await manager.list_sessions()) == 1

    @pytest.mark.asyncio
    async def test_origin_id_is_compared_as_string(self, manager):
        first = await manager.create_session(42)
        assert await manager.create_session("42") == first

    @pytest.mark.asyncio
    async def test_concurrent_origins_receive_distinct_codes(self, manager):
        codes = await asyncio.gather(*(manager.create_session(f"chat-{i}") for i in range(20)))
        assert len(set(codes)) == 20

    @pytest.mark.asyncio
    async def test_new_session_is_active_and_empty(self, manager, clock):
        code = await manager.create_session("42")
        session = await manager.get_session(code)

        assert session.active is True
        assert session.messages == []
        assert session.created_at == clock()
        assert (session.expires_at - session.created_at).total_seconds() == 3600

    @pytest.mark.asyncio
    async def test_close_frees_origin_for_a_new_session(self, manager):
        first = await manager.create_session("42")
        assert await manager.close_session(first) is True

        second = await manager.create_session("42")
        assert second != first
        assert (await manager.get_active_session("42")).code == second


class TestAppendMessage:
    @pytest.mark.asyncio
    async def test_append_preserves_arrival_order(self, manager, make_unit):
        code = await manager.create_session("42")
        for i in range(3):
            assert await manager.append_message(code, make_unit(f"m{i}", message_id=i))

        session = await manager.get_session(code)
        assert [m.text for m in session.messages] == ["m0", "m1", "m2"]

    @pytest.mark.asyncio
    async def test_duplicate_message_ids_are_kept(self, manager, make_unit):
        code = await manager.create_session("42")
        await manager.append_message(code, make_unit("same", message_id=7))
        await manager.append_message(code, make_unit("same", message_id=7))

        assert (await manager.get_session(code)).message_count == 2

    @pytest.mark.asyncio
    async def test_append_after_close_fails_without_mutation(self, manager, make_unit):
        code = await manager.create_session("42")
        await manager.append_message(code, make_unit("before"))
        await manager.close_session(code)

        assert await manager.append_message(code, make_unit("after")) is False

        session = await manager.get_session(code)
        assert [m.text for m in session.messages] == ["before"]

    @pytest.mark.asyncio
    async def test_append_to_unknown_code_fails(self, manager, make_unit):
        assert await manager.append_message("ZZZZZZ", make_unit("x")) is False

    @pytest.mark.asyncio
    async def test_append_after_expiry_fails(self, manager, make_unit, clock):
        code = await manager.create_session("42")
        clock.advance(hours=1, seconds=1)

        assert await manager.append_message(code, make_unit("late")) is False

    @pytest.mark.asyncio
    async def test_store_returns_copies(self, manager, memory_store, make_unit):
        code = await manager.create_session("42")
        session = await memory_store.get(code)
        session.messages.append(make_unit("not persisted"))

        assert (await memory_store.get(code)).messages == []


class TestRetrieval:
    @pytest.mark.asyncio
    async def test_still_active_then_ok_after_close(self, manager, make_unit):
        code = await manager.create_session("42")
        await manager.append_message(code, make_unit("hola", message_id=1))
        await manager.append_message(code, make_unit("chau", message_id=2))

        result = await manager.get_messages_for_retrieval(code)
        assert result.status == RetrievalStatus.STILL_ACTIVE
        assert result.session is None

        await manager.close_session(code)
        result = await manager.get_messages_for_retrieval(code)
        assert result.ok
        assert [m.text for m in result.session.messages] == ["hola", "chau"]

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found(self, manager):
        result = await manager.get_messages_for_retrieval("ABCDEF")
        assert result.status == RetrievalStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive_and_trimmed(self, manager):
        code = await manager.create_session("42")
        await manager.close_session(code)

        result = await manager.get_messages_for_retrieval(f"  {code.lower()} ")
        assert result.ok

    @pytest.mark.asyncio
    async def test_expired_session_is_absent_even_if_still_stored(
        self, manager, memory_store, clock
    ):
        code = await manager.create_session("42")
        await manager.close_session(code)
        clock.advance(hours=1, seconds=1)

        assert await memory_store.get(code) is None
        result = await manager.get_messages_for_retrieval(code)
        assert result.status == RetrievalStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_close_unknown_code_fails(self, manager):
        assert await manager.close_session("ABCDEF") is False


class TestFixtureSession:
    @pytest.mark.asyncio
    async def test_fixture_is_retrievable_without_ingestion(self, manager, clock):
        clock.advance(days=3650)

        result = await manager.get_messages_for_retrieval(" test99 ")
        assert result.ok
        assert result.session.code == FIXTURE_CODE
        assert result.session.message_count == 3
        assert result.session.active is False

    @pytest.mark.asyncio
    async def test_fixture_transcript_covers_each_persona(self, manager):
        session = await manager.get_session(FIXTURE_CODE)
        parsed = segment(messages_to_transcript(session.messages))

        assert [(m.type, m.gender) for m in parsed] == [
            (PersonaType.PROFESSOR, None),
            (PersonaType.CLIENT, Gender.FEMALE),
            (PersonaType.CLIENT, Gender.MALE),
        ]

    @pytest.mark.asyncio
    async def test_fixture_close_is_a_noop_success(self, manager):
        assert await manager.close_session(FIXTURE_CODE) is True
        assert await manager.list_sessions() == []

    @pytest.mark.asyncio
    async def test_fixture_refuses_appends(self, manager, make_unit):
        assert await manager.append_message(FIXTURE_CODE, make_unit("x")) is False
        result = await manager.get_messages_for_retrieval(FIXTURE_CODE)
        assert result.session.message_count == 3

    @pytest.mark.asyncio
    async def test_fixture_can_be_disabled(self, memory_store, clock):
        manager = SessionManager(memory_store, clock=clock, enable_fixture=False)
        result = await manager.get_messages_for_retrieval(FIXTURE_CODE)
        assert result.status == RetrievalStatus.NOT_FOUND


class TestMemoryStores:
    @pytest.mark.asyncio
    async def test_sweep_removes_only_expired(self, manager, memory_store, clock):
        old = await manager.create_session("1")
        clock.advance(minutes=45)
        fresh = await manager.create_session("2")
        clock.advance(minutes=20)

        assert await memory_store.sweep_expired() == 1
        codes = [s.code for s in await memory_store.list_all()]
        assert codes == [fresh]
        assert old not in codes

    @pytest.mark.asyncio
    async def test_expired_active_session_does_not_block_new_one(self, manager, clock):
        first = await manager.create_session("42")
        clock.advance(hours=2)

        assert await manager.get_active_session("42") is None
        assert await manager.create_session("42") != first

    @pytest.mark.asyncio
    async def test_delete(self, manager, memory_store):
        code = await manager.create_session("42")
        await memory_store.delete(code)
        assert await memory_store.get(code) is None

    def test_shared_store_is_process_wide(self):
        assert SharedMemorySessionStore.instance() is SharedMemorySessionStore.instance()
        assert build_session_store("shared") is SharedMemorySessionStore.instance()

    def test_memory_store_is_per_instance(self):
        first = build_session_store("memory")
        assert isinstance(first, MemorySessionStore)
        assert first is not build_session_store("memory")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_session_store("sqlite")  # type: ignore[arg-type]
