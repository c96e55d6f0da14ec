# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 16:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 分批并发翻译，单条失败不影响其他消息
"""
import asyncio
from typing import Awaitable, List

from loguru import logger

from transcript.models import ParsedMessage
from translation.backend import TranslationBackend
from translation.models import TranslatedMessage, error_marker

DEFAULT_BATCH_SIZE = 5
DEFAULT_CALL_TIMEOUT = 60.0


class TranslationOrchestrator:
    """
    Fans parsed messages out to a translation backend.

    - batches of `batch_size` run concurrently; the next batch starts only after
      the whole previous batch settled
    - per message the literal call runs first, then the styled call
    - every call is bounded by `call_timeout`; a failed or timed-out call turns
      into an error marker on its own field only
    - output order equals input order
    """

    def __init__(
        self,
        backend: TranslationBackend,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.backend = backend
        self.batch_size = batch_size
        self.call_timeout = call_timeout

    async def _guarded(self, call: Awaitable[str], label: str, message_id: int) -> str:
        try:
            return await asyncio.wait_for(call, timeout=self.call_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{label} translation of message #{message_id} timed out")
            return error_marker(f"timed out after {self.call_timeout:g}s")
        except Exception as err:
            logger.warning(f"{label} translation of message #{message_id} failed: {err}")
            return error_marker(str(err) or type(err).__name__)

    async def translate_one(self, unit: ParsedMessage) -> TranslatedMessage:
        literal = await self._guarded(
            self.backend.translate_literal(unit.original), "Literal", unit.id
        )
        styled = await self._guarded(
            self.backend.translate_styled(unit.type, unit.gender, unit.original), "Styled", unit.id
        )
        return TranslatedMessage(
            **unit.model_dump(), literal_translation=literal, translation=styled
        )

    async def translate_all(self, units: List[ParsedMessage]) -> List[TranslatedMessage]:
        results: List[TranslatedMessage] = []
        for start in range(0, len(units), self.batch_size):
            batch = units[start : start + self.batch_size]
            results.extend(await asyncio.gather(*(self.translate_one(u) for u in batch)))

        failed = sum(1 for r in results if r.failed)
        if failed:
            logger.warning(f"Translated {len(results)} messages, {failed} with errors")
        else:
            logger.success(f"Translated {len(results)} messages")
        return results
