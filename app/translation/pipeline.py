# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 17:50
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话消息 -> 聊天记录文本 -> 解析 -> 清洗 -> 翻译
"""
import functools
from typing import List

from loguru import logger

from sessions.models import MessageUnit
from settings import settings
from transcript.parser import prepare_for_translation, segment
from translation.claude_client import ClaudeTranslationBackend
from translation.models import TranslatedMessage
from translation.orchestrator import TranslationOrchestrator


def messages_to_transcript(messages: List[MessageUnit]) -> str:
    """把会话中收集的消息拼接为可解析的聊天记录文本"""
    return "\n\n".join(m.text for m in messages if m.text)


async def translate_transcript(
    raw_text: str, orchestrator: TranslationOrchestrator
) -> List[TranslatedMessage]:
    parsed = segment(raw_text)
    if not parsed:
        logger.info("No attributable messages found in transcript")
        return []

    logger.debug(f"Segmented transcript into {len(parsed)} messages")
    return await orchestrator.translate_all(prepare_for_translation(parsed))


@functools.cache
def get_orchestrator() -> TranslationOrchestrator:
    return TranslationOrchestrator(
        ClaudeTranslationBackend(),
        batch_size=settings.TRANSLATION_BATCH_SIZE,
        call_timeout=settings.TRANSLATION_CALL_TIMEOUT,
    )
