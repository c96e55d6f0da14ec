# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 15:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 基于 Anthropic Messages API 的翻译后端
"""
from typing import List

import httpx
from httpx import AsyncClient
from loguru import logger

from settings import settings
from transcript.models import Gender, PersonaType
from translation.backend import TranslationBackend, TranslationBackendError
from translation.prompts import build_literal_prompt, build_styled_prompt

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeTranslationBackend(TranslationBackend):
    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        custom_instructions: List[str] | None = None,
        timeout: float | None = None,
    ):
        api_key = api_key or settings.ANTHROPIC_API_KEY.get_secret_value()
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        self._client = AsyncClient(
            base_url=base_url or settings.ANTHROPIC_BASE_URL,
            headers=headers,
            timeout=timeout or settings.TRANSLATION_CALL_TIMEOUT,
        )
        self._model = model or settings.ANTHROPIC_MODEL
        self._max_tokens = max_tokens or settings.ANTHROPIC_MAX_TOKENS
        self._custom_instructions = (
            settings.TRANSLATION_CUSTOM_INSTRUCTIONS
            if custom_instructions is None
            else custom_instructions
        )

    async def _complete(self, prompt: str) -> str:
        if settings.ENABLE_DEV_MODE:
            return settings.DEV_MODE_MOCKED_TEMPLATE

        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            response = await self._client.post("/v1/messages", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            raise TranslationBackendError(
                f"HTTP {err.response.status_code}: {err.response.text[:200]}"
            ) from err
        except httpx.HTTPError as err:
            raise TranslationBackendError(f"{type(err).__name__}: {err}") from err

        result = response.json()
        texts = [block.get("text", "") for block in result.get("content", []) if block.get("type") == "text"]
        answer = "".join(texts).strip()
        if not answer:
            raise TranslationBackendError("empty response from translation model")

        logger.debug(f"Translation usage: {result.get('usage')}")
        return answer

    async def translate_literal(self, text: str) -> str:
        return await self._complete(build_literal_prompt(text))

    async def translate_styled(self, persona: PersonaType, gender: Gender | None, text: str) -> str:
        prompt = build_styled_prompt(persona, gender, text, self._custom_instructions)
        return await self._complete(prompt)

    async def aclose(self) -> None:
        await self._client.aclose()
