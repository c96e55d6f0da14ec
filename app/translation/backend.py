# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 14:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译后端接口
"""
from abc import ABC, abstractmethod

from transcript.models import Gender, PersonaType


class TranslationBackendError(Exception):
    """单次翻译调用失败"""


class TranslationBackend(ABC):
    """
    Each call is an independent network request that may fail on its own.
    """

    @abstractmethod
    async def translate_literal(self, text: str) -> str:
        """直译"""

    @abstractmethod
    async def translate_styled(self, persona: PersonaType, gender: Gender | None, text: str) -> str:
        """按角色风格翻译"""

    async def aclose(self) -> None:
        pass
