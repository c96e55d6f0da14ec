# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 10:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 聊天记录解析
"""
from .models import Gender, ParsedMessage, PersonaType
from .parser import clean_original_text, classify_line, prepare_for_translation, segment

__all__ = [
    "Gender",
    "ParsedMessage",
    "PersonaType",
    "classify_line",
    "clean_original_text",
    "prepare_for_translation",
    "segment",
]
