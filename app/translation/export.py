# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 17:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 导出双语全文，格式为 带前缀原文 + 代码块译文，消息之间用 🔹 🔹 🔹 分隔
"""
from typing import List

from translation.models import TranslatedMessage

MESSAGE_SEPARATOR = "🔹 🔹 🔹"


def render_message_block(message: TranslatedMessage) -> str:
    return f"{message.display_text}\n```\n{message.translation}\n```"


def render_consolidated(messages: List[TranslatedMessage]) -> str:
    return f"\n\n{MESSAGE_SEPARATOR}\n\n".join(render_message_block(m) for m in messages)
