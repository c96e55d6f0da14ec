# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 14:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from pydantic import BaseModel, Field

from transcript.models import ParsedMessage

ERROR_MARKER_PREFIX = "[Error: "


def error_marker(reason: str) -> str:
    return f"{ERROR_MARKER_PREFIX}{reason}]"


def is_error_marker(value: str | None) -> bool:
    return bool(value) and value.startswith(ERROR_MARKER_PREFIX) and value.endswith("]")


class TranslatedMessage(ParsedMessage):
    literal_translation: str = Field(default="", description="直译")
    translation: str = Field(default="", description="按角色风格改写后的译文")

    @property
    def failed(self) -> bool:
        return is_error_marker(self.literal_translation) or is_error_marker(self.translation)


class TranslateRequest(BaseModel):
    text: str | None = Field(default=None, description="直接粘贴的聊天记录")
    code: str | None = Field(default=None, description="机器人会话码，与 text 二选一")


class TranslateResponse(BaseModel):
    success: bool = True
    message_count: int
    messages: list[TranslatedMessage]
    consolidated: str = Field(description="可直接复制的双语全文")
