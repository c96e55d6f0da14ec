# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 10:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 对话文本解析结果
"""
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class PersonaType(str, Enum):
    PROFESSOR = "professor"
    """
    教授，正式语气
    """

    ASSISTANT = "assistant"
    """
    助理，正式语气
    """

    CLIENT = "client"
    """
    编号客户，口语化语气，区分性别
    """


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ParsedMessage(BaseModel):
    id: int = Field(description="按出现顺序从 1 开始的序号")
    original: str = Field(description="送去翻译的正文；清洗前为带前缀的完整原文")
    type: PersonaType
    client_number: int | None = Field(default=None, description="仅客户消息有值")
    gender: Gender | None = Field(default=None, description="仅客户消息有值")
    original_with_format: str | None = Field(
        default=None, description="清洗后保留的带前缀原文，用于展示和导出"
    )

    @model_validator(mode="after")
    def _check_client_fields(self):
        is_client = self.type == PersonaType.CLIENT
        has_fields = self.client_number is not None and self.gender is not None
        has_any = self.client_number is not None or self.gender is not None
        if is_client and not has_fields:
            raise ValueError("client messages require client_number and gender")
        if not is_client and has_any:
            raise ValueError(f"{self.type.value} messages cannot carry client_number or gender")
        return self

    @property
    def display_text(self) -> str:
        return self.original_with_format or self.original
