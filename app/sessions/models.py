# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 18:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话记录的数据模型
"""
from datetime import datetime, UTC
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN_ATTRIBUTION = "Unknown"


def utc_now() -> datetime:
    return datetime.now(UTC)


class _PersistedModel(BaseModel):
    """Persisted as camelCase JSON, constructed with snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dumps(self) -> str:
        return self.model_dump_json(by_alias=True)


class MessageUnit(_PersistedModel):
    text: str = Field(description="转发消息的原文")
    attribution: str = Field(
        default=UNKNOWN_ATTRIBUTION, description="原始发送者的显示名称，无法识别时为 Unknown"
    )
    timestamp: datetime = Field(description="原始消息的发送时间")
    origin_message_id: int = Field(description="Telegram 分配的消息 ID，仅用于排查，不去重")


class Session(_PersistedModel):
    code: str = Field(description="6 位会话码")
    origin_id: str = Field(description="拥有该会话的聊天 ID")
    messages: List[MessageUnit] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime
    active: bool = True

    @property
    def message_count(self) -> int:
        return len(self.messages)


def is_expired(session: Session, now: datetime | None = None) -> bool:
    """Single source of truth for expiry, shared by every store backend."""
    now = now or utc_now()
    return now > session.expires_at


class RetrievalStatus(str, Enum):
    OK = "ok"
    """
    会话已关闭，可以读取
    """

    NOT_FOUND = "not_found"
    """
    会话不存在或已过期
    """

    STILL_ACTIVE = "still_active"
    """
    会话仍在收集消息，尚未 /done
    """


class RetrievalResult(BaseModel):
    status: RetrievalStatus
    session: Session | None = None

    @property
    def ok(self) -> bool:
        return self.status == RetrievalStatus.OK
