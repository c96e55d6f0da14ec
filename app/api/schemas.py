# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 14:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : HTTP 响应模型
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sessions.models import MessageUnit, Session


class ErrorResponse(BaseModel):
    """Standard error payload, carried in ``HTTPException.detail``"""

    success: bool = Field(False)
    error: str = Field(..., description="Error message describing what went wrong")
    error_code: str = Field(..., description="not_found | still_active | code_required | storage_unavailable")
    message: Optional[str] = Field(None, description="User facing guidance text")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "Session still active",
                "error_code": "still_active",
                "message": "La sesión todavía está activa. Enviá /done al bot primero.",
            }
        }
    }


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionMessagesResponse(_CamelModel):
    success: bool = True
    code: str
    message_count: int
    messages: List[MessageUnit]
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionMessagesResponse":
        return cls(
            code=session.code,
            message_count=session.message_count,
            messages=session.messages,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )


class SessionSummary(_CamelModel):
    code: str
    origin_id: str
    message_count: int
    active: bool
    created_at: datetime
    expires_at: datetime


class DebugSessionsResponse(_CamelModel):
    success: bool = True
    count: int
    sessions: List[SessionSummary]
