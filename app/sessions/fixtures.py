# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 19:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 固定的冒烟测试会话 TEST99，网页端无需经过机器人即可读取
"""
from datetime import datetime, UTC

from sessions.models import MessageUnit, Session

FIXTURE_CODE = "TEST99"

_FIXTURE_CREATED_AT = datetime(2025, 1, 1, tzinfo=UTC)
_FIXTURE_EXPIRES_AT = datetime(2099, 12, 31, 23, 59, 59, tzinfo=UTC)

_FIXTURE_MESSAGES = [
    ("教授: 今天的市场走势很好，大家注意仓位控制", "Profesor"),
    ("30(女): 我有个问题，刚才老师说这周的收益有128%", "Cliente 30"),
    ("32: 对呀，审核也不用很久，我的当天就好了", "Cliente 32"),
]


def build_fixture_session() -> Session:
    """每次返回新对象，调用方可以随意修改"""
    messages = [
        MessageUnit(
            text=text,
            attribution=attribution,
            timestamp=_FIXTURE_CREATED_AT,
            origin_message_id=index,
        )
        for index, (text, attribution) in enumerate(_FIXTURE_MESSAGES, start=1)
    ]
    return Session(
        code=FIXTURE_CODE,
        origin_id="fixture",
        messages=messages,
        created_at=_FIXTURE_CREATED_AT,
        expires_at=_FIXTURE_EXPIRES_AT,
        active=False,
    )
