# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/12 18:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话码生成与规范化
"""
import secrets

# No 0/O or 1/I, the code is typed by hand
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6


def generate_code(length: int = CODE_LENGTH) -> str:
    """
    生成会话码

    碰撞不做检查：32^6 约 10 亿种组合，而会话只存活 1 小时。
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()
