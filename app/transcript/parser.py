# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 10:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 把粘贴的聊天记录切分为带角色的消息

识别规则（按顺序，先命中者生效）：
- 教授: 行内包含 “教授” 且有冒号（: 或 ：），或包含 “Professor:”
- 助理: 行内包含 “助理” 且有冒号，或包含 “Assistant:”
- 客户: 行首为数字，可选 (女)/（女） 标记，随后是冒号；无标记视为男性

已知限制：续行如果恰好以 “32:” 这类格式开头（例如客户在谈论另一位客户），
会被误判为新消息，这里不做特殊处理。
"""
import re
from typing import List, Tuple

from transcript.models import Gender, ParsedMessage, PersonaType

# e.g. "blues 周伯通工作室, [10 de oct de 2025 a las 15:02]"
METADATA_LINE_PATTERN = re.compile(r"^[^,]+,\s*\[[^\]]+\]\s*$")

CLIENT_START_PATTERN = re.compile(r"^([0-9]+)(\(女\)|（女）)?[:：]")

_COLONS = (":", "：")

_PERSONA_KEYWORDS = {
    PersonaType.PROFESSOR: ("教授", "professor"),
    PersonaType.ASSISTANT: ("助理", "assistant"),
}

_PREFIX_PATTERNS = {
    persona: re.compile(rf"^(?:{glyph}|{keyword})[:：]\s*", re.IGNORECASE)
    for persona, (glyph, keyword) in _PERSONA_KEYWORDS.items()
}


def strip_metadata_lines(raw_text: str) -> str:
    """删除 Telegram 复制时附带的 “频道名, [时间]” 元数据行"""
    lines = raw_text.split("\n")
    return "\n".join(line for line in lines if not METADATA_LINE_PATTERN.match(line.strip()))


def _has_persona_marker(line: str, persona: PersonaType) -> bool:
    glyph, keyword = _PERSONA_KEYWORDS[persona]
    if glyph in line and any(colon in line for colon in _COLONS):
        return True
    lowered = line.lower()
    return any(f"{keyword}{colon}" in lowered for colon in _COLONS)


def classify_line(line: str) -> Tuple[PersonaType, int | None, Gender | None] | None:
    """
    判断一行是否为新消息的起始行

    Returns:
        (type, client_number, gender)，非起始行返回 None
    """
    if _has_persona_marker(line, PersonaType.PROFESSOR):
        return PersonaType.PROFESSOR, None, None
    if _has_persona_marker(line, PersonaType.ASSISTANT):
        return PersonaType.ASSISTANT, None, None
    if match := CLIENT_START_PATTERN.match(line):
        gender = Gender.FEMALE if match.group(2) else Gender.MALE
        return PersonaType.CLIENT, int(match.group(1)), gender
    return None


def segment(raw_text: str) -> List[ParsedMessage]:
    """
    把原始聊天记录切分为 ParsedMessage 列表

    起始行之后的非起始行视为多行消息的续行；第一个起始行之前的内容无法归属，直接丢弃。
    """
    if not raw_text or not raw_text.strip():
        return []

    lines = [line for line in strip_metadata_lines(raw_text).split("\n") if line.strip()]

    messages: List[ParsedMessage] = []
    current: dict | None = None

    for line in lines:
        if classified := classify_line(line):
            if current:
                messages.append(ParsedMessage(id=len(messages) + 1, **current))
            persona, client_number, gender = classified
            current = {
                "original": line,
                "type": persona,
                "client_number": client_number,
                "gender": gender,
            }
        elif current:
            current["original"] += "\n" + line

    if current:
        messages.append(ParsedMessage(id=len(messages) + 1, **current))

    return messages


def clean_original_text(original: str, persona: PersonaType, client_number: int | None = None) -> str:
    """
    去掉首行的角色前缀，只把正文送去翻译

    只处理第一行，续行保持不变。对已清洗过的文本再次调用不会产生变化。
    """
    text = original.strip()
    first_line, sep, rest = text.partition("\n")

    if persona == PersonaType.CLIENT:
        if client_number is None:
            return text
        # "007:" segments as client 7
        pattern = re.compile(rf"^0*{client_number}(?:\(女\)|（女）)?[:：]\s*", re.IGNORECASE)
    else:
        pattern = _PREFIX_PATTERNS[persona]

    first_line = pattern.sub("", first_line, count=1)
    return f"{first_line}{sep}{rest}".strip()


def prepare_for_translation(messages: List[ParsedMessage]) -> List[ParsedMessage]:
    """保留带前缀的原文用于展示，original 改为清洗后的正文"""
    return [
        msg.model_copy(
            update={
                "original_with_format": msg.original,
                "original": clean_original_text(msg.original, msg.type, msg.client_number),
            }
        )
        for msg in messages
    ]
