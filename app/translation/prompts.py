# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 14:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 提示词模板
"""
from typing import List

from transcript.models import Gender, PersonaType

CUSTOM_INSTRUCTIONS_TEMPLATE = """
## INSTRUCCIONES PERSONALIZADAS (MÁXIMA PRIORIDAD)
En caso de conflicto, estas instrucciones tienen prioridad sobre las reglas base:
{instructions}

---
"""

LITERAL_PROMPT_TEMPLATE = """
Traducí el siguiente texto del chino al español de forma literal y fiel, sin adaptar el estilo.
Devolvé solamente la traducción.

<original>
{text}
</original>
"""

# 教授与助理：正式语气
FORMAL_RULES_TEMPLATE = """
## PROYECTO 1: {role} (FORMAL)
- Tono académico, profesional y claro
- CON comas, CON acentos, CON puntos finales
- Sin abreviaciones, sin emojis, sin negritas
- Mayúscula al inicio de cada oración
"""

# 客户：WhatsApp 口语
INFORMAL_RULES_TEMPLATE = """
## PROYECTO 2: CLIENTE {gender} (INFORMAL WHATSAPP)
- Tono informal y natural, 100% argentino
- SIN comas, SIN acentos, SIN punto final
- Abreviaciones permitidas (q, tmb, pq, xq)
- Emojis: {emoji_rule}
"""

STYLED_PROMPT_TEMPLATE = """
{custom_instructions}Eres un asistente de traducción del chino al español argentino para conversaciones de grupos de inversión.
{rules}
Devolvé solamente la traducción.

<original>
{text}
</original>
"""


def build_literal_prompt(text: str) -> str:
    return LITERAL_PROMPT_TEMPLATE.format(text=text).strip()


def build_styled_prompt(
    persona: PersonaType,
    gender: Gender | None,
    text: str,
    custom_instructions: List[str] | None = None,
) -> str:
    if not text or not text.strip():
        raise ValueError("text to translate must not be empty")

    if persona == PersonaType.CLIENT:
        is_female = gender == Gender.FEMALE
        rules = INFORMAL_RULES_TEMPLATE.format(
            gender="MUJER" if is_female else "HOMBRE",
            emoji_rule="sutiles, con moderación" if is_female else "muy ocasional o ninguno",
        )
    else:
        role = "PROFESOR" if persona == PersonaType.PROFESSOR else "ASISTENTE"
        rules = FORMAL_RULES_TEMPLATE.format(role=role)

    custom_block = ""
    if custom_instructions:
        numbered = "\n".join(f"{i}. {item}" for i, item in enumerate(custom_instructions, start=1))
        custom_block = CUSTOM_INSTRUCTIONS_TEMPLATE.format(instructions=numbered).lstrip()

    return STYLED_PROMPT_TEMPLATE.format(
        custom_instructions=custom_block, rules=rules, text=text
    ).strip()
