# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/13 14:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 双语翻译
"""
from .backend import TranslationBackend, TranslationBackendError
from .export import render_consolidated
from .models import TranslatedMessage, error_marker, is_error_marker
from .orchestrator import TranslationOrchestrator

__all__ = [
    "TranslatedMessage",
    "TranslationBackend",
    "TranslationBackendError",
    "TranslationOrchestrator",
    "error_marker",
    "is_error_marker",
    "render_consolidated",
]
