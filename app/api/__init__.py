# -*- coding: utf-8 -*-
from .routes import bot_router, translate_router

__all__ = ["bot_router", "translate_router"]
