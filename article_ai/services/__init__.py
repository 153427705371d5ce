# -*- coding: utf-8 -*-
from .ai_service import (
    generate_chat_response,
    generate_formatted_content,
    generate_image,
    generate_theme_css,
    list_models,
    strip_code_fences,
)

__all__ = [
    "generate_chat_response",
    "generate_formatted_content",
    "generate_image",
    "generate_theme_css",
    "list_models",
    "strip_code_fences",
]
