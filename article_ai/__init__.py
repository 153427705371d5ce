# -*- coding: utf-8 -*-
"""
公众号编辑器的 AI 服务层

对外提供：对话、排版优化、配图生成、主题 CSS 生成、模型列表。
服务商（gemini / openai）由 AIConfig.provider 决定。
"""

from .llm import ChatTurn, LLMConfigError, LLMEmptyResultError, LLMError, LLMHTTPError, LLMNetworkError
from .services import (
    generate_chat_response,
    generate_formatted_content,
    generate_image,
    generate_theme_css,
    list_models,
)
from .settings import AIConfig

__version__ = "0.1.0"

__all__ = [
    "AIConfig",
    "ChatTurn",
    "LLMConfigError",
    "LLMEmptyResultError",
    "LLMError",
    "LLMHTTPError",
    "LLMNetworkError",
    "generate_chat_response",
    "generate_formatted_content",
    "generate_image",
    "generate_theme_css",
    "list_models",
]
