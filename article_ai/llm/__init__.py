# -*- coding: utf-8 -*-
"""
LLM 调用层

- 两个服务商：gemini（原生 REST）/ openai（OpenAI 兼容 REST）
- 每个 AIConfig 只选择一次适配器，之后统一走 LLMProvider 接口
- 响应统一归一化为字符串（文本 / data URI / 图片 URL）
"""

from __future__ import annotations

import httpx

from ..settings import AIConfig
from .base import ChatTurn, LLMProvider
from .gemini_provider import GeminiProvider
from .http import (
    LLMConfigError,
    LLMEmptyResultError,
    LLMError,
    LLMHTTPError,
    LLMNetworkError,
    LLMResponseError,
)
from .openai_provider import OpenAIProvider

PROVIDERS: dict[str, type[LLMProvider]] = {
    GeminiProvider.name: GeminiProvider,
    OpenAIProvider.name: OpenAIProvider,
}


def get_provider(config: AIConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> LLMProvider:
    try:
        provider_cls = PROVIDERS[config.provider]
    except KeyError:
        raise LLMConfigError(f"不支持的 provider: {config.provider}") from None
    return provider_cls(config, transport=transport)


__all__ = [
    "ChatTurn",
    "GeminiProvider",
    "LLMConfigError",
    "LLMEmptyResultError",
    "LLMError",
    "LLMHTTPError",
    "LLMNetworkError",
    "LLMProvider",
    "LLMResponseError",
    "OpenAIProvider",
    "PROVIDERS",
    "get_provider",
]
