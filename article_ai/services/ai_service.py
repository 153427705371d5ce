# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from typing import Sequence

import httpx
from loguru import logger

from ..llm import ChatTurn, GeminiProvider, LLMConfigError, LLMProvider, get_provider
from ..prompts import CHAT_SYSTEM_PROMPT, FORMAT_SYSTEM_PROMPT, build_theme_prompt
from ..settings import AIConfig, settings

FORMAT_TEMPERATURE = 0.3
THEME_TEMPERATURE = 0.7

_RE_CODE_FENCE = re.compile(r"```(?:css)?")


def strip_code_fences(text: str) -> str:
    return _RE_CODE_FENCE.sub("", text or "").strip()


def _provider_for(
    config: AIConfig | None,
    missing_key_message: str,
    transport: httpx.AsyncBaseTransport | None,
) -> LLMProvider:
    config = config if config is not None else settings
    if not config.secret_key:
        raise LLMConfigError(missing_key_message)
    return get_provider(config, transport=transport)


def _task_options(provider: LLMProvider, temperature: float, empty_fallback: str) -> dict:
    # 固定温度与空回复回退只用于 Gemini；OpenAI 兼容侧沿用 AIConfig.temperature 与默认回退
    if provider.name == GeminiProvider.name:
        return {"temperature": temperature, "empty_fallback": empty_fallback}
    return {}


async def list_models(
    config: AIConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[str]:
    provider = _provider_for(config, "请先在设置中配置 API Key", transport)
    return await provider.list_models()


async def generate_chat_response(
    config: AIConfig | None,
    prompt: str,
    history: Sequence[ChatTurn] = (),
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    provider = _provider_for(config, "请先在设置中配置 Chat API Key", transport)
    return await provider.chat_complete(prompt, history=history, system_instruction=CHAT_SYSTEM_PROMPT)


async def generate_formatted_content(
    config: AIConfig | None,
    content: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """排版优化；Gemini 返回空内容时原样返回输入。"""
    provider = _provider_for(config, "请先配置 Chat API Key", transport)
    return await provider.chat_complete(
        content,
        system_instruction=FORMAT_SYSTEM_PROMPT,
        flatten_history=False,
        **_task_options(provider, FORMAT_TEMPERATURE, content),
    )


async def generate_image(
    config: AIConfig | None,
    prompt: str,
    size: str = "1024x1024",
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    provider = _provider_for(config, "请先在设置中配置 绘图 API Key", transport)
    return await provider.generate_image(prompt, size=size)


async def generate_theme_css(
    config: AIConfig | None,
    prompt: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    provider = _provider_for(config, "请先配置 Chat API Key 以生成主题", transport)
    css = await provider.chat_complete(
        prompt,
        system_instruction=build_theme_prompt(prompt),
        flatten_history=False,
        **_task_options(provider, THEME_TEMPERATURE, ""),
    )
    css = strip_code_fences(css)
    logger.debug("🎨 主题 CSS 生成完成 | provider={} length={}", provider.name, len(css))
    return css
