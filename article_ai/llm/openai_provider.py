# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Sequence

from loguru import logger

from .base import ChatTurn, LLMProvider
from .discovery import dedupe_and_sort
from .endpoints import (
    build_openai_chat_completions_url,
    build_openai_image_generations_url,
    build_openai_models_url,
    openai_base_url,
)
from .http import LLMConfigError, LLMEmptyResultError, LLMError
from .schemas import OpenAIChatCompletion, OpenAIImageResponse, OpenAIModelList, parse_response

DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"
DEFAULT_IMAGE_MODEL = "dall-e-3"
EMPTY_CHAT_FALLBACK = "AI returned empty response"


def map_image_size(size: str) -> str:
    """映射到 OpenAI 支持的尺寸：默认 1024x1024；含 16:9 时用横版 1792x1024。"""
    if "1024" in size:
        return "1024x1024"
    if "16:9" in size:
        return "1792x1024"
    return "1024x1024"


def build_chat_messages(
    prompt: str,
    history: Sequence[ChatTurn] = (),
    system_instruction: str | None = None,
) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    for turn in history:
        messages.append({"role": "assistant" if turn.role == "model" else "user", "content": turn.text})
    messages.append({"role": "user", "content": prompt})
    return messages


class OpenAIProvider(LLMProvider):
    """
    OpenAI 兼容协议：
    - GET  {base_url}/models
    - POST {base_url}/chat/completions
    - POST {base_url}/images/generations
    """

    name = "openai"

    @property
    def base_url(self) -> str:
        return openai_base_url(self._config.base_url)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

    async def list_models(self) -> list[str]:
        try:
            url = build_openai_models_url(self.base_url)
            data = await self._request_json("GET", url, headers=self._headers(), context="openai.models")
            listing = parse_response(data, OpenAIModelList, context="OpenAI 模型列表")
        except LLMConfigError as e:
            raise LLMConfigError(f"OpenAI 模型列表获取失败: {e}") from e
        except LLMError as e:
            raise LLMError(f"OpenAI 模型列表获取失败: {e}") from e

        return dedupe_and_sort(m.id for m in listing.data if m.id)

    async def chat_complete(
        self,
        prompt: str,
        *,
        history: Sequence[ChatTurn] = (),
        system_instruction: str | None = None,
        temperature: float | None = None,
        model: str | None = None,
        empty_fallback: str | None = None,
        flatten_history: bool = True,
    ) -> str:
        # 历史直接映射为 messages，flatten_history 对本协议无影响
        payload: dict[str, Any] = {
            "model": model or self._config.chat_model or DEFAULT_CHAT_MODEL,
            "messages": build_chat_messages(prompt, history, system_instruction),
        }
        if temperature is None:
            temperature = self._config.temperature
        if temperature is not None:
            payload["temperature"] = temperature

        url = build_openai_chat_completions_url(self.base_url)
        logger.info("💬 OpenAI chat | model={} url={}", payload["model"], url)
        data = await self._request_json("POST", url, headers=self._headers(), payload=payload, context="openai.chat")

        text = parse_response(data, OpenAIChatCompletion, context="OpenAI 对话").text
        if not text:
            logger.warning("OpenAI chat 返回空内容 | model={}", payload["model"])
            return EMPTY_CHAT_FALLBACK if empty_fallback is None else empty_fallback
        return text

    async def generate_image(self, prompt: str, *, size: str = "1024x1024", model: str | None = None) -> str:
        payload = {
            "model": model or self._config.image_model or DEFAULT_IMAGE_MODEL,
            "prompt": prompt,
            "n": 1,
            "size": map_image_size(size),
            "response_format": "b64_json",
        }

        url = build_openai_image_generations_url(self.base_url)
        logger.info("🎨 OpenAI image | model={} size={} url={}", payload["model"], payload["size"], url)
        data = await self._request_json("POST", url, headers=self._headers(), payload=payload, context="openai.image")

        result = parse_response(data, OpenAIImageResponse, context="OpenAI 绘图")
        first = result.data[0] if result.data else None
        if first is not None and first.b64_json:
            return f"data:image/png;base64,{first.b64_json}"
        if first is not None and first.url:
            return first.url
        raise LLMEmptyResultError("未生成图片")
