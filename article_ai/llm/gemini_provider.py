# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Sequence

from loguru import logger

from .base import ChatTurn, LLMProvider
from .discovery import DiscoveryLimits, discover_models
from .endpoints import (
    build_gemini_discovery_endpoints,
    build_gemini_generate_content_url,
    build_gemini_predict_url,
    gemini_root,
)
from .http import LLMConfigError, LLMEmptyResultError
from .schemas import GeminiGenerateContentResponse, GeminiPredictResponse, parse_response

DEFAULT_CHAT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
EMPTY_CHAT_FALLBACK = "AI 未返回内容"


def map_aspect_ratio(size: str) -> str:
    aspect_ratio = "1:1"
    if "16:9" in size:
        aspect_ratio = "16:9"
    if "4:3" in size:
        aspect_ratio = "4:3"
    return aspect_ratio


def is_imagen_model(model: str) -> bool:
    return "imagen" in model.lower()


def flatten_conversation(prompt: str, history: Sequence[ChatTurn] = ()) -> str:
    """Gemini 侧不维护多轮会话：历史按 "User:" / "Model:" 逐行拼接，再追加本轮提问。"""
    lines = [f"{'User' if turn.role == 'user' else 'Model'}: {turn.text}\n" for turn in history]
    return "".join(lines) + f"User: {prompt}"


class GeminiProvider(LLMProvider):
    """
    Gemini 原生 REST（generativelanguage v1beta）：
    - POST {root}/v1beta/models/{model}:generateContent
    - POST {root}/v1beta/models/{model}:predict （Imagen）
    - GET  模型列表见 discovery.discover_models
    """

    name = "gemini"

    @property
    def root(self) -> str:
        return gemini_root(self._config.base_url)

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}

    async def _generate_content(self, model: str, payload: dict[str, Any], *, context: str) -> GeminiGenerateContentResponse:
        url = build_gemini_generate_content_url(self.root, model)
        data = await self._request_json("POST", url, headers=self._headers(), payload=payload, context=context)
        return parse_response(data, GeminiGenerateContentResponse, context="Gemini generateContent")

    async def list_models(self) -> list[str]:
        async def fetch_json(url: str, headers: dict[str, str]) -> Any:
            return await self._request_json("GET", url, headers=headers, context="gemini.models")

        limits = DiscoveryLimits(
            max_pages=self._config.discovery_max_pages,
            max_models=self._config.discovery_max_models,
            max_seconds=self._config.discovery_max_seconds,
        )
        try:
            endpoints = build_gemini_discovery_endpoints(self._config.base_url)
        except LLMConfigError as e:
            raise LLMConfigError(f"Gemini 模型列表获取失败: {e}") from e

        return await discover_models(
            endpoints,
            api_key=self._api_key,
            fetch_json=fetch_json,
            limits=limits,
        )

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
        model = model or self._config.chat_model or DEFAULT_CHAT_MODEL
        text = flatten_conversation(prompt, history) if flatten_history else prompt
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": text}]}],
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        if temperature is None:
            temperature = self._config.temperature
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}

        logger.info("💬 Gemini chat | model={} root={}", model, self.root)
        response = await self._generate_content(model, payload, context="gemini.chat")

        if not response.text:
            logger.warning("Gemini chat 返回空内容 | model={}", model)
            return EMPTY_CHAT_FALLBACK if empty_fallback is None else empty_fallback
        return response.text

    async def generate_image(self, prompt: str, *, size: str = "1024x1024", model: str | None = None) -> str:
        model = model or self._config.image_model or DEFAULT_IMAGE_MODEL
        aspect_ratio = map_aspect_ratio(size)
        logger.info("🎨 Gemini image | model={} aspect_ratio={} root={}", model, aspect_ratio, self.root)

        if is_imagen_model(model):
            payload = {
                "instances": [{"prompt": prompt}],
                "parameters": {
                    "sampleCount": 1,
                    "aspectRatio": aspect_ratio,
                    "outputOptions": {"mimeType": "image/jpeg"},
                },
            }
            url = build_gemini_predict_url(self.root, model)
            data = await self._request_json("POST", url, headers=self._headers(), payload=payload, context="gemini.imagen")
            predictions = parse_response(data, GeminiPredictResponse, context="Gemini Imagen").predictions
            if predictions and predictions[0].bytes_base64_encoded:
                first = predictions[0]
                return f"data:{first.mime_type or 'image/jpeg'};base64,{first.bytes_base64_encoded}"
        else:
            # Gemini Flash Image 等多模态模型：从 candidates[0].content.parts 中找第一个 inlineData
            payload = {
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {"imageConfig": {"aspectRatio": aspect_ratio}},
            }
            response = await self._generate_content(model, payload, context="gemini.image")
            inline = response.first_inline_image()
            if inline is not None:
                return f"data:{inline.mime_type or 'image/png'};base64,{inline.data}"

        logger.warning("Gemini 未生成图片 | model={}", model)
        raise LLMEmptyResultError("未生成图片")
