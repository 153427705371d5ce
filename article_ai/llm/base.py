# -*- coding: utf-8 -*-
from __future__ import annotations

import abc
from typing import Any, Literal, Sequence

import httpx
from pydantic import BaseModel, ConfigDict

from ..settings import AIConfig
from .http import request_json


class ChatTurn(BaseModel):
    """一轮历史对话（按时间顺序，旧的在前）。"""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str


class LLMProvider(abc.ABC):
    """
    服务商适配器的统一接口。

    每个实现只负责把中性的调用参数翻译成自己的协议，并把响应归一化为字符串：
    - chat_complete: 回复文本
    - generate_image: data URI（优先）或服务商托管的图片 URL
    - list_models: 去重、排序后的模型名
    """

    name: str = ""

    def __init__(self, config: AIConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._api_key = config.secret_key
        self._transport = transport

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        payload: Any | None = None,
        context: str | None = None,
    ) -> Any:
        return await request_json(
            method,
            url,
            headers=headers,
            payload=payload,
            timeout_seconds=self._config.timeout_seconds,
            transport=self._transport,
            error_pattern=self._config.network_error_pattern,
            error_hint=self._config.network_error_hint,
            context=context or self.name,
        )

    @abc.abstractmethod
    async def list_models(self) -> list[str]:
        ...

    @abc.abstractmethod
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
        ...

    @abc.abstractmethod
    async def generate_image(self, prompt: str, *, size: str = "1024x1024", model: str | None = None) -> str:
        ...
