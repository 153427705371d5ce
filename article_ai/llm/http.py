# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from typing import Any, Mapping

import httpx
from loguru import logger

from ..settings import NETWORK_ERROR_HINT, NETWORK_ERROR_PATTERN


class LLMError(RuntimeError):
    pass


class LLMConfigError(LLMError, ValueError):
    """配置缺失（如未填写 API Key），在发起任何网络请求前抛出。"""


class LLMHTTPError(LLMError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMResponseError(LLMHTTPError):
    """响应是合法 JSON，但结构与预期不符。"""


class LLMNetworkError(LLMError):
    pass


class LLMEmptyResultError(LLMError):
    pass


def redact_url(url: str | httpx.URL) -> str:
    """日志中隐藏 ?key= 形式的 API Key。"""
    try:
        u = httpx.URL(str(url))
    except httpx.InvalidURL:
        return re.sub(r"([?&]key=)[^&]*", r"\1***", str(url))
    if "key" in u.params:
        u = u.copy_set_param("key", "***")
    return str(u)


def safe_parse_json(resp: httpx.Response) -> Any | None:
    try:
        return resp.json()
    except ValueError:
        return None


def error_message_from_response(resp: httpx.Response) -> str:
    """优先取 JSON 错误体中的 error.message，否则退回状态文本。"""
    body = safe_parse_json(resp)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"].strip():
            return error["message"].strip()
        if isinstance(error, str) and error.strip():
            return error.strip()
    return resp.reason_phrase or f"HTTP {resp.status_code}"


def format_network_error(
    error: BaseException,
    *,
    pattern: str = NETWORK_ERROR_PATTERN,
    hint: str = NETWORK_ERROR_HINT,
) -> str:
    msg = str(error).strip() or type(error).__name__
    if isinstance(error, httpx.TransportError) or re.search(pattern, msg, flags=re.IGNORECASE):
        return f"{msg}{hint}"
    return msg


def response_json_checked(resp: httpx.Response, *, context: str | None = None) -> Any:
    """
    解析响应 JSON 前先检查：
    - 非 2xx：错误信息取自 JSON 错误体，取不到时退回状态文本
    - 空 body / 非 JSON body：记录 content-type 与 body 片段后失败
    """
    status_code = resp.status_code
    content_type = (resp.headers.get("content-type") or "").lower()
    text_snippet = (resp.text or "")[:1000]
    url = redact_url(resp.request.url)
    ctx = f" | {context}" if context else ""

    if resp.is_error:
        message = error_message_from_response(resp)
        logger.error(
            "LLM HTTP 错误响应{} status_code={} url={} body_snippet={}",
            ctx,
            status_code,
            url,
            text_snippet,
        )
        raise LLMHTTPError(message, status_code=status_code)

    if not resp.content:
        logger.error("LLM HTTP 响应体为空{} status_code={} url={}", ctx, status_code, url)
        raise LLMHTTPError("响应体为空（可能被网关/WAF 拦截或服务异常）", status_code=status_code)

    data = safe_parse_json(resp)
    if data is None:
        logger.error(
            "LLM HTTP 非 JSON 响应{} status_code={} content_type={} url={} body_snippet={}",
            ctx,
            status_code,
            content_type,
            url,
            text_snippet,
        )
        raise LLMHTTPError(
            f"非 JSON 响应（status_code={status_code}, content_type={content_type}）",
            status_code=status_code,
        )

    return data


async def request_json(
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    payload: Any | None = None,
    timeout_seconds: float = 60.0,
    transport: httpx.AsyncBaseTransport | None = None,
    error_pattern: str = NETWORK_ERROR_PATTERN,
    error_hint: str = NETWORK_ERROR_HINT,
    context: str | None = None,
) -> Any:
    """发起一次请求并返回 JSON；网络层失败转换为 LLMNetworkError。"""
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds), follow_redirects=True, transport=transport
        ) as client:
            resp = await client.request(method, url, headers=headers, json=payload)
    except httpx.InvalidURL as e:
        raise LLMConfigError(f"base_url 格式错误: {redact_url(url)} ({e})") from e
    except httpx.HTTPError as e:
        message = format_network_error(e, pattern=error_pattern, hint=error_hint)
        ctx = f" | {context}" if context else ""
        logger.error("LLM 网络请求失败{} {} url={} err={}", ctx, method, redact_url(url), message)
        raise LLMNetworkError(message) from e

    return response_json_checked(resp, context=context)
