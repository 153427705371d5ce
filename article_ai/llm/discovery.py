# -*- coding: utf-8 -*-
"""
Gemini 模型列表探测。

不同代理接受的 base path 与鉴权方式不一致，这里按固定优先级依次尝试
(endpoint × 鉴权方式) 组合，第一个成功的组合直接返回：

    for endpoint in endpoints:
        1) ?key=API_KEY     （不触发 CORS 预检，优先）
        2) x-goog-api-key   （部分代理只认 header）

单次尝试内按 nextPageToken 翻页，受 max_pages / max_models / max_seconds 约束，
触发任一上限即停止翻页并返回已拿到的部分结果。
"""
from __future__ import annotations

import enum
import locale
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Iterator

from loguru import logger

from .http import LLMError
from .schemas import GeminiModelList, parse_response
from .url import build_query

FetchJSON = Callable[[str, dict[str, str]], Awaitable[Any]]


def dedupe_and_sort(models: Iterable[str]) -> list[str]:
    cleaned = {m.strip() for m in models if m and m.strip()}
    return sorted(cleaned, key=locale.strxfrm)


def strip_gemini_model_prefix(name: str) -> str:
    return name.removeprefix("models/")


class AuthMode(str, enum.Enum):
    QUERY = "query"
    HEADER = "header"


@dataclass(frozen=True)
class DiscoveryCandidate:
    endpoint: str
    auth: AuthMode

    def request_for(self, api_key: str, page_token: str | None) -> tuple[str, dict[str, str]]:
        if self.auth is AuthMode.QUERY:
            return build_query(self.endpoint, {"key": api_key, "pageToken": page_token}), {}
        return build_query(self.endpoint, {"pageToken": page_token}), {"x-goog-api-key": api_key}


@dataclass(frozen=True)
class DiscoveryLimits:
    max_pages: int = 20
    max_models: int = 500
    max_seconds: float | None = None


@dataclass(frozen=True)
class AttemptResult:
    candidate: DiscoveryCandidate
    models: list[str] | None = None
    error: str | None = None
    pages: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def iter_candidates(endpoints: Iterable[str]) -> Iterator[DiscoveryCandidate]:
    for endpoint in endpoints:
        for auth in (AuthMode.QUERY, AuthMode.HEADER):
            yield DiscoveryCandidate(endpoint=endpoint, auth=auth)


async def run_attempt(
    candidate: DiscoveryCandidate,
    *,
    api_key: str,
    fetch_json: FetchJSON,
    limits: DiscoveryLimits = DiscoveryLimits(),
    clock: Callable[[], float] = time.monotonic,
) -> AttemptResult:
    """单个 (endpoint, 鉴权方式) 组合的完整翻页；失败以 AttemptResult.error 返回而不是抛出。"""
    models: list[str] = []
    page_token: str | None = None
    pages = 0
    started = clock()

    while pages < limits.max_pages and len(models) < limits.max_models:
        if limits.max_seconds is not None and pages and clock() - started >= limits.max_seconds:
            logger.warning(
                "Gemini 模型列表翻页超时，返回部分结果 | endpoint={} pages={}", candidate.endpoint, pages
            )
            break

        url, headers = candidate.request_for(api_key, page_token)
        try:
            data = await fetch_json(url, headers)
            page = parse_response(data, GeminiModelList, context="Gemini 模型列表")
        except LLMError as e:
            return AttemptResult(candidate=candidate, error=str(e), pages=pages)
        pages += 1

        names = [strip_gemini_model_prefix((m.name or "").strip()) for m in page.models]
        names = [n for n in names if n]
        models.extend(names[: limits.max_models - len(models)])

        page_token = page.next_page_token
        if not page_token:
            break

    return AttemptResult(candidate=candidate, models=dedupe_and_sort(models), pages=pages)


async def discover_models(
    endpoints: Iterable[str],
    *,
    api_key: str,
    fetch_json: FetchJSON,
    limits: DiscoveryLimits = DiscoveryLimits(),
) -> list[str]:
    last_error: str | None = None

    for candidate in iter_candidates(endpoints):
        logger.debug("🔎 Gemini 模型列表探测 | endpoint={} auth={}", candidate.endpoint, candidate.auth.value)
        result = await run_attempt(candidate, api_key=api_key, fetch_json=fetch_json, limits=limits)
        if result.ok:
            logger.success(
                "✅ Gemini 模型列表获取成功 | endpoint={} auth={} pages={} models={}",
                candidate.endpoint,
                candidate.auth.value,
                result.pages,
                len(result.models or []),
            )
            return result.models or []

        logger.warning(
            "Gemini 模型列表探测失败，尝试下一组合 | endpoint={} auth={} err={}",
            candidate.endpoint,
            candidate.auth.value,
            result.error,
        )
        last_error = result.error

    if last_error is None:
        raise LLMError("模型列表获取失败：未知错误")
    raise LLMError(f"Gemini 模型列表获取失败: {last_error}")
