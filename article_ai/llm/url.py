# -*- coding: utf-8 -*-
from __future__ import annotations

import posixpath
import string
from typing import Mapping
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from .http import LLMConfigError


def normalize_base_url(url: str | None, default: str) -> str:
    """
    去掉首尾空白与尾部斜杠；为空时返回 default。

    幂等：normalize_base_url(normalize_base_url(x, d), d) == normalize_base_url(x, d)
    （default 本身需已规范化）
    """
    if url is None:
        return default
    url = str(url).strip().rstrip("/" + string.whitespace)
    return url or default


def build_query(url: str, params: Mapping[str, str | None]) -> str:
    """
    追加查询参数：
    - 值为 None 或空字符串的参数直接省略
    - url 已含 "?" 时用 "&" 连接，否则用 "?"
    """
    query = "&".join(
        f"{quote(str(k), safe='')}={quote(str(v), safe='')}"
        for k, v in params.items()
        if v is not None and v != ""
    )
    if not query:
        return url
    return f"{url}{'&' if '?' in url else '?'}{query}"


def join_url(base_url: str, *paths: str) -> str:
    """
    安全拼接 URL：
    - 处理 base_url 有/无尾部斜杠
    - 处理 base_url 自带 path 前缀（如 https://api.xxx.com/proxy）
    - 避免出现双斜杠或路径丢失
    """
    if base_url is None:
        raise LLMConfigError("base_url 不能为空")

    base_url = str(base_url).strip()
    if not base_url:
        raise LLMConfigError("base_url 不能为空")

    parts = _split(base_url)
    base_path = (parts.path or "").rstrip("/")

    clean_parts = [str(p).strip("/") for p in paths if p is not None and str(p).strip("/") != ""]
    new_path = posixpath.join(base_path, *clean_parts) if clean_parts else base_path

    # 绝对 URL 必须确保 path 以 / 开头
    if parts.scheme and parts.netloc:
        if not new_path.startswith("/"):
            new_path = "/" + new_path if new_path else "/"

    return urlunsplit((parts.scheme, parts.netloc, new_path, parts.query, parts.fragment))


def _split(url: str) -> SplitResult:
    try:
        return urlsplit(url)
    except ValueError as e:
        raise LLMConfigError(f"base_url 格式错误: {url} ({e})") from e


def _path_segments(url: str) -> list[str]:
    path = _split(url).path or ""
    return [seg for seg in path.split("/") if seg]


def has_v1beta(url: str) -> bool:
    """判断 url 的 path 中是否已经包含 /v1beta（作为路径段）。"""
    return "v1beta" in _path_segments(url)
