# -*- coding: utf-8 -*-
from __future__ import annotations

from .url import has_v1beta, join_url, normalize_base_url

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
GEMINI_DEFAULT_ROOT = "https://generativelanguage.googleapis.com"
GEMINI_DEFAULT_MODELS_URL = f"{GEMINI_DEFAULT_ROOT}/v1beta/models"


def openai_base_url(base_url: str | None) -> str:
    return normalize_base_url(base_url, OPENAI_DEFAULT_BASE_URL)


def build_openai_models_url(base_url: str) -> str:
    return join_url(base_url, "models")


def build_openai_chat_completions_url(base_url: str) -> str:
    return join_url(base_url, "chat/completions")


def build_openai_image_generations_url(base_url: str) -> str:
    return join_url(base_url, "images/generations")


def gemini_root(base_url: str | None) -> str:
    return normalize_base_url(base_url, GEMINI_DEFAULT_ROOT)


def _gemini_model_url(root: str, model: str, method: str) -> str:
    # {root}/v1beta/models/{model}:{method}（若 root 已含 /v1beta 则不重复添加）
    model = model.removeprefix("models/")
    path = f"models/{model}:{method}"
    return join_url(root, path) if has_v1beta(root) else join_url(root, "v1beta", path)


def build_gemini_generate_content_url(root: str, model: str) -> str:
    return _gemini_model_url(root, model, "generateContent")


def build_gemini_predict_url(root: str, model: str) -> str:
    return _gemini_model_url(root, model, "predict")


def build_gemini_discovery_endpoints(base_url: str | None) -> list[str]:
    """
    模型列表候选地址（按优先级）：
    - 自定义 base_url：先 {base}/models；base 不含 /v1beta 路径段时再补 {base}/v1beta/models
    - 未配置：仅官方默认地址
    """
    custom = normalize_base_url(base_url, "")
    if not custom:
        return [GEMINI_DEFAULT_MODELS_URL]

    endpoints = [join_url(custom, "models")]
    if not has_v1beta(custom):
        endpoints.append(join_url(custom, "v1beta/models"))
    return endpoints
