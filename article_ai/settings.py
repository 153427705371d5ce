# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["gemini", "openai"]

NETWORK_ERROR_PATTERN = r"failed to fetch|connect(ion)? ?(error|refused|reset)|name or service not known"
NETWORK_ERROR_HINT = "（可能是跨域 CORS、代理或网络问题）"


# === 配置类定义 ===
class AIConfig(BaseSettings):
    """
    一次调用所需的全部 AI 配置（值对象，构造后不可变）。

    - 可直接传参构造，也可从环境变量 / .env 读取（前缀 AI_，如 AI_API_KEY）
    - base_url / 模型名留空时使用各 provider 的默认值
    """

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    provider: ProviderName = Field(default="gemini", description="AI 服务商：gemini / openai")

    # [基础配置] API Key 使用 SecretStr，避免日志中泄露
    api_key: SecretStr | None = Field(default=None, description="API Key（Gemini 官方 / OpenAI 兼容均可）")

    base_url: str | None = Field(default=None, description="Base URL 覆盖；留空使用服务商默认地址")
    chat_model: str | None = Field(default=None, description="对话/排版/主题使用的模型")
    image_model: str | None = Field(default=None, description="绘图模型")
    temperature: float | None = Field(default=None, description="采样温度（仅对话使用）")

    # ================================
    # 网络与模型列表探测
    # ================================
    timeout_seconds: float = Field(default=60.0, gt=0, description="单次请求超时（秒）")
    discovery_max_pages: int = Field(default=20, ge=1, description="单次探测最多翻页数")
    discovery_max_models: int = Field(default=500, ge=1, description="单次探测最多累计模型数")
    discovery_max_seconds: float | None = Field(
        default=None,
        gt=0,
        description="单次探测（一个 endpoint × 鉴权方式）的总耗时上限（秒），超出后停止翻页",
    )

    # 网络错误提示：匹配到 pattern 时在错误信息后追加 hint
    network_error_pattern: str = Field(
        default=NETWORK_ERROR_PATTERN,
        description="识别网络层失败的正则（不区分大小写）",
    )
    network_error_hint: str = Field(
        default=NETWORK_ERROR_HINT,
        description="网络层失败时追加到错误信息后的提示",
    )

    @property
    def secret_key(self) -> str:
        if self.api_key is None:
            return ""
        return self.api_key.get_secret_value().strip()


settings = AIConfig()
