# -*- coding: utf-8 -*-
"""
服务商响应结构（只声明用到的字段，其余忽略）。

所有字段均可缺省：缺省时按空值处理，由调用方决定回退策略。
Gemini 官方 JSON 为 lowerCamelCase，这里统一用 alias 映射到 snake_case。
"""
from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .http import LLMResponseError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _CamelSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


# ================================
# OpenAI 兼容
# ================================
class OpenAIContentPart(_Schema):
    text: Optional[str] = None


class OpenAIMessage(_Schema):
    # 少数实现会把 content 作为 parts 列表
    content: Union[str, List[OpenAIContentPart], None] = None

    @property
    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            return "\n".join(p.text for p in self.content if p.text).strip()
        return ""


class OpenAIChoice(_Schema):
    message: Optional[OpenAIMessage] = None


class OpenAIChatCompletion(_Schema):
    choices: List[OpenAIChoice] = []

    @property
    def text(self) -> str:
        if not self.choices or self.choices[0].message is None:
            return ""
        return self.choices[0].message.text


class OpenAIImageDatum(_Schema):
    b64_json: Optional[str] = None
    url: Optional[str] = None


class OpenAIImageResponse(_Schema):
    data: List[OpenAIImageDatum] = []


class OpenAIModel(_Schema):
    id: Optional[str] = None


class OpenAIModelList(_Schema):
    data: List[OpenAIModel] = []


# ================================
# Gemini（generativelanguage v1beta）
# ================================
class GeminiInlineData(_CamelSchema):
    mime_type: Optional[str] = None
    data: Optional[str] = None


class GeminiPart(_CamelSchema):
    text: Optional[str] = None
    thought: Optional[bool] = None
    inline_data: Optional[GeminiInlineData] = None


class GeminiContent(_CamelSchema):
    parts: List[GeminiPart] = []


class GeminiCandidate(_CamelSchema):
    content: Optional[GeminiContent] = None


class GeminiGenerateContentResponse(_CamelSchema):
    candidates: List[GeminiCandidate] = []

    @property
    def parts(self) -> List[GeminiPart]:
        if not self.candidates or self.candidates[0].content is None:
            return []
        return self.candidates[0].content.parts

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if p.text and not p.thought)

    def first_inline_image(self) -> Optional[GeminiInlineData]:
        for part in self.parts:
            if part.inline_data is not None and part.inline_data.data:
                return part.inline_data
        return None


class GeminiPrediction(_CamelSchema):
    bytes_base64_encoded: Optional[str] = None
    mime_type: Optional[str] = None


class GeminiPredictResponse(_CamelSchema):
    predictions: List[GeminiPrediction] = []


class GeminiModel(_CamelSchema):
    name: Optional[str] = None


class GeminiModelList(_CamelSchema):
    models: List[GeminiModel] = []
    next_page_token: Optional[str] = None


def parse_response(data: Any, schema: Type[SchemaT], *, context: str) -> SchemaT:
    try:
        return schema.model_validate(data if data is not None else {})
    except ValidationError as ve:
        raise LLMResponseError(f"{context} 响应结构异常：{str(data)[:500]}") from ve
