import asyncio

import httpx
import pytest

from article_ai.llm.discovery import (
    AuthMode,
    DiscoveryCandidate,
    DiscoveryLimits,
    discover_models,
    dedupe_and_sort,
    iter_candidates,
    run_attempt,
    strip_gemini_model_prefix,
)
from article_ai.llm.endpoints import GEMINI_DEFAULT_MODELS_URL, build_gemini_discovery_endpoints
from article_ai.llm.http import LLMError, LLMHTTPError

QUERY = DiscoveryCandidate(endpoint="https://h/v1beta/models", auth=AuthMode.QUERY)
HEADER = DiscoveryCandidate(endpoint="https://h/v1beta/models", auth=AuthMode.HEADER)


def test_dedupe_and_sort():
    assert dedupe_and_sort(["b", " a ", "a", "", "  ", "c", "b"]) == ["a", "b", "c"]


def test_strip_prefix_only_leading_segment():
    assert strip_gemini_model_prefix("models/gemini-pro") == "gemini-pro"
    assert strip_gemini_model_prefix("gemini-pro") == "gemini-pro"
    assert strip_gemini_model_prefix("tunedModels/models/x") == "tunedModels/models/x"


def test_default_endpoint_when_no_base_url():
    assert build_gemini_discovery_endpoints(None) == [GEMINI_DEFAULT_MODELS_URL]
    assert build_gemini_discovery_endpoints("   ") == [GEMINI_DEFAULT_MODELS_URL]


def test_custom_base_adds_v1beta_fallback():
    assert build_gemini_discovery_endpoints("https://proxy.example.com/") == [
        "https://proxy.example.com/models",
        "https://proxy.example.com/v1beta/models",
    ]


def test_custom_base_with_v1beta_has_single_endpoint():
    assert build_gemini_discovery_endpoints("https://proxy.example.com/v1beta") == [
        "https://proxy.example.com/v1beta/models",
    ]


def test_candidates_are_endpoint_major_query_first():
    candidates = list(iter_candidates(["https://a/models", "https://b/models"]))
    assert [(c.endpoint, c.auth) for c in candidates] == [
        ("https://a/models", AuthMode.QUERY),
        ("https://a/models", AuthMode.HEADER),
        ("https://b/models", AuthMode.QUERY),
        ("https://b/models", AuthMode.HEADER),
    ]


def test_candidate_request_shapes():
    assert QUERY.request_for("k", None) == ("https://h/v1beta/models?key=k", {})
    assert QUERY.request_for("k", "t1") == ("https://h/v1beta/models?key=k&pageToken=t1", {})
    assert HEADER.request_for("k", None) == ("https://h/v1beta/models", {"x-goog-api-key": "k"})


def test_pagination_follows_tokens():
    pages = {
        None: {"models": [{"name": "models/b"}, {"name": "models/a"}], "nextPageToken": "p2"},
        "p2": {"models": [{"name": "models/c"}, {"name": "models/a"}]},
    }
    urls = []

    async def fetch_json(url, headers):
        urls.append(url)
        token = httpx.URL(url).params.get("pageToken")
        return pages[token]

    result = asyncio.run(run_attempt(QUERY, api_key="k", fetch_json=fetch_json))

    assert result.ok
    assert result.models == ["a", "b", "c"]
    assert result.pages == 2
    assert "pageToken=p2" in urls[1]


def test_pagination_stops_at_page_limit():
    calls = []

    async def fetch_json(url, headers):
        calls.append(url)
        return {"models": [{"name": f"models/m{len(calls)}"}], "nextPageToken": f"t{len(calls)}"}

    result = asyncio.run(run_attempt(HEADER, api_key="k", fetch_json=fetch_json))

    assert result.ok
    assert len(calls) == 20
    assert result.pages == 20
    assert len(result.models) == 20


def test_pagination_stops_at_model_limit():
    calls = []

    async def fetch_json(url, headers):
        calls.append(url)
        start = (len(calls) - 1) * 30
        return {"models": [{"name": f"models/m{i:04d}"} for i in range(start, start + 30)], "nextPageToken": "more"}

    result = asyncio.run(run_attempt(HEADER, api_key="k", fetch_json=fetch_json))

    assert result.ok
    assert len(result.models) == 500
    assert len(calls) == 17


def test_pagination_respects_custom_limits_and_deadline():
    ticks = iter([0.0, 1.0, 5.0, 9.0])
    calls = []

    async def fetch_json(url, headers):
        calls.append(url)
        return {"models": [{"name": f"models/m{len(calls)}"}], "nextPageToken": "more"}

    limits = DiscoveryLimits(max_pages=10, max_models=100, max_seconds=4.0)
    result = asyncio.run(
        run_attempt(QUERY, api_key="k", fetch_json=fetch_json, limits=limits, clock=lambda: next(ticks))
    )

    assert result.ok
    assert len(calls) == 2
    assert result.models == ["m1", "m2"]


def test_attempt_failure_is_reported_not_raised():
    async def fetch_json(url, headers):
        raise LLMHTTPError("API key not valid", status_code=400)

    result = asyncio.run(run_attempt(QUERY, api_key="k", fetch_json=fetch_json))

    assert not result.ok
    assert result.error == "API key not valid"
    assert result.models is None


def test_malformed_listing_fails_attempt():
    async def fetch_json(url, headers):
        return {"models": "not-a-list"}

    result = asyncio.run(run_attempt(QUERY, api_key="k", fetch_json=fetch_json))
    assert not result.ok


def test_discover_short_circuits_on_first_success():
    seen = []

    async def fetch_json(url, headers):
        seen.append((url, dict(headers)))
        if len(seen) == 1:
            raise LLMHTTPError("Forbidden", status_code=403)
        return {"models": [{"name": "models/gemini-pro"}]}

    models = asyncio.run(
        discover_models(["https://a/models", "https://b/models"], api_key="k", fetch_json=fetch_json)
    )

    assert models == ["gemini-pro"]
    assert [url for url, _ in seen] == ["https://a/models?key=k", "https://a/models"]
    assert seen[1][1] == {"x-goog-api-key": "k"}


def test_discover_raises_last_error_when_everything_fails():
    seen = []

    async def fetch_json(url, headers):
        seen.append(url)
        raise LLMHTTPError(f"fail {len(seen)}", status_code=404)

    with pytest.raises(LLMError) as ctx:
        asyncio.run(discover_models(["https://a/models", "https://b/models"], api_key="k", fetch_json=fetch_json))

    assert len(seen) == 4
    assert str(ctx.value) == "Gemini 模型列表获取失败: fail 4"


def test_discover_without_candidates():
    async def fetch_json(url, headers):
        raise AssertionError("should not be called")

    with pytest.raises(LLMError, match="未知错误"):
        asyncio.run(discover_models([], api_key="k", fetch_json=fetch_json))
