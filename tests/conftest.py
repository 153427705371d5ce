import httpx
import pytest

from article_ai.settings import AIConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Ensure configs in tests only see explicit arguments
    for name in (
        "AI_PROVIDER",
        "AI_API_KEY",
        "AI_BASE_URL",
        "AI_CHAT_MODEL",
        "AI_IMAGE_MODEL",
        "AI_TEMPERATURE",
        "AI_DISCOVERY_MAX_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def mock_transport():
    """Build an httpx.MockTransport that records every request it serves."""

    def factory(handler):
        calls: list[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return handler(request)

        return httpx.MockTransport(_handle), calls

    return factory


@pytest.fixture
def openai_config():
    return AIConfig(provider="openai", api_key="sk-test")


@pytest.fixture
def gemini_config():
    return AIConfig(provider="gemini", api_key="g-test")
