"""
Pytest configuration and fixtures.

HTTP traffic is served by httpx.MockTransport handlers so no test touches
the network.
"""

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from langsource import translator
from langsource.client import GeminiClient
from langsource.utils import API_KEY_ENV_VAR

BASE_DOCUMENT = {
    "greeting": "Hello",
    "nav": {"home": "Home", "docs": "https://example.com/docs"},
    "items": ["One", "Two"],
}

TRANSLATED_DOCUMENT = {
    "greeting": "Hallo",
    "nav": {"home": "Startseite", "docs": "https://example.com/docs"},
    "items": ["Eins", "Zwei"],
}


def gemini_response(text: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]},
    )


def prompt_of(request: httpx.Request) -> str:
    body = json.loads(request.content)
    return body["contents"][0]["parts"][0]["text"]


@pytest.fixture
def base_file(tmp_path: Path) -> Path:
    path = tmp_path / "en.json"
    path.write_text(json.dumps(BASE_DOCUMENT), encoding="utf-8")
    return path


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], GeminiClient]:
    """Build a GeminiClient whose requests go to the given handler."""

    def _make(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiClient("test-key", http_client=http_client)

    return _make


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(translator, "RETRY_DELAY", 0.0)


@pytest.fixture
def api_key_env(monkeypatch):
    """Run with the API key unset, restoring the environment afterwards."""
    monkeypatch.setenv(API_KEY_ENV_VAR, "placeholder")
    monkeypatch.delenv(API_KEY_ENV_VAR)
