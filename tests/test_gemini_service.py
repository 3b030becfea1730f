"""
Tests for the Gemini research client.

The Gemini endpoint is replaced with an ``httpx.MockTransport`` so no network
access or API key is needed.
"""

import asyncio
import json

import httpx
import pytest

from deep_analyst.config import Settings
from deep_analyst.errors import ConfigurationError, GeminiAPIError, RateLimitError
from deep_analyst.gemini_service import (
    EMPTY_REPORT,
    dedupe_sources,
    is_rate_limit_error,
    perform_deep_research,
)
from deep_analyst.models import GroundingSource


def _settings() -> Settings:
    return Settings(gemini_model="test-model", request_timeout=5.0)


def _response(text="# Report\n\nBody", chunks=None) -> dict:
    candidate = {"content": {"role": "model", "parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


def _run(query, handler):
    return asyncio.run(
        perform_deep_research(query, settings=_settings(), transport=httpx.MockTransport(handler))
    )


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "test-key")


def test_dedupe_sources_keeps_first_occurrence_order():
    sources = [
        GroundingSource(uri="https://a.example", title="A"),
        GroundingSource(uri="https://b.example", title="B"),
        GroundingSource(uri="https://a.example", title="A again"),
        GroundingSource(uri="https://c.example", title="C"),
        GroundingSource(uri="https://b.example", title="B again"),
    ]
    unique = dedupe_sources(sources)
    assert [s.uri for s in unique] == ["https://a.example", "https://b.example", "https://c.example"]
    assert unique[0].title == "A"


@pytest.mark.parametrize(
    "message,expected",
    [
        ("429 Too Many Requests", True),
        ("Resource exhausted: QUOTA exceeded", True),
        ("You exceeded your current quota", True),
        ("500: internal error", False),
        ("connection reset", False),
    ],
)
def test_is_rate_limit_error(message, expected):
    assert is_rate_limit_error(RuntimeError(message)) is expected


def test_request_payload_and_report():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_response(text="Hello report"))

    report = _run("fusion power", handler)

    assert seen["url"].endswith("/models/test-model:generateContent")
    assert seen["key"] == "test-key"
    body = seen["body"]
    assert body["contents"][0]["parts"][0]["text"] == "fusion power"
    assert body["tools"] == [{"google_search": {}}]
    assert body["generationConfig"]["temperature"] == 0.2
    assert "Executive Summary" in body["systemInstruction"]["parts"][0]["text"]

    assert report.query == "fusion power"
    assert report.content == "Hello report"
    assert report.sources == []
    assert report.id
    assert report.timestamp > 0


def test_grounding_sources_are_deduplicated_and_titled():
    chunks = [
        {"web": {"uri": "https://a.example", "title": "A"}},
        {"web": {"uri": "https://b.example"}},
        {"web": {"uri": "https://a.example", "title": "Duplicate"}},
        {"retrievedContext": {"uri": "ignored"}},
    ]

    report = _run("q", lambda request: httpx.Response(200, json=_response(chunks=chunks)))

    assert [(s.uri, s.title) for s in report.sources] == [
        ("https://a.example", "A"),
        ("https://b.example", "https://b.example"),
    ]


def test_empty_response_uses_placeholder_content():
    report = _run("q", lambda request: httpx.Response(200, json={"candidates": []}))
    assert report.content == EMPTY_REPORT


def test_missing_api_key_makes_no_request(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_response())

    with pytest.raises(ConfigurationError, match="API Key is missing"):
        _run("q", handler)
    assert calls == []


def test_http_429_is_normalised():
    error = {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}

    with pytest.raises(RateLimitError) as info:
        _run("q", lambda request: httpx.Response(429, json=error))

    assert str(info.value) == "429: API rate limit exceeded."
    assert isinstance(info.value.__cause__, GeminiAPIError)


def test_quota_message_is_normalised():
    error = {"error": {"code": 403, "message": "Quota exceeded for project"}}

    with pytest.raises(RateLimitError):
        _run("q", lambda request: httpx.Response(403, json=error))


def test_other_failures_propagate_unchanged():
    error = {"error": {"code": 400, "message": "API key not valid"}}

    with pytest.raises(GeminiAPIError) as info:
        _run("q", lambda request: httpx.Response(400, json=error))

    assert str(info.value) == "400: API key not valid"
    assert info.value.status_code == 400


def test_transport_errors_propagate_unchanged():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        _run("q", handler)
