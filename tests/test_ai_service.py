from __future__ import annotations

import asyncio
import time

import pytest

import aquasafe.app.ai_service as ai_service
import aquasafe.app.config as config


def test_no_api_key_returns_none(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")
    assert asyncio.run(ai_service.rewrite_explanation(72, "Flood nearby.", 40.0, -75.0)) is None
    assert asyncio.run(ai_service.classify_urgency("Water is brown")) is None


@pytest.mark.parametrize(
    "reply,expected",
    [("High", "high"), ("critical.", "critical"), ("  Low urgency", "low"), ("urgent", None), ("", None), (None, None)],
)
def test_parse_urgency(reply, expected):
    assert ai_service.parse_urgency(reply) == expected


def test_classify_urgency_with_model(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    prompts = []

    def fake_call(prompt, api_key, model_name, max_tokens):
        prompts.append(prompt)
        return "High."

    monkeypatch.setattr(ai_service, "_call_gemini_text", fake_call)
    assert asyncio.run(ai_service.classify_urgency("Sewage in the creek")) == "high"
    assert "Sewage in the creek" in prompts[0]


def test_rewrite_explanation_strips_quotes(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(ai_service, "_call_gemini_text", lambda *args: '"Water here looks safe."')
    text = asyncio.run(ai_service.rewrite_explanation(95, "No known disasters.", 40.0, -75.0))
    assert text == "Water here looks safe."


def test_provider_errors_are_swallowed(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")

    def failing(*args):
        raise ai_service.AIProviderError("quota exceeded")

    monkeypatch.setattr(ai_service, "_call_gemini_text", failing)
    assert asyncio.run(ai_service.rewrite_explanation(50, "x", 0.0, 0.0)) is None


def test_timeout_is_reported_as_none(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(ai_service, "_call_gemini_text", lambda *args: time.sleep(0.5) or "late")
    result = asyncio.run(ai_service.classify_urgency("Cloudy water", timeout_seconds=0.05))
    assert result is None


class _Part:
    def __init__(self, text):
        self.text = text


class _Content:
    def __init__(self, parts):
        self.parts = parts


class _Candidate:
    def __init__(self, parts):
        self.content = _Content(parts)


class _Response:
    def __init__(self, text=None, candidates=None):
        self.text = text
        self.candidates = candidates


def test_extract_text_from_candidates():
    response = _Response(candidates=[_Candidate([_Part(""), _Part(" medium ")])])
    assert ai_service._extract_text_from_response(response) == "medium"
    assert ai_service._extract_text_from_response(_Response()) is None
