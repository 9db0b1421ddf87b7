"""Optional Gemini helpers: one-sentence score summaries and report urgency.

Both are best-effort. Without ``GEMINI_API_KEY`` they return ``None`` and the
caller keeps its deterministic text or default urgency.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from . import config

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
VALID_URGENCIES = ("low", "medium", "high", "critical")


class AIProviderError(RuntimeError):
    """Raised when the Gemini request/response handling fails."""


class AITimeoutError(RuntimeError):
    """Raised when Gemini does not answer within the timeout."""


def _extract_text_from_response(response: Any) -> str | None:
    text = getattr(response, "text", None)
    if isinstance(text, str) and text.strip():
        return text.strip()

    candidates = getattr(response, "candidates", None)
    if not isinstance(candidates, list):
        return None
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None)
        if not isinstance(parts, list):
            continue
        for part in parts:
            part_text = getattr(part, "text", None)
            if isinstance(part_text, str) and part_text.strip():
                return part_text.strip()
    return None


def _call_gemini_text(prompt: str, api_key: str, model_name: str, max_tokens: int) -> str:
    try:
        from google import genai
        from google.genai import types
    except Exception as exc:  # pragma: no cover - import environment specific
        raise AIProviderError("google-genai dependency is not available. Install `google-genai`.") from exc

    client = genai.Client(api_key=api_key)
    try:
        response = client.models.generate_content(
            model=model_name,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=0.2, max_output_tokens=max_tokens),
        )
    except Exception as exc:
        raise AIProviderError(f"Gemini request failed: {exc}") from exc

    text = _extract_text_from_response(response)
    if not text:
        raise AIProviderError("Gemini returned an empty response body.")
    return text


async def _generate(prompt: str, *, max_tokens: int, timeout_seconds: float) -> str | None:
    api_key = config.GEMINI_API_KEY
    if not api_key:
        return None
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_call_gemini_text, prompt, api_key, config.GEMINI_TEXT_MODEL, max_tokens),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        raise AITimeoutError(f"Gemini request timed out after {timeout_seconds:.0f}s.") from exc


def build_summary_prompt(score: int, explanation: str, lat: float, lng: float) -> str:
    return (
        "You are a water safety assistant. In one short sentence (under 20 words), "
        "tell the user what this water safety result means. Be clear and calm.\n\n"
        f"Water safety score: {score}/100 (higher = safer).\n"
        f"Factors: {explanation}\n"
        f"Location: {lat}, {lng}\n\n"
        "Reply with only that one sentence, no quotes or preamble."
    )


async def rewrite_explanation(
    score: int,
    explanation: str,
    lat: float,
    lng: float,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> str | None:
    try:
        text = await _generate(
            build_summary_prompt(score, explanation, lat, lng),
            max_tokens=80,
            timeout_seconds=timeout_seconds,
        )
    except (AIProviderError, AITimeoutError) as exc:
        logger.warning("AI summary unavailable: %s", exc)
        return None
    return text.strip().strip('"') if text else None


def parse_urgency(reply: str | None) -> str | None:
    if not reply:
        return None
    words = reply.strip().lower().split()
    if not words:
        return None
    word = words[0].strip(".,!\"'")
    return word if word in VALID_URGENCIES else None


async def classify_urgency(
    description: str,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> str | None:
    prompt = (
        "You classify water safety reports by urgency. Reply with exactly one word: "
        "low, medium, high, or critical. Consider: contamination, flooding, no water, "
        "smell, color, illness, etc.\n\n"
        f'Classify urgency for this report: "{description[:500]}"'
    )
    try:
        reply = await _generate(prompt, max_tokens=10, timeout_seconds=timeout_seconds)
    except (AIProviderError, AITimeoutError) as exc:
        logger.warning("Urgency classification unavailable: %s", exc)
        return None
    return parse_urgency(reply)
