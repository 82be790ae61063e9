"""
Remote text generation client.

Talks to a Gemini-style ``generateContent`` endpoint over HTTP and returns the
first candidate's text. Every failure mode (transport, status, response shape)
surfaces as ``LLMError`` so callers can fall back with a single except clause.
"""

import json
import re
from typing import Any, Optional

import requests

from .config import Settings

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```|(\{[\s\S]*\})")


class LLMError(Exception):
    pass


class LLMClient:
    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(settings.llm_api_key, settings.llm_api_url, timeout=settings.llm_timeout_sec)

    def generate(self, *parts: str, temperature: Optional[float] = None, max_tokens: Optional[int] = None) -> str:
        if not self.api_key:
            raise LLMError("No LLM_API_KEY configured")

        payload: dict[str, Any] = {"contents": [{"parts": [{"text": p} for p in parts]}]}
        gen_config: dict[str, Any] = {}
        if temperature is not None:
            gen_config["temperature"] = temperature
        if max_tokens is not None:
            gen_config["maxOutputTokens"] = max_tokens
        if gen_config:
            payload["generationConfig"] = gen_config

        try:
            r = self.session.post(
                self.api_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise LLMError(f"request failed: {e}") from e

        if not r.ok:
            raise LLMError(f"HTTP {r.status_code}: {r.text[:200]}")

        try:
            body = r.json()
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"unexpected response shape: {e}") from e

        if not isinstance(text, str):
            raise LLMError("candidate text is not a string")
        return text


def extract_json(text: str) -> Any:
    """
    Parse JSON from model output that may be wrapped in markdown or prose.
    Tries the whole text, then a fenced block, then the outermost {...}.
    Raises ValueError when nothing parses.
    """
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        pass

    m = _FENCED_JSON.search(text or "")
    if not m:
        raise ValueError("No JSON found in response")

    try:
        return json.loads(m.group(1) or m.group(2))
    except ValueError as e:
        raise ValueError("Failed to parse JSON from response") from e
