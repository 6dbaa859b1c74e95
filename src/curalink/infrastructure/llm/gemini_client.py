from __future__ import annotations

import os
from typing import Any, Dict, Optional

import requests

DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiError(RuntimeError):
    """Upstream generateContent failure (HTTP error, blocked prompt, empty candidate)."""


class GeminiClient:
    """Gemini ``generateContent`` over the public REST API (no SDK dependency)."""

    API_BASE = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, *, model: str = DEFAULT_MODEL, timeout_s: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s

    @classmethod
    def from_env(cls) -> Optional["GeminiClient"]:
        api_key = os.getenv("GEMINI_API_KEY", "").strip()
        if not api_key:
            return None
        model = os.getenv("CURALINK_GEMINI_MODEL", "").strip() or DEFAULT_MODEL
        return cls(api_key=api_key, model=model)

    def generate(self, prompt: str, *, max_output_tokens: int = 500, temperature: float = 0.7) -> str:
        url = f"{self.API_BASE}/models/{self.model}:generateContent"
        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": int(max_output_tokens),
                "temperature": float(temperature),
            },
        }
        try:
            resp = requests.post(
                url,
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.HTTPError as exc:
            detail = exc.response.text[:200] if exc.response is not None else ""
            raise GeminiError(f"gemini http error: {exc} {detail}".strip()) from exc
        except (requests.RequestException, ValueError) as exc:
            raise GeminiError(f"gemini request failed: {exc}") from exc

        return self._extract_text(payload)

    @staticmethod
    def _extract_text(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise GeminiError("gemini response is not an object")
        candidates = payload.get("candidates") or []
        if not candidates:
            reason = (payload.get("promptFeedback") or {}).get("blockReason")
            raise GeminiError(f"gemini returned no candidates (blockReason={reason})")
        parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        text = "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))
        if not text.strip():
            raise GeminiError("gemini returned an empty candidate")
        return text
