from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)


class LLMNotConfiguredError(Exception):
    """Raised when an LLM client is enabled but missing configuration."""


@dataclass
class LLMConfig:
    provider: str = "gemini"
    model: str = "gemini-1.5-flash"
    api_key: str | None = None
    timeout: float = 15.0


class LLMClient:
    """Provider-agnostic interface for text generation returning JSON."""

    def generate_json(self, prompt: str, system: str | None = None) -> Any | None:
        raise NotImplementedError


class GeminiClient(LLMClient):
    """Gemini REST client; asks for ``application/json`` output."""

    endpoint = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key={key}"

    def __init__(self, cfg: LLMConfig):
        if not cfg.api_key:
            msg = "GEMINI_API_KEY missing"
            raise LLMNotConfiguredError(msg)
        self.cfg = cfg

    def _payload(self, prompt: str, system: str | None) -> bytes:
        contents: list[dict[str, Any]] = []
        if system:
            contents.append({"role": "user", "parts": [{"text": system}]})
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        return json.dumps(
            {
                "contents": contents,
                "generationConfig": {
                    "temperature": 0.4,
                    "responseMimeType": "application/json",
                },
            }
        ).encode("utf-8")

    def generate_json(self, prompt: str, system: str | None = None) -> Any | None:
        req = urllib.request.Request(  # noqa: S310 - external URL by config
            self.endpoint.format(model=self.cfg.model, key=self.cfg.api_key),
            data=self._payload(prompt, system),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.cfg.timeout) as resp:  # noqa: S310 - external URL by config
                obj = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:  # pragma: no cover - network
            logger.warning("Gemini HTTPError: %s", e.read().decode("utf-8", "ignore"))
            return None
        except Exception as e:  # noqa: BLE001 - catch-all for network/JSON
            logger.warning("Gemini request failed: %s", e)
            return None
        return self._extract(obj)

    @staticmethod
    def _extract(obj: Any) -> Any | None:
        """Pull the JSON document out of candidates -> content -> parts -> text."""
        if not isinstance(obj, dict):
            return None
        candidates = obj.get("candidates") or []
        if not candidates:
            return None
        parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        text = parts[0].get("text") if parts else None
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            logger.debug("Gemini returned non-JSON text")
            return None


def get_llm_client_from_settings() -> LLMClient | None:
    """Factory reading settings to return a configured LLM client.

    Returns None when disabled or misconfigured.
    """
    if not getattr(settings, "AUDIT_NARRATIVE_LLM_ENABLED", False):
        return None

    cfg = LLMConfig(
        provider=getattr(settings, "LLM_PROVIDER", "gemini"),
        model=getattr(settings, "LLM_MODEL", "gemini-1.5-flash"),
        api_key=getattr(settings, "GEMINI_API_KEY", None),
        timeout=float(getattr(settings, "LLM_TIMEOUT", 15)),
    )
    if cfg.provider == "gemini":
        try:
            return GeminiClient(cfg)
        except LLMNotConfiguredError:
            logger.info("LLM enabled but GEMINI_API_KEY missing; skipping LLM")
            return None
    logger.info("LLM provider '%s' not supported; skipping LLM", cfg.provider)
    return None
