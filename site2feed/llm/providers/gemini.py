"""Google Gemini provider for structured feed extraction."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...errors import ConfigError, ExtractionError
from ...logging_utils import log_event, redact_text, truncate_text
from ..prompts import build_extraction_prompt
from .base import ExtractionProvider
from .openai_compatible import _upstream_message

logger = logging.getLogger(__name__)


class GeminiProvider(ExtractionProvider):
    """Gemini-backed provider using the generateContent endpoint."""

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigError("Missing Google API key")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self._transport = transport

    async def extract(self, url: str, content: str) -> str:
        prompt = build_extraction_prompt(url, content)
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_tokens,
                "responseMimeType": "application/json",
            },
        }
        data = await self._post(payload)
        text = _extract_text(data)
        log_event(
            logger,
            "LLM response",
            logging.DEBUG,
            event="llm_response",
            provider="gemini",
            model=self.cfg.model,
            url=url,
            raw_response=truncate_text(redact_text(text, self.log_cfg.llm_log_redaction)),
        )
        return text

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        endpoint = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self._transport,
            ) as client:
                resp = await client.post(endpoint, params=params, json=payload)
        except httpx.HTTPError as exc:
            raise ExtractionError(f"{type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise ExtractionError(_upstream_message(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ExtractionError(f"Invalid JSON from endpoint: {resp.text[:100]}") from exc


def _extract_text(data: dict[str, Any]) -> str:
    """Join the answer parts, skipping thought parts unless nothing else exists."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    answer = [part.get("text", "") for part in parts if not part.get("thought")]
    if any(answer):
        return "".join(answer)
    return "".join(part.get("text", "") for part in parts)
