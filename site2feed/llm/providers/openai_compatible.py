"""OpenAI-compatible chat completions provider (OpenRouter by default)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...errors import ConfigError, ExtractionError
from ...logging_utils import log_event, redact_text, truncate_text
from ..prompts import build_extraction_prompt
from .base import ExtractionProvider

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(ExtractionProvider):
    """Calls `{base_url}/chat/completions` asking for a JSON object response."""

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigError("Missing API Key. Please set OPENROUTER_API_KEY.")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self._transport = transport

    async def extract(self, url: str, content: str) -> str:
        prompt = build_extraction_prompt(url, content)
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "max_tokens": self.cfg.max_tokens,
            "temperature": self.cfg.temperature,
        }
        data = await self._post(payload)
        text = _extract_text(data)
        self._log_llm_response(url, text)
        return text

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        endpoint = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": self.cfg.app_title,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self._transport,
            ) as client:
                resp = await client.post(endpoint, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise ExtractionError(f"{type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise ExtractionError(_upstream_message(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ExtractionError(f"Invalid JSON from endpoint: {resp.text[:100]}") from exc

    def _log_llm_response(self, url: str, content: str) -> None:
        log_event(
            logger,
            "LLM response",
            logging.DEBUG,
            event="llm_response",
            provider="openai_compatible",
            model=self.cfg.model,
            url=url,
            raw_response=truncate_text(redact_text(content, self.log_cfg.llm_log_redaction)),
        )


def _extract_text(data: dict[str, Any]) -> str:
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def _upstream_message(resp: httpx.Response) -> str:
    """Prefer the provider's JSON error message, else a body excerpt."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:100] or resp.reason_phrase
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return resp.text[:100]
