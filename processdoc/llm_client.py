"""Async OpenRouter client for narrative document generation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import LLMConfig

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """The LLM call could not produce usable text."""


class LLMClient:
    """Minimal OpenAI-compatible chat-completions client."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, payload: dict[str, Any]) -> dict:
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            resp = await client.post(
                f"{self._config.base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            )
            resp.raise_for_status()
            return resp.json()

    async def generate_text(self, system: str, prompt: str) -> str:
        """Run one chat completion and return the assistant message text."""
        if not self._config.api_key:
            raise LLMError("OPENROUTER_API_KEY not configured")

        data = await self._request({
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        })

        choices = data.get("choices") or []
        content = ""
        if choices:
            content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            raise LLMError(f"Empty completion from model {self._config.model}")

        usage = data.get("usage") or {}
        logger.info(
            "LLM completion: model=%s, prompt_tokens=%s, completion_tokens=%s",
            self._config.model,
            usage.get("prompt_tokens", "?"),
            usage.get("completion_tokens", "?"),
        )
        return content


def is_transient(exc: Exception) -> bool:
    """Network trouble, timeouts, rate limits and server errors are retryable."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.TransportError)
