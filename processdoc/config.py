"""Service configuration and environment loading for the document compiler."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / '.env.processdoc')


@dataclass(frozen=True)
class HttpConfig:
    """HTTP API settings."""

    host: str = '0.0.0.0'
    port: int = 9002
    api_token: str = ''


@dataclass(frozen=True)
class LLMConfig:
    """OpenRouter chat-completions settings for narrative generation."""

    api_key: str = ''
    base_url: str = 'https://openrouter.ai/api/v1'
    model: str = 'anthropic/claude-3.5-sonnet'
    timeout: float = 60.0
    max_attempts: int = 3


@dataclass(frozen=True)
class AppConfig:
    """Root configuration assembled from environment variables."""

    http: HttpConfig = field(default_factory=HttpConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    default_language: str = 'en'

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm.api_key)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Build configuration from environment variables."""
        return cls(
            http=HttpConfig(
                host=os.getenv('HTTP_HOST', '0.0.0.0'),
                port=_int_env('HTTP_PORT', 9002),
                api_token=os.getenv('API_TOKEN', ''),
            ),
            llm=LLMConfig(
                api_key=os.getenv('OPENROUTER_API_KEY', ''),
                base_url=os.getenv('OPENROUTER_BASE_URL', 'https://openrouter.ai/api/v1').rstrip('/'),
                model=os.getenv('LLM_MODEL', 'anthropic/claude-3.5-sonnet'),
                timeout=_float_env('LLM_TIMEOUT', 60.0),
                max_attempts=_int_env('LLM_MAX_ATTEMPTS', 3),
            ),
            default_language=os.getenv('DEFAULT_LANGUAGE', 'en').lower(),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, '')
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, '')
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
