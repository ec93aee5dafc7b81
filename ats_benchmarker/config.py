"""Runtime configuration read from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass

from openai import OpenAI

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_LOCAL_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_RECRUITER_MODEL = "gpt-4o-mini"
EMBEDDING_BACKENDS = ("openai", "local")


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, *, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, *, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Credentials, model names and network policy for the remote engines."""

    openai_api_key: str | None = None
    embedding_backend: str = "openai"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    local_embedding_model: str = DEFAULT_LOCAL_EMBEDDING_MODEL
    local_embedding_device: str | None = None
    recruiter_model: str = DEFAULT_RECRUITER_MODEL
    request_timeout: float = 30.0
    max_retries: int = 2
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build :class:`Settings` from the current environment."""

    backend = (_env_str("ATS_EMBEDDING_BACKEND", "openai") or "openai").lower()
    if backend not in EMBEDDING_BACKENDS:
        raise ValueError(
            f"ATS_EMBEDDING_BACKEND must be one of {', '.join(EMBEDDING_BACKENDS)}, got {backend!r}"
        )

    return Settings(
        openai_api_key=_env_str("OPENAI_API_KEY"),
        embedding_backend=backend,
        embedding_model=_env_str("ATS_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
        local_embedding_model=_env_str(
            "ATS_LOCAL_EMBEDDING_MODEL", DEFAULT_LOCAL_EMBEDDING_MODEL
        ),
        local_embedding_device=_env_str("ATS_LOCAL_EMBEDDING_DEVICE"),
        recruiter_model=_env_str("ATS_RECRUITER_MODEL", DEFAULT_RECRUITER_MODEL),
        request_timeout=_env_float("ATS_REQUEST_TIMEOUT", default=30.0),
        max_retries=max(0, _env_int("ATS_MAX_RETRIES", default=2)),
        log_level=(_env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def build_openai_client(settings: Settings) -> OpenAI | None:
    """Create an OpenAI client carrying the configured timeout and retry policy.

    Returns ``None`` when no API key is configured so callers can report the
    engine as unconfigured instead of failing on the first request.
    """

    if not settings.openai_api_key:
        return None

    return OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )
