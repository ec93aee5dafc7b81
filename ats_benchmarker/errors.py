"""Exceptions raised by the scoring engines and their translation for callers."""
from __future__ import annotations

import re
from dataclasses import dataclass

import openai

from .scoring import EngineKind

# "rate" only counts as a whole word so "failed to generate" is not a quota error.
_RATE_LIMIT_PATTERN = re.compile(r"rate[ _-]?limit|\brate\b|\b429\b|exhausted", re.IGNORECASE)


class InputValidationError(ValueError):
    """Raised when a résumé or job description is too short to evaluate."""


class EngineError(RuntimeError):
    """Base class for failures inside a scoring engine."""

    def __init__(self, engine: EngineKind, message: str) -> None:
        super().__init__(message)
        self.engine = engine


class EngineNotConfiguredError(EngineError):
    """Raised when an engine is missing the credentials it needs."""


class RateLimitError(EngineError):
    """Raised when an upstream service rejects a call for exceeding its quota."""


class MalformedResponseError(EngineError):
    """Raised when a service reply cannot be parsed or fails validation."""


class EmbeddingDimensionError(EngineError, ValueError):
    """Raised when two embedding vectors do not share a dimensionality."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(
            EngineKind.SEMANTIC, f"Vector dimension mismatch: {left} vs {right}"
        )


@dataclass(frozen=True)
class EngineFailure:
    """User-facing description of an engine that did not produce a score."""

    engine: EngineKind
    error: str
    detail: str
    rate_limited: bool = False

    def as_dict(self) -> dict[str, str]:
        return {"engine": self.engine.value, "error": self.error, "detail": self.detail}


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return ``True`` when ``exc`` looks like an upstream quota rejection."""

    if isinstance(exc, (RateLimitError, openai.RateLimitError)):
        return True
    return bool(_RATE_LIMIT_PATTERN.search(str(exc)))


def describe_failure(engine: EngineKind, exc: BaseException) -> EngineFailure:
    """Translate an engine exception into a message separating rate limits."""

    rate_limited = is_rate_limit_error(exc)
    if rate_limited:
        error = f"{engine.label} rate limit reached."
    elif isinstance(exc, EngineNotConfiguredError):
        error = f"{engine.label} not configured."
    else:
        error = f"{engine.label} failed."
    return EngineFailure(
        engine=engine,
        error=error,
        detail=str(exc) or type(exc).__name__,
        rate_limited=rate_limited,
    )
