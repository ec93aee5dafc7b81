"""Score rounding, engine identities and the weighted composite."""
from __future__ import annotations

import enum
import math
from numbers import Real
from types import MappingProxyType
from typing import Mapping

SCORE_RANGE = (0.0, 100.0)


class EngineKind(str, enum.Enum):
    """The closed set of scoring engines that feed the composite."""

    KEYWORD = "legacy"
    SEMANTIC = "semantic"
    AI_RECRUITER = "ai_recruiter"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    EngineKind.KEYWORD: "Legacy engine",
    EngineKind.SEMANTIC: "Semantic engine",
    EngineKind.AI_RECRUITER: "AI Recruiter",
}

COMPOSITE_WEIGHTS: Mapping[EngineKind, float] = MappingProxyType(
    {
        EngineKind.KEYWORD: 0.3,
        EngineKind.SEMANTIC: 0.3,
        EngineKind.AI_RECRUITER: 0.4,
    }
)


def round_score(value: float) -> float:
    """Round to one decimal place, halves away from zero for positive values.

    ``round()`` uses banker's rounding, which would turn ``12.25`` into
    ``12.2``; scores round half up instead.
    """

    return math.floor(value * 10 + 0.5) / 10


def _check_score(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    low, high = SCORE_RANGE
    if math.isnan(value) or not low <= value <= high:
        raise ValueError(f"{name} must be within [{low:g}, {high:g}], got {value!r}")
    return float(value)


def composite_score(legacy_score: float, semantic_score: float, ai_score: float) -> float:
    """Combine the three engine scores into the headline number.

    Weights are fixed at 30/30/40, so inputs in ``[0, 100]`` always yield an
    output in ``[0, 100]``.
    """

    scores = {
        EngineKind.KEYWORD: _check_score("legacy_score", legacy_score),
        EngineKind.SEMANTIC: _check_score("semantic_score", semantic_score),
        EngineKind.AI_RECRUITER: _check_score("ai_score", ai_score),
    }
    weighted = sum(COMPOSITE_WEIGHTS[kind] * score for kind, score in scores.items())
    return min(SCORE_RANGE[1], max(SCORE_RANGE[0], round_score(weighted)))
