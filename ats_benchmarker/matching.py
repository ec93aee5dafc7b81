"""Deterministic keyword matching between a résumé and a job description."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Pattern, Tuple

from . import preprocessing
from .scoring import EngineKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordMatch:
    """Partition of job description keywords into those found and not found."""

    matched: Tuple[str, ...]
    missing: Tuple[str, ...]
    match_rate: float

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing)


@dataclass(frozen=True)
class KeywordEngineResult:
    """Outcome of the keyword ("legacy ATS") engine for one résumé."""

    score: float
    matched_keywords: Tuple[str, ...]
    missing_keywords: Tuple[str, ...]
    total_jd_keywords: int
    match_rate: float

    kind = EngineKind.KEYWORD

    def as_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "matchedKeywords": list(self.matched_keywords),
            "missingKeywords": list(self.missing_keywords),
            "totalJDKeywords": self.total_jd_keywords,
            "matchRate": self.match_rate,
        }


@lru_cache(maxsize=2048)
def keyword_pattern(keyword: str) -> Pattern[str]:
    """Compile a pattern matching ``keyword`` only when not glued to alphanumerics.

    Lookarounds are used instead of ``\\b`` because keywords such as ``c++``
    or ``.net`` start or end with punctuation, where ``\\b`` either never
    fires or fires in the wrong place.
    """

    return re.compile(
        rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])", re.IGNORECASE | re.ASCII
    )


def match_keywords(keywords: Iterable[str], resume_text: str) -> KeywordMatch:
    """Check which job description keywords occur in the résumé.

    Parameters
    ----------
    keywords:
        Keywords in the order produced by :func:`preprocessing.extract_keywords`.
    resume_text:
        Raw résumé text. It is normalised here so compound phrases line up with
        the hyphenated keywords.
    """

    normalised_resume = preprocessing.normalise(resume_text)
    matched: list[str] = []
    missing: list[str] = []
    for keyword in keywords:
        if keyword_pattern(keyword).search(normalised_resume):
            matched.append(keyword)
        else:
            missing.append(keyword)

    total = len(matched) + len(missing)
    match_rate = len(matched) / total if total else 0.0
    return KeywordMatch(matched=tuple(matched), missing=tuple(missing), match_rate=match_rate)


def to_score(match_rate: float) -> float:
    """Map a match rate in ``[0, 1]`` linearly onto a 0-100 score."""

    # Scale straight to tenths; a separate *100 step drifts exact halves below .5.
    return math.floor(match_rate * 1000 + 0.5) / 10


def evaluate_keyword_match(resume_text: str, job_description_text: str) -> KeywordEngineResult:
    """Score a résumé by the share of job description keywords it contains.

    A job description that yields no keywords produces a zero score rather
    than an error.
    """

    jd_keywords = preprocessing.extract_keywords(job_description_text)
    if not jd_keywords:
        logger.info("Job description produced no keywords; returning a zero score")

    match = match_keywords(jd_keywords, resume_text)
    score = to_score(match.match_rate)
    logger.debug(
        "Keyword engine matched %d/%d keywords, score %.1f",
        len(match.matched),
        match.total,
        score,
    )
    return KeywordEngineResult(
        score=score,
        matched_keywords=match.matched,
        missing_keywords=match.missing,
        total_jd_keywords=match.total,
        match_rate=match.match_rate,
    )
