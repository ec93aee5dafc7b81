"""Résumé benchmarking against a job description with three scoring engines."""

from .matching import KeywordEngineResult, evaluate_keyword_match
from .pipeline import Evaluation, evaluate, screen_resumes, summarise_evaluations
from .scoring import EngineKind, composite_score

__all__ = [
    "EngineKind",
    "Evaluation",
    "KeywordEngineResult",
    "composite_score",
    "evaluate",
    "evaluate_keyword_match",
    "screen_resumes",
    "summarise_evaluations",
]
