"""Embedding based similarity between a résumé and a job description."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Protocol, Sequence

import numpy as np

from .config import Settings, build_openai_client
from .errors import EmbeddingDimensionError, EngineError, EngineNotConfiguredError
from .scoring import EngineKind, round_score

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 4096

# Similarities below this floor are treated as unrelated text.
SIMILARITY_FLOOR = 0.3
SCORE_EXPONENT = 0.75

INTERPRETATION_BANDS = (
    (80.0, "Excellent contextual alignment"),
    (65.0, "Strong contextual alignment"),
    (50.0, "Moderate contextual alignment"),
    (35.0, "Weak contextual alignment"),
)
LOWEST_INTERPRETATION = "Poor contextual alignment"


class EmbeddingBackend(Protocol):
    """Anything able to turn a batch of texts into equally sized vectors."""

    def embed(self, texts: Sequence[str]) -> List[np.ndarray]:
        ...


@dataclass(frozen=True)
class SemanticEngineResult:
    """Outcome of the embedding engine for one résumé."""

    score: float
    raw_similarity: float
    interpretation: str

    kind = EngineKind.SEMANTIC

    def as_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "rawSimilarity": self.raw_similarity,
            "interpretation": self.interpretation,
        }


class OpenAIEmbeddingBackend:
    """Embed texts through the OpenAI embeddings endpoint."""

    def __init__(self, client: Any, model: str) -> None:
        self._client = client
        self._model = model

    def embed(self, texts: Sequence[str]) -> List[np.ndarray]:
        response = self._client.embeddings.create(model=self._model, input=list(texts))
        ordered = sorted(response.data, key=lambda item: item.index)
        return [np.asarray(item.embedding, dtype=float) for item in ordered]


@lru_cache(maxsize=2)
def _load_sentence_model(model_name: str, device: str | None = None) -> Any:
    """Load a sentence-transformers model once per process."""

    try:
        from sentence_transformers import SentenceTransformer  # type: ignore
    except ImportError as exc:  # pragma: no cover - requires optional dependency
        raise EngineNotConfiguredError(
            EngineKind.SEMANTIC,
            "The local embedding backend requires the 'sentence-transformers' package. "
            "Install it with 'pip install ats-benchmarker[local]'.",
        ) from exc

    return SentenceTransformer(model_name, device=device)


class SentenceTransformerBackend:
    """Embed texts offline with a sentence-transformers model."""

    def __init__(self, model_name: str, device: str | None = None) -> None:
        self._model_name = model_name
        self._device = device

    def embed(self, texts: Sequence[str]) -> List[np.ndarray]:
        model = _load_sentence_model(self._model_name, self._device)
        vectors = model.encode(list(texts), convert_to_numpy=True)
        return [np.asarray(vector, dtype=float) for vector in vectors]


def build_embedding_backend(settings: Settings) -> EmbeddingBackend:
    """Pick the embedding backend named by ``settings``."""

    if settings.embedding_backend == "local":
        return SentenceTransformerBackend(
            settings.local_embedding_model, settings.local_embedding_device
        )

    client = build_openai_client(settings)
    if client is None:
        raise EngineNotConfiguredError(
            EngineKind.SEMANTIC, "Semantic engine not configured. Missing OPENAI_API_KEY."
        )
    return OpenAIEmbeddingBackend(client, settings.embedding_model)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; ``0.0`` if either is all zeros."""

    a = np.asarray(vec_a, dtype=float).ravel()
    b = np.asarray(vec_b, dtype=float).ravel()
    if a.shape != b.shape:
        raise EmbeddingDimensionError(a.size, b.size)

    denominator = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(a, b) / denominator)


def similarity_to_score(similarity: float) -> float:
    """Stretch a cosine similarity onto a 0-100 score.

    Embeddings of any two English documents rarely fall below ~0.3, so that
    floor maps to zero and the remaining range is spread with a mild concave
    curve.
    """

    clamped = min(1.0, max(0.0, similarity))
    stretched = max(0.0, (clamped - SIMILARITY_FLOOR) / (1.0 - SIMILARITY_FLOOR))
    return round_score(stretched ** SCORE_EXPONENT * 100)


def interpret_score(score: float) -> str:
    for threshold, label in INTERPRETATION_BANDS:
        if score >= threshold:
            return label
    return LOWEST_INTERPRETATION


def run_semantic_engine(
    resume_text: str,
    job_description_text: str,
    *,
    backend: EmbeddingBackend,
) -> SemanticEngineResult:
    """Embed both texts and score their similarity.

    Parameters
    ----------
    resume_text, job_description_text:
        Raw texts; each is truncated to :data:`MAX_INPUT_CHARS` characters.
    backend:
        Embedding provider. Tests inject lightweight stubs here.
    """

    texts = [resume_text[:MAX_INPUT_CHARS], job_description_text[:MAX_INPUT_CHARS]]
    embeddings = backend.embed(texts)
    if len(embeddings) < 2:
        raise EngineError(
            EngineKind.SEMANTIC,
            f"Embedding service returned {len(embeddings)} vectors, expected 2.",
        )

    raw_similarity = cosine_similarity(embeddings[0], embeddings[1])
    score = similarity_to_score(raw_similarity)
    logger.info("Semantic engine similarity %.4f, score %.1f", raw_similarity, score)
    return SemanticEngineResult(
        score=score,
        raw_similarity=round(raw_similarity, 4),
        interpretation=interpret_score(score),
    )
