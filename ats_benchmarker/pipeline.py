"""High level orchestration helpers for the résumé benchmarking workflow."""
from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .config import Settings, build_openai_client, load_settings
from .errors import EngineFailure, EngineNotConfiguredError, InputValidationError, describe_failure
from .matching import KeywordEngineResult, evaluate_keyword_match
from .pdf_extractor import batch_extract_text, extract_text_from_bytes, extract_text_from_pdf
from .recruiter import RecruiterAssessment, run_ai_recruiter
from .scoring import EngineKind, composite_score
from .semantic import EmbeddingBackend, SemanticEngineResult, build_embedding_backend, run_semantic_engine

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50
ALL_ENGINES: Tuple[EngineKind, ...] = tuple(EngineKind)
JOB_DESCRIPTION_SUFFIXES = (".txt", ".md", ".docx", ".pdf")
RESUME_SUFFIXES = (".pdf", ".txt")


class JobDescriptionExtractionError(RuntimeError):
    """Raised when the job description file cannot be processed."""


@dataclass(frozen=True)
class Evaluation:
    """Scores from every engine that ran for one résumé, plus the composite."""

    job_description: str
    legacy: KeywordEngineResult | None = None
    semantic: SemanticEngineResult | None = None
    ai_recruiter: RecruiterAssessment | None = None
    failures: Tuple[EngineFailure, ...] = field(default_factory=tuple)
    composite: float | None = None

    @property
    def ranking_score(self) -> float:
        """Composite when available, otherwise the keyword score."""

        if self.composite is not None:
            return self.composite
        if self.legacy is not None:
            return self.legacy.score
        return 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "jobDescription": self.job_description,
            "legacy": self.legacy.as_dict() if self.legacy else None,
            "semantic": self.semantic.as_dict() if self.semantic else None,
            "aiRecruiter": self.ai_recruiter.as_dict() if self.ai_recruiter else None,
            "compositeScore": self.composite,
            "errors": [failure.as_dict() for failure in self.failures],
        }

    def to_record(self) -> Dict[str, Any]:
        """Flatten the evaluation into the column layout of the evaluations table."""

        legacy, semantic, ai = self.legacy, self.semantic, self.ai_recruiter
        return {
            "job_description": self.job_description,
            "legacy_score": legacy.score if legacy else None,
            "legacy_matched": list(legacy.matched_keywords) if legacy else None,
            "legacy_missing": list(legacy.missing_keywords) if legacy else None,
            "legacy_details": legacy.as_dict() if legacy else None,
            "semantic_score": semantic.score if semantic else None,
            "semantic_details": semantic.as_dict() if semantic else None,
            "ai_score": ai.score if ai else None,
            "ai_verdict": ai.verdict if ai else None,
            "ai_feedback": ai.feedback if ai else None,
            "ai_pros": list(ai.pros) if ai else None,
            "ai_cons": list(ai.cons) if ai else None,
            "ai_details": ai.as_dict() if ai else None,
            "composite_score": self.composite,
        }


def validate_inputs(resume_text: str, job_description_text: str) -> Tuple[str, str]:
    """Strip both texts and make sure each is long enough to score."""

    fields = {"resumeText": resume_text, "jobDescription": job_description_text}
    stripped: Dict[str, str] = {}
    for name, value in fields.items():
        if not isinstance(value, str) or len(value.strip()) < MIN_TEXT_LENGTH:
            raise InputValidationError(f"{name} must be at least {MIN_TEXT_LENGTH} characters.")
        stripped[name] = value.strip()
    return stripped["resumeText"], stripped["jobDescription"]


def load_job_description(path: Path | str) -> str:
    """Load a job description from a text, Word or PDF file."""

    job_path = Path(path)
    if not job_path.exists():
        raise FileNotFoundError(f"Job description file not found: {job_path}")

    suffix = job_path.suffix.lower()
    if suffix in {".txt", ".md"}:
        try:
            return job_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise JobDescriptionExtractionError(
                f"Could not decode {job_path}. Please ensure it is UTF-8 encoded."
            ) from exc

    if suffix == ".docx":
        from docx import Document

        document = Document(str(job_path))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    if suffix == ".pdf":
        return extract_text_from_pdf(job_path)

    raise JobDescriptionExtractionError(
        f"Unsupported job description format '{suffix}'. "
        f"Use one of: {', '.join(JOB_DESCRIPTION_SUFFIXES)}."
    )


def load_resume_text(path: Path | str) -> str:
    """Read a résumé from a PDF or plain text file."""

    resume_path = Path(path)
    if not resume_path.exists():
        raise FileNotFoundError(f"Resume file not found: {resume_path}")
    if resume_path.suffix.lower() == ".pdf":
        return extract_text_from_bytes(resume_path.read_bytes(), name=resume_path.name).text
    if resume_path.suffix.lower() == ".txt":
        return resume_path.read_text(encoding="utf-8")
    raise ValueError(f"Unsupported resume format: {resume_path.suffix or resume_path.name}")


def load_resume_texts_from_directory(directory: Path | str) -> Dict[str, str]:
    """Read all PDF and text résumés in a directory."""

    dir_path = Path(directory)
    if not dir_path.exists():
        raise FileNotFoundError(f"Resume directory not found: {dir_path}")

    resume_files = sorted(
        path for path in dir_path.iterdir() if path.suffix.lower() in RESUME_SUFFIXES
    )
    if not resume_files:
        raise FileNotFoundError(f"No PDF or text files were found in resume directory: {dir_path}")

    documents = batch_extract_text(path for path in resume_files if path.suffix.lower() == ".pdf")
    stems = Counter(path.stem for path in resume_files)
    resume_texts: Dict[str, str] = {}
    for path in resume_files:
        # foo.pdf and foo.txt side by side are both kept under their full names.
        resume_id = path.stem if stems[path.stem] == 1 else path.name
        if resume_id != path.stem:
            logger.warning("Several resumes named %s; using %s as its id", path.stem, resume_id)
        if path.suffix.lower() == ".pdf":
            resume_texts[resume_id] = documents[path.stem].text
        else:
            resume_texts[resume_id] = load_resume_text(path)
    return resume_texts


def _run_engine(
    kind: EngineKind,
    resume_text: str,
    job_description_text: str,
    settings: Settings,
    embedding_backend: EmbeddingBackend | None,
    recruiter_client: Any,
):
    if kind is EngineKind.KEYWORD:
        return evaluate_keyword_match(resume_text, job_description_text)

    if kind is EngineKind.SEMANTIC:
        backend = embedding_backend or build_embedding_backend(settings)
        return run_semantic_engine(resume_text, job_description_text, backend=backend)

    client = recruiter_client or build_openai_client(settings)
    if client is None:
        raise EngineNotConfiguredError(
            EngineKind.AI_RECRUITER, "AI Recruiter not configured. Missing OPENAI_API_KEY."
        )
    return run_ai_recruiter(
        resume_text, job_description_text, client=client, model=settings.recruiter_model
    )


def evaluate(
    resume_text: str,
    job_description_text: str,
    *,
    engines: Sequence[EngineKind] = ALL_ENGINES,
    settings: Settings | None = None,
    embedding_backend: EmbeddingBackend | None = None,
    recruiter_client: Any = None,
) -> Evaluation:
    """Run the selected engines concurrently and combine their scores.

    Parameters
    ----------
    resume_text, job_description_text:
        Raw texts; both must be at least :data:`MIN_TEXT_LENGTH` characters
        once stripped.
    engines:
        Engines to run. The composite is only computed when all three succeed.
    settings:
        Configuration for the remote engines. Defaults to :func:`load_settings`.
    embedding_backend, recruiter_client:
        Optional pre-built collaborators, primarily useful for injecting stubs
        in tests.

    Raises
    ------
    InputValidationError
        If either text is shorter than the minimum length.
    """

    resume_text, job_description_text = validate_inputs(resume_text, job_description_text)
    settings = settings or load_settings()
    selected = list(dict.fromkeys(engines))
    if not selected:
        raise ValueError("At least one engine must be selected.")

    results: Dict[EngineKind, Any] = {}
    failures: List[EngineFailure] = []
    with ThreadPoolExecutor(max_workers=len(selected), thread_name_prefix="ats-engine") as executor:
        futures = {
            kind: executor.submit(
                _run_engine,
                kind,
                resume_text,
                job_description_text,
                settings,
                embedding_backend,
                recruiter_client,
            )
            for kind in selected
        }
        for kind, future in futures.items():
            try:
                results[kind] = future.result()
            except Exception as exc:
                logger.exception("%s failed", kind.label)
                failures.append(describe_failure(kind, exc))

    composite = None
    if all(kind in results for kind in ALL_ENGINES):
        composite = composite_score(
            results[EngineKind.KEYWORD].score,
            results[EngineKind.SEMANTIC].score,
            results[EngineKind.AI_RECRUITER].score,
        )
        logger.info("Composite score %.1f", composite)

    return Evaluation(
        job_description=job_description_text,
        legacy=results.get(EngineKind.KEYWORD),
        semantic=results.get(EngineKind.SEMANTIC),
        ai_recruiter=results.get(EngineKind.AI_RECRUITER),
        failures=tuple(failures),
        composite=composite,
    )


def screen_resumes(
    job_description_text: str,
    resume_text_by_id: Dict[str, str],
    *,
    engines: Sequence[EngineKind] = ALL_ENGINES,
    top_k: int | None = None,
    min_score: float = 0.0,
    settings: Settings | None = None,
    embedding_backend: EmbeddingBackend | None = None,
    recruiter_client: Any = None,
) -> List[Tuple[str, Evaluation]]:
    """Evaluate several résumés against one job description, best first.

    Résumés too short to score are skipped with a warning.
    """

    settings = settings or load_settings()
    ranked: List[Tuple[str, Evaluation]] = []
    for resume_id, resume_text in resume_text_by_id.items():
        try:
            evaluation = evaluate(
                resume_text,
                job_description_text,
                engines=engines,
                settings=settings,
                embedding_backend=embedding_backend,
                recruiter_client=recruiter_client,
            )
        except InputValidationError as exc:
            logger.warning("Skipping resume %s: %s", resume_id, exc)
            continue
        if evaluation.ranking_score < min_score:
            continue
        ranked.append((resume_id, evaluation))

    ranked.sort(key=lambda item: item[1].ranking_score, reverse=True)
    if top_k is not None:
        ranked = ranked[:top_k]
    return ranked


def _format_score(score: float | None) -> str:
    return "" if score is None else f"{score:.1f}"


def summarise_evaluations(
    evaluations: Iterable[Tuple[str, Evaluation]],
) -> List[dict[str, str]]:
    """Convert ranked evaluations into flat, serialisable rows."""

    summary: List[dict[str, str]] = []
    for resume_id, evaluation in evaluations:
        legacy, semantic, ai = evaluation.legacy, evaluation.semantic, evaluation.ai_recruiter
        summary.append(
            {
                "resume_id": resume_id,
                "composite": _format_score(evaluation.composite),
                "legacy": _format_score(legacy.score if legacy else None),
                "semantic": _format_score(semantic.score if semantic else None),
                "ai_recruiter": _format_score(ai.score if ai else None),
                "verdict": ai.verdict if ai else "",
                "missing_keywords": ", ".join(legacy.missing_keywords) if legacy else "",
                "errors": "; ".join(failure.error for failure in evaluation.failures),
            }
        )
    return summary
