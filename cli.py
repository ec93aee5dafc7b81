"""Command line interface for the résumé benchmarker."""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Tuple

from ats_benchmarker import pipeline
from ats_benchmarker.config import load_settings
from ats_benchmarker.scoring import EngineKind

ENGINE_ALIASES = {
    "keyword": EngineKind.KEYWORD,
    "legacy": EngineKind.KEYWORD,
    "semantic": EngineKind.SEMANTIC,
    "ai": EngineKind.AI_RECRUITER,
    "ai_recruiter": EngineKind.AI_RECRUITER,
}
CSV_FIELDS = [
    "resume_id",
    "composite",
    "legacy",
    "semantic",
    "ai_recruiter",
    "verdict",
    "missing_keywords",
    "errors",
]


def _parse_engines(value: str) -> Tuple[EngineKind, ...]:
    names = [name.strip().lower() for name in value.split(",") if name.strip()]
    unknown = [name for name in names if name not in ENGINE_ALIASES]
    if unknown or not names:
        raise argparse.ArgumentTypeError(
            f"Unknown engine(s): {', '.join(unknown) or value!r}. "
            f"Choose from: keyword, semantic, ai."
        )
    return tuple(dict.fromkeys(ENGINE_ALIASES[name] for name in names))


def _parse_arguments(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Benchmark resumes against a job description using keyword matching, "
            "embedding similarity and an AI recruiter, combined 30/30/40."
        ),
    )
    parser.add_argument(
        "job_description",
        type=Path,
        help="Path to the job description (.txt, .md, .docx or .pdf).",
    )
    parser.add_argument(
        "resumes",
        type=Path,
        nargs="+",
        help="Resume files (.pdf or .txt) or directories containing them.",
    )
    parser.add_argument(
        "--engines",
        type=_parse_engines,
        default=pipeline.ALL_ENGINES,
        help="Comma separated engines to run: keyword, semantic, ai (default: all).",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help="Only return the top K resumes.",
    )
    parser.add_argument(
        "--min-score",
        type=float,
        default=0.0,
        help="Ignore resumes scoring below this threshold (0-100).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to save the results as JSON or CSV (based on extension).",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def _collect_resumes(paths: Iterable[Path]) -> dict[str, str]:
    resume_texts: dict[str, str] = {}
    for path in paths:
        if path.is_dir():
            resume_texts.update(pipeline.load_resume_texts_from_directory(path))
        else:
            resume_texts[path.stem] = pipeline.load_resume_text(path)
    return resume_texts


def _serialise_results(
    evaluations: List[Tuple[str, pipeline.Evaluation]], destination: Path
) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)

    if destination.suffix.lower() == ".json":
        payload = [
            {"resumeId": resume_id, **evaluation.as_dict()}
            for resume_id, evaluation in evaluations
        ]
        destination.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    elif destination.suffix.lower() == ".csv":
        with destination.open("w", encoding="utf-8", newline="") as csv_file:
            writer = csv.DictWriter(csv_file, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for row in pipeline.summarise_evaluations(evaluations):
                writer.writerow(row)
    else:
        raise ValueError("Unsupported output format. Use a .json or .csv file extension.")


def _describe(resume_id: str, evaluation: pipeline.Evaluation) -> str:
    parts = []
    if evaluation.composite is not None:
        parts.append(f"composite {evaluation.composite:.1f}")
    if evaluation.legacy is not None:
        parts.append(
            f"keyword {evaluation.legacy.score:.1f} "
            f"({len(evaluation.legacy.matched_keywords)}/{evaluation.legacy.total_jd_keywords})"
        )
    if evaluation.semantic is not None:
        parts.append(f"semantic {evaluation.semantic.score:.1f}")
    if evaluation.ai_recruiter is not None:
        parts.append(f"ai {evaluation.ai_recruiter.score} ({evaluation.ai_recruiter.verdict})")
    for failure in evaluation.failures:
        parts.append(f"[{failure.error}]")
    return f"{resume_id}: {', '.join(parts)}"


def main(argv: Iterable[str] | None = None) -> list[Tuple[str, pipeline.Evaluation]]:
    args = _parse_arguments(argv)
    settings = load_settings()
    _configure_logging(settings.log_level)

    job_description_text = pipeline.load_job_description(args.job_description)
    resume_texts = _collect_resumes(args.resumes)

    evaluations = pipeline.screen_resumes(
        job_description_text,
        resume_texts,
        engines=args.engines,
        top_k=args.top_k,
        min_score=args.min_score,
        settings=settings,
    )

    if args.output:
        _serialise_results(evaluations, args.output)

    for resume_id, evaluation in evaluations:
        print(_describe(resume_id, evaluation))

    return evaluations


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
