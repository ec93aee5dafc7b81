"""
Generative "AI recruiter" assessment.

Prompts a chat model to grade the résumé like a senior recruiter and
validates the JSON it returns. A reply that fails any check is treated as a
failed call; no partial assessment is ever returned.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .errors import MalformedResponseError
from .scoring import EngineKind

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 4000
MAX_JOB_DESCRIPTION_CHARS = 3000

VERDICTS: Tuple[str, ...] = ("Strong Match", "Moderate Match", "Weak Match", "Not a Fit")

SYSTEM_PROMPT = """You are a senior technical recruiter at a Fortune 500 company.
You will evaluate a resume against a job description and return ONLY a raw JSON object - no markdown, no code fences, no preamble.

The JSON must have exactly these keys:
{
  "Score": integer,     // 0-100 reflecting overall fit
  "Verdict": string,    // One of: "Strong Match" | "Moderate Match" | "Weak Match" | "Not a Fit"
  "Feedback": string,   // 2-3 sentences of holistic assessment
  "Pros": [string],     // 3-5 specific strengths with brief explanations
  "Cons": [string]      // 3-5 specific gaps or weaknesses with brief explanations
}

Evaluate with ruthless, real-world recruiter objectivity. Focus on:
- Quantified impact and metrics (numbers, percentages, scale)
- Technology stack alignment
- Seniority and scope match
- Communication clarity and professionalism"""

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class RecruiterAssessment:
    """Validated verdict from the generative recruiter."""

    score: int
    verdict: str
    feedback: str
    pros: Tuple[str, ...]
    cons: Tuple[str, ...]

    kind = EngineKind.AI_RECRUITER

    def as_dict(self) -> Dict[str, Any]:
        return {
            "Score": self.score,
            "Verdict": self.verdict,
            "Feedback": self.feedback,
            "Pros": list(self.pros),
            "Cons": list(self.cons),
        }


def build_user_prompt(resume_text: str, job_description_text: str) -> str:
    return (
        "\nRESUME:\n---\n"
        f"{resume_text[:MAX_RESUME_CHARS]}\n"
        "---\n\nJOB DESCRIPTION:\n---\n"
        f"{job_description_text[:MAX_JOB_DESCRIPTION_CHARS]}\n"
        "---\n\nReturn ONLY the JSON object. No other text."
    )


def _malformed(message: str) -> MalformedResponseError:
    return MalformedResponseError(EngineKind.AI_RECRUITER, message)


def extract_json_payload(raw: str | None) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply, tolerating Markdown fences."""

    if not raw or not raw.strip():
        raise _malformed("Model returned an empty response.")

    text = raw.strip()
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        text = fenced.group(1).strip()

    candidates = [text]
    embedded = _JSON_OBJECT.search(text)
    if embedded and embedded.group(0) != text:
        candidates.append(embedded.group(0))

    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
        raise _malformed("Model returned JSON that is not an object.")

    raise _malformed("Model returned malformed JSON.")


def _string_list(payload: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = payload.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _malformed(f"'{key}' must be an array of strings.")
    return tuple(value)


def validate_payload(payload: Dict[str, Any]) -> RecruiterAssessment:
    """Check every field of the model's reply and build the assessment."""

    score = payload.get("Score")
    if isinstance(score, float) and score.is_integer():
        score = int(score)
    if isinstance(score, bool) or not isinstance(score, int):
        raise _malformed(f"'Score' must be an integer, got {score!r}.")
    if not 0 <= score <= 100:
        raise _malformed(f"'Score' must be between 0 and 100, got {score}.")

    verdict = payload.get("Verdict")
    if verdict not in VERDICTS:
        raise _malformed(f"'Verdict' must be one of {', '.join(VERDICTS)}, got {verdict!r}.")

    feedback = payload.get("Feedback")
    if not isinstance(feedback, str) or not feedback.strip():
        raise _malformed("'Feedback' must be a non-empty string.")

    return RecruiterAssessment(
        score=score,
        verdict=verdict,
        feedback=feedback.strip(),
        pros=_string_list(payload, "Pros"),
        cons=_string_list(payload, "Cons"),
    )


def run_ai_recruiter(
    resume_text: str,
    job_description_text: str,
    *,
    client: Any,
    model: str,
) -> RecruiterAssessment:
    """Ask the chat model for an assessment and validate the reply.

    Raises
    ------
    MalformedResponseError
        If the reply is not a JSON object with every field valid.
    """

    response = client.chat.completions.create(
        model=model,
        temperature=0,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(resume_text, job_description_text)},
        ],
    )
    if not response.choices:
        raise _malformed("Model returned no choices.")
    raw = response.choices[0].message.content

    assessment = validate_payload(extract_json_payload(raw))
    logger.info("AI recruiter verdict %r with score %d", assessment.verdict, assessment.score)
    return assessment
