"""
Pytest configuration and shared fixtures.
"""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Callable, List, Sequence

import numpy as np
import pytest

from ats_benchmarker import preprocessing

SAMPLE_JOB_DESCRIPTION = """
Senior Backend Engineer

We are looking for an engineer with Python, Django and PostgreSQL.
You will design REST API services, run them on Kubernetes and Docker,
and build machine learning features with the data team. Terraform is a plus.
"""

SAMPLE_RESUME = """
Jane Doe - Backend Engineer

Built Python and Django services backed by PostgreSQL for 6 years.
Designed a public REST API, deployed on Kubernetes with Docker.
Shipped machine learning ranking features in 2021.
"""


def hashed_embedding(text: str, size: int = 16) -> np.ndarray:
    """Deterministic bag-of-words vector for tests; no model download needed."""

    vector = np.zeros(size, dtype=float)
    for token in preprocessing.tokenize(text):
        index = sum(ord(char) for char in token) % vector.size
        vector[index] += 1.0
    norm = np.linalg.norm(vector)
    if norm > 0.0:
        vector /= norm
    return vector


class FakeEmbeddingBackend:
    """Embedding backend returning hashed vectors and recording its inputs."""

    def __init__(self, embed_fn: Callable[[str], np.ndarray] = hashed_embedding) -> None:
        self._embed_fn = embed_fn
        self.calls: List[List[str]] = []

    def embed(self, texts: Sequence[str]) -> List[np.ndarray]:
        self.calls.append(list(texts))
        return [self._embed_fn(text) for text in texts]


class StubChatClient:
    """Mimics ``client.chat.completions.create`` from the OpenAI SDK."""

    def __init__(self, reply: Any = None, error: Exception | None = None) -> None:
        if reply is not None and not isinstance(reply, str):
            reply = json.dumps(reply)
        self.reply = reply
        self.error = error
        self.requests: List[dict] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def valid_assessment() -> dict:
    """A well-formed recruiter reply."""
    return {
        "Score": 72,
        "Verdict": "Moderate Match",
        "Feedback": "Solid backend profile with relevant stack exposure.",
        "Pros": ["Python and Django depth", "Kubernetes deployments"],
        "Cons": ["No Terraform experience"],
    }


@pytest.fixture
def fake_backend() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend()


@pytest.fixture
def backend_factory() -> Callable[..., FakeEmbeddingBackend]:
    return FakeEmbeddingBackend


@pytest.fixture
def stub_client(valid_assessment) -> StubChatClient:
    return StubChatClient(valid_assessment)


@pytest.fixture
def client_factory() -> Callable[..., StubChatClient]:
    return StubChatClient


@pytest.fixture
def sample_texts() -> tuple[str, str]:
    """(resume, job description) pair long enough to pass validation."""
    return SAMPLE_RESUME, SAMPLE_JOB_DESCRIPTION


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables so tests see the defaults."""
    for name in (
        "OPENAI_API_KEY",
        "ATS_EMBEDDING_BACKEND",
        "ATS_EMBEDDING_MODEL",
        "ATS_LOCAL_EMBEDDING_MODEL",
        "ATS_LOCAL_EMBEDDING_DEVICE",
        "ATS_RECRUITER_MODEL",
        "ATS_REQUEST_TIMEOUT",
        "ATS_MAX_RETRIES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _escape_pdf_text(line: str) -> str:
    return line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: Sequence[Sequence[str]]) -> bytes:
    """Assemble a minimal PDF with one Helvetica text block per page."""

    page_ids = [4 + 2 * index for index in range(len(pages))]
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        (
            "<< /Type /Pages /Kids [%s] /Count %d >>"
            % (" ".join(f"{page_id} 0 R" for page_id in page_ids), len(pages))
        ).encode("ascii"),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, lines in zip(page_ids, pages):
        body = "".join(f"({_escape_pdf_text(line)}) Tj T* " for line in lines)
        stream = f"BT /F1 12 Tf 14 TL 72 720 Td {body}ET".encode("ascii") if lines else b""
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode("ascii")
        )
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )

    output = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(output)
    output += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        output += b"%010d 00000 n \n" % offset
    output += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(output)


@pytest.fixture
def pdf_factory() -> Callable[[Sequence[Sequence[str]]], bytes]:
    return build_pdf
