from __future__ import annotations

import csv
import json

import pytest

import cli
from ats_benchmarker.scoring import EngineKind

JOB_DESCRIPTION = (
    "Backend engineer with Python, Django, PostgreSQL, Kubernetes and Terraform. "
    "Experience with machine learning is a plus."
)
RESUMES = {
    "alice": "Python and Django developer running PostgreSQL on Kubernetes; machine learning hobbyist.",
    "bob": "Marketing specialist focused on social campaigns, copywriting and brand events.",
}


@pytest.fixture
def workspace(tmp_path, monkeypatch, clean_env):
    monkeypatch.setattr(cli, "_configure_logging", lambda level: None)
    job_path = tmp_path / "job.txt"
    job_path.write_text(JOB_DESCRIPTION, encoding="utf-8")
    resume_dir = tmp_path / "resumes"
    resume_dir.mkdir()
    for name, text in RESUMES.items():
        (resume_dir / f"{name}.txt").write_text(text, encoding="utf-8")
    return tmp_path, job_path, resume_dir


def test_cli_ranks_resumes_with_keyword_engine(workspace, capsys):
    _, job_path, resume_dir = workspace

    evaluations = cli.main([str(job_path), str(resume_dir), "--engines", "keyword"])

    assert [resume_id for resume_id, _ in evaluations] == ["alice", "bob"]
    output = capsys.readouterr().out.splitlines()
    assert output[0].startswith("alice: keyword ")
    assert output[1].startswith("bob: keyword 0.0")


def test_cli_writes_json(workspace):
    tmp_path, job_path, resume_dir = workspace
    destination = tmp_path / "out" / "results.json"

    cli.main([str(job_path), str(resume_dir / "alice.txt"), "--engines", "legacy", "--output", str(destination)])

    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert payload[0]["resumeId"] == "alice"
    assert payload[0]["legacy"]["totalJDKeywords"] > 0
    assert payload[0]["semantic"] is None
    assert payload[0]["compositeScore"] is None


def test_cli_writes_csv_and_reports_unconfigured_engines(workspace, capsys):
    tmp_path, job_path, resume_dir = workspace
    destination = tmp_path / "results.csv"

    cli.main([str(job_path), str(resume_dir), "--top-k", "1", "--output", str(destination)])

    with destination.open(encoding="utf-8", newline="") as csv_file:
        rows = list(csv.DictReader(csv_file))
    assert [row["resume_id"] for row in rows] == ["alice"]
    assert rows[0]["composite"] == ""
    assert "Semantic engine not configured." in rows[0]["errors"]
    assert "[AI Recruiter not configured.]" in capsys.readouterr().out


def test_cli_rejects_unknown_output_format(workspace):
    tmp_path, job_path, resume_dir = workspace

    with pytest.raises(ValueError):
        cli.main([str(job_path), str(resume_dir), "--engines", "keyword", "--output", str(tmp_path / "out.xml")])


def test_parse_engines():
    assert cli._parse_engines("keyword, ai") == (EngineKind.KEYWORD, EngineKind.AI_RECRUITER)
    assert cli._parse_engines("legacy,keyword") == (EngineKind.KEYWORD,)

    with pytest.raises(SystemExit):
        cli._parse_arguments(["job.txt", "resume.txt", "--engines", "cohere"])
