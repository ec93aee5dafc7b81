from __future__ import annotations

import pytest

from ats_benchmarker import matching


def test_java_does_not_match_inside_javascript():
    result = matching.match_keywords(["java"], "I love javascript and TypeScript")

    assert result.matched == ()
    assert result.missing == ("java",)


def test_java_matches_as_standalone_word():
    result = matching.match_keywords(["java"], "I love javascript and Java EE")

    assert result.matched == ("java",)
    assert result.match_rate == 1.0


@pytest.mark.parametrize(
    ("keyword", "resume_text", "expected"),
    [
        ("c++", "Skilled in C++, Python and Go", True),
        ("c++", "Languages: (C++) and Rust", True),
        ("c++", "Modern C++17 codebases", False),
        ("c#", "Backend in C#/.NET", True),
        ("c#", "Wrote abc# scripts", False),
        ("node.js", "Node.js, React and Express", True),
        ("node.js", "Built APIs with node.js.", True),
        ("node.js", "Used nodexjs once", False),
        ("node.js", "Moved to node.jsx templates", False),
        ("2021", "Graduated 2021.", True),
        ("2021", "Ticket 120215", False),
    ],
)
def test_boundary_matching_around_punctuation(keyword, resume_text, expected):
    result = matching.match_keywords([keyword], resume_text)

    assert (keyword in result.matched) is expected


def test_compound_keywords_match_normalised_resume_text():
    result = matching.match_keywords(
        ["machine-learning", "rest-api"], "Machine Learning engineer; built a REST API"
    )

    assert result.matched == ("machine-learning", "rest-api")


def test_match_preserves_keyword_order():
    keywords = ["kafka", "python", "airflow", "sql"]
    result = matching.match_keywords(keywords, "SQL and Python daily")

    assert result.matched == ("python", "sql")
    assert result.missing == ("kafka", "airflow")
    assert result.total == 4


def test_evaluate_keyword_match_rate_and_score():
    job_description = (
        "python django postgres docker kubernetes terraform graphql redis kafka airflow"
    )
    resume_text = (
        "Built services in Python and Django on Postgres, shipped with Docker, "
        "Kubernetes and Redis."
    )

    result = matching.evaluate_keyword_match(resume_text, job_description)

    assert result.total_jd_keywords == 10
    assert result.match_rate == pytest.approx(0.6)
    assert result.score == 60.0
    assert result.matched_keywords == (
        "python",
        "django",
        "postgres",
        "docker",
        "kubernetes",
        "redis",
    )
    assert result.missing_keywords == ("terraform", "graphql", "kafka", "airflow")


def test_evaluate_keyword_match_empty_job_description():
    result = matching.evaluate_keyword_match(
        "Seasoned Python developer with a decade of backend work.",
        "We are here and we will be there for you to use it",
    )

    assert result.score == 0
    assert result.match_rate == 0
    assert result.total_jd_keywords == 0
    assert result.matched_keywords == ()
    assert result.missing_keywords == ()


def test_evaluate_keyword_match_is_deterministic():
    job_description = "Go, Rust, C++ and node.js engineer building distributed systems in 2024"
    resume_text = "Rust and Go engineer; distributed systems since 2019; some C++"

    first = matching.evaluate_keyword_match(resume_text, job_description)
    second = matching.evaluate_keyword_match(resume_text, job_description)

    assert first == second
    assert first.as_dict() == second.as_dict()


def test_as_dict_uses_wire_keys():
    result = matching.evaluate_keyword_match("python sql", "python sql kafka")

    assert result.as_dict() == {
        "score": 66.7,
        "matchedKeywords": ["python", "sql"],
        "missingKeywords": ["kafka"],
        "totalJDKeywords": 3,
        "matchRate": pytest.approx(2 / 3),
    }


@pytest.mark.parametrize(
    ("rate", "score"),
    [
        (0.0, 0.0),
        (1 / 3, 33.3),
        (0.125, 12.5),
        (0.6, 60.0),
        (23 / 80, 28.8),
        (41 / 80, 51.3),
        (51 / 80, 63.8),
        (1.0, 100.0),
    ],
)
def test_to_score_is_linear_with_one_decimal(rate, score):
    assert matching.to_score(rate) == score


def test_keyword_engine_tolerates_adversarial_text():
    result = matching.evaluate_keyword_match(
        "((( [[ \\ ^$ *** ??? 🚀🚀 ))) python",
        "python (((( ^^^ $$$ ***??? c++ [regex] \\d+",
    )

    assert "python" in result.matched_keywords
    assert 0.0 <= result.score <= 100.0


def test_boundaries_only_treat_ascii_letters_as_word_characters():
    # U+017F (long s) case-folds to "s" but is not an ASCII letter.
    result = matching.match_keywords(["sql", "python"], "ſsql and pythonſ")

    assert result.matched == ("sql", "python")


def test_keyword_engine_handles_very_long_numbers():
    result = matching.evaluate_keyword_match("python " + "1" * 4400, "python engineer " + "9" * 5000)

    assert result.matched_keywords == ("python",)
    assert result.missing_keywords == ("engineer",)
