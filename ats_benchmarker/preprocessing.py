"""Text normalisation and keyword extraction helpers."""
from __future__ import annotations

import re
from typing import Tuple

# Common English function words plus the filler that pads most job adverts.
STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "about", "above", "after", "again", "against", "all", "also", "am",
        "an", "and", "any", "are", "aren't", "as", "at", "be", "because", "been",
        "before", "being", "below", "between", "both", "but", "by", "can",
        "can't", "cannot", "could", "couldn't", "did", "didn't", "do", "does",
        "doesn't", "doing", "don't", "down", "during", "each", "few", "for",
        "from", "further", "get", "got", "had", "hadn't", "has", "hasn't",
        "have", "haven't", "having", "he", "he'd", "he'll", "he's", "her",
        "here", "here's", "hers", "herself", "him", "himself", "his", "how",
        "how's", "i", "i'd", "i'll", "i'm", "i've", "if", "in", "into", "is",
        "isn't", "it", "it's", "its", "itself", "let's", "me", "more", "most",
        "mustn't", "my", "myself", "no", "nor", "not", "of", "off", "on", "once",
        "only", "or", "other", "ought", "our", "ours", "ourselves", "out",
        "over", "own", "same", "shan't", "she", "she'd", "she'll", "she's",
        "should", "shouldn't", "so", "some", "such", "than", "that", "that's",
        "the", "their", "theirs", "them", "themselves", "then", "there",
        "there's", "these", "they", "they'd", "they'll", "they're", "they've",
        "this", "those", "through", "to", "too", "under", "until", "up", "very",
        "was", "wasn't", "we", "we'd", "we'll", "we're", "we've", "were",
        "weren't", "what", "what's", "when", "when's", "where", "where's",
        "which", "while", "who", "who's", "whom", "why", "why's", "will",
        "with", "won't", "would", "wouldn't", "you", "you'd", "you'll",
        "you're", "you've", "your", "yours", "yourself", "yourselves",
        # Domain filler
        "work", "working", "role", "team", "company", "business", "position",
        "job", "experience", "years", "ability", "strong", "excellent", "good",
        "great", "new", "responsible", "responsibilities", "including",
        "ensure", "across", "within", "make", "use", "using", "used", "help",
        "need", "well", "able", "must", "plus", "via", "etc", "per", "key",
        "day", "days", "time", "based", "looking", "require", "required",
    }
)

# Multi-word terms kept together as one hyphenated token. Order matters: each
# phrase is joined in turn, so an earlier entry wins over a later overlap.
COMPOUND_PHRASES: Tuple[str, ...] = (
    "machine learning",
    "artificial intelligence",
    "natural language processing",
    "data structures",
    "design patterns",
    "system design",
    "distributed systems",
    "continuous integration",
    "continuous deployment",
    "test driven development",
    "object oriented",
    "functional programming",
    "version control",
    "rest api",
    "graphql api",
    "grpc",
    "event driven",
    "micro services",
    "next.js",
    "react.js",
    "node.js",
    "vue.js",
    "angular.js",
    "aws lambda",
    "google cloud",
    "azure devops",
    "row level security",
    "full stack",
    "front end",
    "back end",
)

YEAR_RANGE = (1990, 2040)
MIN_KEYWORD_LENGTH = 2

_WHITESPACE_PATTERN = re.compile(r"\s+")
_NOISE_PATTERN = re.compile(r"[^a-z0-9\-+#.\s]")
_NUMERIC_PATTERN = re.compile(r"^[0-9]+$")

_JOINED_PHRASES: Tuple[Tuple[str, str], ...] = tuple(
    (phrase, _WHITESPACE_PATTERN.sub("-", phrase)) for phrase in COMPOUND_PHRASES
)


def normalise(text: str) -> str:
    """Lower-case the text and hyphen-join every known compound phrase.

    Punctuation is left untouched; the matcher runs against this output and
    relies on the original spacing around symbols such as ``+`` and ``.``.
    """

    lowered = text.lower()
    for phrase, joined in _JOINED_PHRASES:
        if phrase != joined:
            lowered = lowered.replace(phrase, joined)
    return lowered


def is_plausible_year(token: str) -> bool:
    """Return ``True`` for four digit numbers that look like calendar years."""

    if len(token) != 4:
        return False
    start, end = YEAR_RANGE
    return start <= int(token) <= end


def _is_keyword(token: str) -> bool:
    if len(token) < MIN_KEYWORD_LENGTH:
        return False
    if token in STOP_WORDS:
        return False
    if _NUMERIC_PATTERN.match(token) and not is_plausible_year(token):
        return False
    return True


def tokenize(text: str) -> list[str]:
    """Split normalised text into raw tokens, treating noise characters as spaces."""

    cleaned = _NOISE_PATTERN.sub(" ", normalise(text))
    return [token.strip() for token in _WHITESPACE_PATTERN.split(cleaned) if token.strip()]


def extract_keywords(text: str) -> Tuple[str, ...]:
    """Return the salient keywords of ``text`` in first-occurrence order.

    Stop words, single characters and bare numbers (other than plausible
    years) are dropped; duplicates keep their first position only.
    """

    return tuple(dict.fromkeys(token for token in tokenize(text) if _is_keyword(token)))
