from __future__ import annotations

"""
Text normalisation helpers shared by query handling and catalog loading.

Public helpers:

* basic_clean(text) -> str
    Light-weight clean used when loading catalog fields.

* normalize_text(text) -> str
    Canonical form for user queries: lower-cased, punctuation turned into
    spaces, whitespace collapsed and trimmed.

* extract_search_terms(query) -> List[str]
    Tokeniser that mirrors the above normalisation and drops tokens that
    carry no signal for catalog matching (too short, greetings, search
    intent words).
"""

from typing import FrozenSet, List
import re

from . import config

MAX_INPUT_CHARS: int = int(getattr(config, "MAX_INPUT_CHARS", 4000))

# Unicode-aware: anything that is neither a word character nor whitespace.
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def basic_clean(text: str | None) -> str:
    """Light-weight clean for catalog fields.

    * coerces to str
    * normalises whitespace
    * truncates excessively long inputs
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    if len(text) > MAX_INPUT_CHARS:
        text = text[:MAX_INPUT_CHARS]

    text = text.replace("\r", " ").replace("\n", " ").replace("\t", " ")
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text


def normalize_text(text: str | None) -> str:
    """Lower-case, replace punctuation with spaces, collapse and trim whitespace.

    Total over any input: ``None`` and ``""`` both give ``""``.
    """
    if not text:
        return ""
    norm = text.lower()
    norm = _NON_WORD_RE.sub(" ", norm)
    norm = _WHITESPACE_RE.sub(" ", norm)
    return norm.strip()


def extract_search_terms(
    query: str | None,
    stop_words: FrozenSet[str] = config.STOP_WORDS,
    min_length: int = config.MIN_TERM_LENGTH,
) -> List[str]:
    """Return the meaningful search terms of a raw query, in query order.

    An empty list means the query had nothing to search for (only greetings,
    filler words or punctuation); callers treat that as "no matches", not as
    an error.
    """
    norm = normalize_text(query)
    return [
        token
        for token in norm.split(" ")
        if len(token) >= min_length and token not in stop_words
    ]
