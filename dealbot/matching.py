from __future__ import annotations
"""
Fuzzy matching of user queries against the deal catalog.

Scoring is deliberately simple and deterministic:

- every extracted search term is compared with an entry's searchable text
  (name + category + description, lower-cased)
- a plain substring hit scores 1.0 for that term
- otherwise the best normalised edit-distance similarity against any word
  of the text counts, but only when it clears FUZZY_WORD_THRESHOLD
- an entry scores the *max* over its terms, so one strong hit qualifies it
  and many weak hits do not add up

Ranking keeps entries above ACCEPTANCE_THRESHOLD, highest score first with
catalog order breaking ties, and returns at most MAX_RESULTS of them.
"""

from typing import List, Sequence

from loguru import logger

from .config import (
    ACCEPTANCE_THRESHOLD,
    EXACT_MATCH_SCORE,
    FUZZY_WORD_THRESHOLD,
    MAX_RESULTS,
    MIN_WORD_LENGTH,
    CatalogEntry,
)
from .normalize import extract_search_terms
from .pipeline_types import ScoredEntry


# =============================================================================
# String similarity
# =============================================================================

def edit_distance(a: str, b: str) -> int:
    """Classic Levenshtein distance; insert, delete and substitute all cost 1."""
    m, n = len(a), len(b)
    # rows follow b, columns follow a
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(m + 1):
        table[0][i] = i
    for j in range(n + 1):
        table[j][0] = j

    for j in range(1, n + 1):
        for i in range(1, m + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[j][i] = min(
                table[j][i - 1] + 1,
                table[j - 1][i] + 1,
                table[j - 1][i - 1] + cost,
            )
    return table[n][m]


def _empty_string_distance(a: str, b: str) -> float:
    """
    Degenerate branch of :func:`similarity` when one side is empty.

    Returns the raw length of the other string, NOT a [0, 1] score. Kept as-is
    so callers that reach it see the same numbers as before; the matcher never
    does, since terms and catalog words are both length-filtered first.
    """
    if not a:
        return float(len(b))
    return float(len(a))


def similarity(a: str, b: str) -> float:
    """Normalised edit-distance similarity: 1.0 identical, 0.0 nothing shared.

    See :func:`_empty_string_distance` for the empty-input case.
    """
    if not a or not b:
        return _empty_string_distance(a, b)
    longest = max(len(a), len(b))
    return (longest - edit_distance(a, b)) / longest


# =============================================================================
# Per-entry scoring
# =============================================================================

def _term_score(term: str, text: str, words: Sequence[str]) -> float:
    if term in text:
        return EXACT_MATCH_SCORE

    best = 0.0
    for word in words:
        if len(word) < MIN_WORD_LENGTH:
            continue
        sim = similarity(term, word)
        if sim > FUZZY_WORD_THRESHOLD:
            best = max(best, sim)
    return best


def score_entry(terms: Sequence[str], entry: CatalogEntry) -> float:
    """Best single-term score of ``entry`` over ``terms`` (0.0 if none hit)."""
    text = entry.searchable_text()
    words = text.split(" ")
    score = 0.0
    for term in terms:
        score = max(score, _term_score(term, text, words))
        if score >= EXACT_MATCH_SCORE:
            break
    return score


# =============================================================================
# Ranking
# =============================================================================

def match_terms(
    terms: Sequence[str],
    catalog: Sequence[CatalogEntry],
    limit: int = MAX_RESULTS,
) -> List[ScoredEntry]:
    """
    Score every catalog entry against ``terms`` and return the top matches.

    Entries are returned by reference, never copied. Python's sort is stable,
    so equal scores keep their catalog order.
    """
    if not terms:
        return []

    scored = [ScoredEntry(entry=entry, score=score_entry(terms, entry)) for entry in catalog]
    accepted = [s for s in scored if s.score > ACCEPTANCE_THRESHOLD]
    accepted.sort(key=lambda s: s.score, reverse=True)
    top = accepted[:limit]

    logger.debug(
        "Scored {} entries for terms {}; {} accepted, returning {}",
        len(scored), list(terms), len(accepted), len(top),
    )
    return top


def find_scored_matches(query: str, catalog: Sequence[CatalogEntry]) -> List[ScoredEntry]:
    """Like :func:`find_matches` but keeps the score alongside each entry."""
    return match_terms(extract_search_terms(query), catalog)


def find_matches(query: str, catalog: Sequence[CatalogEntry]) -> List[CatalogEntry]:
    """Return up to MAX_RESULTS catalog entries matching ``query``, best first."""
    return [s.entry for s in find_scored_matches(query, catalog)]
