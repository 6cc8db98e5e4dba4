"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass

from .config import CatalogEntry


@dataclass(frozen=True)
class ScoredEntry:
    """A catalog entry (borrowed, not copied) paired with its match score."""

    entry: CatalogEntry
    score: float
