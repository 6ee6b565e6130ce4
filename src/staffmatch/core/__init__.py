"""Core matching engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .matching import FACTORS, MatchResult, MatchScorer
from .ranking import (
    RankedMatch,
    Ranker,
    RankingConfig,
    find_matching_candidates,
    find_matching_jobs,
)

__all__ = [
    "FACTORS",
    "MatchResult",
    "MatchScorer",
    "RankedMatch",
    "Ranker",
    "RankingConfig",
    "find_matching_candidates",
    "find_matching_jobs",
]
