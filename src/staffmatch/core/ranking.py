"""Ordering, thresholding and truncation of match results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .matching import MatchResult, MatchScorer


@dataclass(frozen=True, slots=True)
class RankedMatch:
    """A matched job or candidate kept next to its full score breakdown."""

    entity: Any
    result: MatchResult

    @property
    def match_percentage(self) -> float:
        return self.result.match_percentage

    @property
    def is_strong_match(self) -> bool:
        return self.result.is_strong_match


@dataclass
class RankingConfig:
    """Defaults applied when a caller does not pass explicit options."""

    min_match_percentage: float = 50.0
    limit: int | None = 10


class Ranker:
    """Filter by a floor, order by match percentage and keep the top results.

    Sorting is stable, so equal percentages keep their input order.
    """

    def __init__(self, *, config: RankingConfig | None = None) -> None:
        self._config = config or RankingConfig()

    @property
    def config(self) -> RankingConfig:
        return self._config

    def rank(
        self,
        pairs: Iterable[tuple[Any, MatchResult] | RankedMatch],
        *,
        min_match_percentage: float | None = None,
        limit: int | None = None,
    ) -> list[RankedMatch]:
        floor = (
            self._config.min_match_percentage
            if min_match_percentage is None
            else float(min_match_percentage)
        )
        cap = self._config.limit if limit is None else limit

        eligible = [
            match
            for match in (_as_ranked(pair) for pair in pairs)
            if match.match_percentage >= floor
        ]
        ordered = sorted(eligible, key=lambda match: match.match_percentage, reverse=True)
        if cap is None:
            return ordered
        return ordered[: max(int(cap), 0)]


def find_matching_jobs(
    candidate: Any,
    jobs: Sequence[Any],
    *,
    scorer: MatchScorer | None = None,
    ranker: Ranker | None = None,
    min_match_percentage: float | None = None,
    limit: int | None = None,
) -> list[RankedMatch]:
    """Score one candidate against every job and rank the jobs."""
    scorer = scorer or MatchScorer()
    ranker = ranker or Ranker()
    pairs = [(job, scorer.score(candidate, job)) for job in jobs]
    return ranker.rank(pairs, min_match_percentage=min_match_percentage, limit=limit)


def find_matching_candidates(
    job: Any,
    candidates: Sequence[Any],
    *,
    scorer: MatchScorer | None = None,
    ranker: Ranker | None = None,
    min_match_percentage: float | None = None,
    limit: int | None = None,
) -> list[RankedMatch]:
    """Score every candidate against one job and rank the candidates."""
    scorer = scorer or MatchScorer()
    ranker = ranker or Ranker()
    pairs = [(candidate, scorer.score(candidate, job)) for candidate in candidates]
    return ranker.rank(pairs, min_match_percentage=min_match_percentage, limit=limit)


def _as_ranked(pair: tuple[Any, MatchResult] | RankedMatch) -> RankedMatch:
    if isinstance(pair, RankedMatch):
        return pair
    entity, result = pair
    return RankedMatch(entity=entity, result=result)


__all__ = [
    "RankedMatch",
    "Ranker",
    "RankingConfig",
    "find_matching_candidates",
    "find_matching_jobs",
]
