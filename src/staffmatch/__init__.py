"""Healthcare resume parsing and candidate/job match scoring."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from .core import MatchResult, MatchScorer, RankedMatch, Ranker, RankingConfig
from .extraction import ExtractionFailureError, ResumeParsingError, UnsupportedFormatError
from .parsing import ParseResult, ResumeParser
from .schemas import CandidateProfile, JobRequirement
from .taxonomy import DEFAULT_TAXONOMY, Taxonomy

__version__ = "0.1.0"


@lru_cache(maxsize=1)
def _default_parser() -> ResumeParser:
    return ResumeParser()


def parse_resume(
    source: str | Path | bytes,
    extension: str | None = None,
    *,
    candidate_id: str | None = None,
) -> ParseResult:
    """Parse a resume file or its bytes.

    Raises :class:`UnsupportedFormatError` or :class:`ExtractionFailureError`.
    """
    return _default_parser().parse(source, extension, candidate_id=candidate_id)


def score_match(
    candidate: CandidateProfile | dict[str, Any],
    job: JobRequirement | dict[str, Any],
    *,
    strong_match_threshold: float = MatchScorer.DEFAULT_STRONG_MATCH_THRESHOLD,
) -> MatchResult:
    """Score one candidate against one job. Never raises for incomplete records."""
    return MatchScorer(strong_match_threshold=strong_match_threshold).score(candidate, job)


def rank_matches(
    pairs: Iterable[tuple[Any, MatchResult]],
    *,
    min_match_percentage: float = 50.0,
    limit: int | None = 10,
) -> list[RankedMatch]:
    """Filter, order and truncate ``(entity, result)`` pairs."""
    ranker = Ranker(config=RankingConfig(min_match_percentage=min_match_percentage, limit=limit))
    return ranker.rank(pairs)


__all__ = [
    "CandidateProfile",
    "DEFAULT_TAXONOMY",
    "ExtractionFailureError",
    "JobRequirement",
    "MatchResult",
    "ParseResult",
    "RankedMatch",
    "ResumeParsingError",
    "Taxonomy",
    "UnsupportedFormatError",
    "__version__",
    "parse_resume",
    "rank_matches",
    "score_match",
]
