"""Years-of-experience inference and the canonical experience buckets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import pendulum

from ..schemas import PositionEntry

YEAR_RANGE_RE = re.compile(
    r"(?P<start>(?:19|20)\d{2})\s*(?:-|–|—|to)\s*"
    r"(?:[A-Za-z]{3,9}\.?\s+|\d{1,2}/)?"
    r"(?P<end>(?:19|20)\d{2}|present|current)",
    re.IGNORECASE,
)
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


@dataclass(frozen=True, slots=True)
class ExperienceBucket:
    """Discretized years-of-experience range; ``upper`` is inclusive."""

    label: str
    lower: int
    upper: float | None


# Single canonical table, used for parsed resumes, job requirements and scoring.
BUCKETS: tuple[ExperienceBucket, ...] = (
    ExperienceBucket("0-1", 0, 1),
    ExperienceBucket("1-2", 1, 2),
    ExperienceBucket("2-5", 2, 5),
    ExperienceBucket("5-10", 5, 10),
    ExperienceBucket("10+", 10, None),
)
BUCKET_LABELS: tuple[str, ...] = tuple(bucket.label for bucket in BUCKETS)


@dataclass(frozen=True, slots=True)
class YearRange:
    text: str
    start_year: int
    end_year: int | None  # None means "present"


def bucket_for_years(years: float | None) -> str | None:
    """Map a raw year count onto its bucket label."""
    if years is None:
        return None
    if years < 1:
        return BUCKETS[0].label
    for bucket in BUCKETS[1:]:
        if bucket.upper is None or years <= bucket.upper:
            return bucket.label
    return BUCKETS[-1].label


def bucket_index(value: Any) -> int | None:
    """Return the ordinal of a bucket label, numeric years or a foreign range label.

    Labels outside the canonical table (``"3-5"``, ``"5+"``) are placed by their
    lower bound. Unparseable values yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        label = bucket_for_years(float(value))
        return BUCKET_LABELS.index(label) if label else None

    text = str(value).strip()
    if not text:
        return None
    if text in BUCKET_LABELS:
        return BUCKET_LABELS.index(text)
    match = _NUMBER_RE.search(text)
    if match is None:
        return None
    return bucket_index(float(match.group()))


def parse_year_range(line: str) -> YearRange | None:
    match = YEAR_RANGE_RE.search(line)
    if match is None:
        return None
    end = match.group("end")
    return YearRange(
        text=match.group(0),
        start_year=int(match.group("start")),
        end_year=int(end) if end.isdigit() else None,
    )


class ExperienceCalculator:
    """Infer the experience bucket from dated positions."""

    def __init__(self, *, now_provider: Callable[[], pendulum.DateTime] | None = None) -> None:
        self._now_provider = now_provider or pendulum.now

    def current_year(self) -> int:
        return self._now_provider().year

    def resolve_end_year(self, year_range: YearRange) -> int:
        if year_range.end_year is None:
            return self.current_year()
        return year_range.end_year

    def years_of_experience(self, positions: Iterable[PositionEntry]) -> int | None:
        """Longest single span across positions; reversed ranges are ignored."""
        spans = [
            position.end_year - position.start_year
            for position in positions
            if position.start_year is not None and position.end_year is not None
        ]
        spans = [span for span in spans if span >= 0]
        return max(spans) if spans else None

    def categorize(self, positions: Iterable[PositionEntry]) -> tuple[int | None, str | None]:
        years = self.years_of_experience(positions)
        return years, bucket_for_years(years)


__all__ = [
    "BUCKETS",
    "BUCKET_LABELS",
    "ExperienceBucket",
    "ExperienceCalculator",
    "YEAR_RANGE_RE",
    "YearRange",
    "bucket_for_years",
    "bucket_index",
    "parse_year_range",
]
