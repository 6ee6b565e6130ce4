"""Dictionary and pattern based entity extraction from resume text.

Every extractor is a pure function of its input text. A missing entity is
reported as None or an empty list, never as an exception: resume text is noisy
and partial results are expected.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Iterable

from ..schemas import (
    CandidateLocation,
    Certification,
    ContactInfo,
    EducationEntry,
    License,
    PositionEntry,
)
from ..taxonomy import DEFAULT_TAXONOMY, Taxonomy
from .experience import ExperienceCalculator, parse_year_range

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(r"(?:\+\d{1,2}\s?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}")
LICENSE_NUMBER_RE = re.compile(r"\b(?=[A-Z0-9]*\d)[A-Z0-9]{5,15}\b")
CITY_STATE_RE = re.compile(
    r"(?P<city>[A-Z][A-Za-z.'\- ]{1,40}?),\s*(?P<state>[A-Z]{2})(?:\s+\d{5}(?:-\d{4})?)?\b"
)

MAX_TITLE_LENGTH = 100
LOCATION_SCAN_LINES = 5


class EntityExtractor:
    """Extract contact, education, positions, specialty, certifications and licenses."""

    def __init__(
        self,
        *,
        taxonomy: Taxonomy | None = None,
        calculator: ExperienceCalculator | None = None,
    ) -> None:
        self._taxonomy = taxonomy or DEFAULT_TAXONOMY
        self._calculator = calculator or ExperienceCalculator()

        self._degree_re = _degree_pattern(self._taxonomy.degree_keywords)
        self._title_re = re.compile(
            r"\b(?:" + "|".join(map(re.escape, self._taxonomy.title_keywords)) + r")s?\b",
            re.IGNORECASE,
        )
        abbreviations = [term for term in self._taxonomy.specialty_terms if term.isupper()]
        phrases = [term for term in self._taxonomy.specialty_terms if not term.isupper()]
        self._specialty_patterns = [
            pattern
            for pattern in (
                _term_pattern(abbreviations, flags=0),
                _term_pattern(phrases, flags=re.IGNORECASE),
            )
            if pattern is not None
        ]
        ordered_certifications = sorted(self._taxonomy.certifications, key=len, reverse=True)
        self._certification_re = _term_pattern(
            ordered_certifications, flags=0, extra_boundary="-"
        )
        # Lines such as "Certified in acls" may spell names in any case.
        self._certification_line_re = _term_pattern(
            ordered_certifications, flags=re.IGNORECASE, extra_boundary="-"
        )
        self._certification_names = {
            name.casefold(): name for name in self._taxonomy.certifications
        }
        self._state_re = re.compile(
            r"\b(?:" + "|".join(map(re.escape, self._taxonomy.state_codes)) + r")\b"
        )

    @property
    def calculator(self) -> ExperienceCalculator:
        return self._calculator

    def extract_contact(self, text: str) -> ContactInfo:
        """First email and phone anywhere in the document, name from the first line."""
        email = EMAIL_RE.search(text)
        phone = PHONE_RE.search(text)

        name = first_name = last_name = None
        first_line = next((line.strip() for line in text.splitlines() if line.strip()), None)
        if first_line and not EMAIL_RE.search(first_line) and not PHONE_RE.search(first_line):
            parts = first_line.split()
            if len(parts) >= 2:
                first_name = parts[0]
                last_name = " ".join(parts[1:])
                name = " ".join(parts)

        return ContactInfo(
            name=name,
            first_name=first_name,
            last_name=last_name,
            email=email.group(0) if email else None,
            phone=phone.group(0).strip() if phone else None,
        )

    def extract_education(self, section_text: str) -> list[EducationEntry]:
        records: list[dict[str, Any]] = []
        for line in _lines(section_text):
            if self._degree_re.search(line):
                records.append({"degree": line})
            year_range = parse_year_range(line)
            if year_range and records:
                current = records[-1]
                current["dates"] = year_range.text
                current["start_year"] = year_range.start_year
                current["end_year"] = self._calculator.resolve_end_year(year_range)
        return [EducationEntry(**record) for record in records]

    def extract_positions(self, section_text: str) -> list[PositionEntry]:
        """Title lines open positions; year ranges date the open position.

        A range arriving when no undated position is open starts an untitled
        position so that every dated span reaches the experience calculation.
        """
        positions: list[dict[str, Any]] = []
        for line in _lines(section_text):
            if len(line) < MAX_TITLE_LENGTH and self._title_re.search(line):
                positions.append({"title": line})
            year_range = parse_year_range(line)
            if year_range is None:
                continue
            if not positions or "dates" in positions[-1]:
                positions.append({"title": ""})
            current = positions[-1]
            current["dates"] = year_range.text
            current["start_year"] = year_range.start_year
            current["end_year"] = self._calculator.resolve_end_year(year_range)
        return [PositionEntry(**position) for position in positions]

    def extract_specialty(self, text: str) -> str | None:
        """Most frequent canonical specialty; ties go to the earliest mention."""
        # State codes in "City, ST" addresses (Oregon as OR) are not specialties.
        address_states = [
            match.span("state")
            for match in CITY_STATE_RE.finditer(text)
            if match.group("state") in self._taxonomy.state_codes
        ]
        hits: list[tuple[int, int, str]] = []
        for pattern in self._specialty_patterns:
            hits.extend(
                (m.start(), m.end(), m.group(0))
                for m in pattern.finditer(text)
                if m.span() not in address_states
            )
        if not hits:
            return None

        hits.sort(key=lambda hit: (hit[0], hit[0] - hit[1]))
        counts: Counter[str] = Counter()
        first_seen: dict[str, int] = {}
        last_end = -1
        for start, end, term in hits:
            if start < last_end:
                continue
            last_end = end
            canonical = self._taxonomy.canonical_specialty(term)
            if canonical is None:
                continue
            counts[canonical] += 1
            first_seen.setdefault(canonical, len(first_seen))

        if not counts:
            return None
        return max(counts, key=lambda name: (counts[name], -first_seen[name]))

    def extract_certifications(self, text: str) -> list[Certification]:
        names: list[str] = []
        if self._certification_re is not None:
            for match in self._certification_re.finditer(text):
                if match.group(0) not in names:
                    names.append(match.group(0))

        indicators = tuple(phrase.lower() for phrase in self._taxonomy.certification_indicators)
        for line in _lines(text):
            lowered = line.lower()
            if not any(phrase in lowered for phrase in indicators):
                continue
            if self._certification_line_re is None:
                continue
            for match in self._certification_line_re.finditer(line):
                name = self._certification_names[match.group(0).casefold()]
                if name not in names:
                    names.append(name)

        return [Certification(name=name) for name in names]

    def extract_licenses(self, text: str) -> list[License]:
        indicators = tuple(term.lower() for term in self._taxonomy.license_indicators)
        licenses: list[License] = []
        for line in _lines(text):
            lowered = line.lower()
            if not any(term in lowered for term in indicators):
                continue
            state = self._state_re.search(line)
            number = LICENSE_NUMBER_RE.search(line)
            if state is None and number is None:
                continue
            licenses.append(
                License(
                    state=state.group(0) if state else None,
                    license_number=number.group(0) if number else None,
                    expiration_date="",
                )
            )
        return licenses

    def extract_location(self, text: str, contact_section: str = "") -> CandidateLocation:
        candidates = list(_lines(contact_section)) + list(_lines(text))[:LOCATION_SCAN_LINES]
        city = state = None
        for line in candidates:
            for match in CITY_STATE_RE.finditer(line):
                if match.group("state") in self._taxonomy.state_codes:
                    city = match.group("city").strip()
                    state = match.group("state")
                    break
            if state:
                break

        lowered = text.lower()
        if any(phrase in lowered for phrase in self._taxonomy.relocation_negations):
            relocate = False
        else:
            relocate = any(phrase in lowered for phrase in self._taxonomy.relocation_phrases)
        return CandidateLocation(city=city, state=state, willing_to_relocate=relocate)


def _lines(text: str) -> Iterable[str]:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            yield stripped


def _degree_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    # Whole words, with an optional possessive ("Bachelor's").
    alternation = "|".join(map(re.escape, keywords))
    return re.compile(rf"\b(?:{alternation})(?:'s)?\b", re.IGNORECASE)


def _term_pattern(
    terms: Iterable[str],
    *,
    flags: int,
    extra_boundary: str = "",
) -> re.Pattern[str] | None:
    terms = list(terms)
    if not terms:
        return None
    boundary = "A-Za-z0-9" + re.escape(extra_boundary)
    alternation = "|".join(re.escape(term) for term in terms)
    return re.compile(rf"(?<![{boundary}])(?:{alternation})(?![{boundary}])", flags)


__all__ = ["EMAIL_RE", "PHONE_RE", "EntityExtractor"]
