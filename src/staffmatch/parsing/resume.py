"""Resume parsing orchestration: extraction, segmentation and entity extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import structlog

from ..extraction import DocumentTextExtractor
from ..schemas import CandidateProfile
from .entities import EntityExtractor
from .sections import OTHER, SectionSegmenter

DEFAULT_REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "specialty",
    "yearsExperienceCategory",
)

_FIELD_GETTERS: dict[str, Callable[[CandidateProfile], Any]] = {
    "name": lambda profile: profile.contact_info.name,
    "email": lambda profile: profile.contact_info.email,
    "phone": lambda profile: profile.contact_info.phone,
    "specialty": lambda profile: profile.specialty,
    "yearsExperienceCategory": lambda profile: profile.years_experience_category,
    "education": lambda profile: profile.education,
    "positions": lambda profile: profile.positions,
    "certifications": lambda profile: profile.certifications,
    "licenses": lambda profile: profile.licenses,
    "location": lambda profile: profile.location.state,
}


@dataclass
class ParserConfig:
    """Fields whose presence drives the parse confidence."""

    required_fields: tuple[str, ...] = DEFAULT_REQUIRED_FIELDS

    def __post_init__(self) -> None:
        self.required_fields = tuple(self.required_fields)
        unknown = [name for name in self.required_fields if name not in _FIELD_GETTERS]
        if unknown:
            raise ValueError(f"Unknown required fields: {', '.join(unknown)}")


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Parsed profile plus field presence checks and a confidence ratio."""

    parsed_data: CandidateProfile
    validation: dict[str, bool]
    confidence: float
    raw_text: str
    sections: dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "parsedData": self.parsed_data.to_payload(),
            "validation": dict(self.validation),
            "confidence": self.confidence,
            "rawText": self.raw_text,
            "sections": dict(self.sections),
        }


class ResumeParser:
    """Turn resume documents into :class:`ParseResult` records."""

    def __init__(
        self,
        *,
        extractor: DocumentTextExtractor | None = None,
        segmenter: SectionSegmenter | None = None,
        entities: EntityExtractor | None = None,
        config: ParserConfig | None = None,
    ) -> None:
        self._extractor = extractor or DocumentTextExtractor()
        self._segmenter = segmenter or SectionSegmenter()
        self._entities = entities or EntityExtractor()
        self._config = config or ParserConfig()
        self._logger = structlog.get_logger(__name__)

    def parse(
        self,
        source: str | Path | bytes,
        extension: str | None = None,
        *,
        candidate_id: str | None = None,
    ) -> ParseResult:
        """Extract text from ``source`` and parse it.

        Extraction errors propagate unchanged; no partial result is produced.
        """
        text = self._extractor.extract(source, extension)
        return self.parse_text(text, candidate_id=candidate_id)

    def parse_text(self, text: str, *, candidate_id: str | None = None) -> ParseResult:
        sections = self._segmenter.segment(text)
        fallback = sections.get(OTHER, "")

        positions = self._entities.extract_positions(sections.get("experience") or fallback)
        years, category = self._entities.calculator.categorize(positions)

        profile = CandidateProfile(
            candidate_id=candidate_id,
            contact_info=self._entities.extract_contact(text),
            specialty=self._entities.extract_specialty(text),
            years_experience_category=category,
            years_of_experience=years,
            education=self._entities.extract_education(sections.get("education") or fallback),
            positions=positions,
            certifications=self._entities.extract_certifications(text),
            licenses=self._entities.extract_licenses(text),
            location=self._entities.extract_location(text, sections.get("contact", "")),
        )

        validation = {
            name: _is_present(_FIELD_GETTERS[name](profile))
            for name in self._config.required_fields
        }
        confidence = compute_confidence(validation)

        self._logger.info(
            "resume.parsed",
            candidate_id=candidate_id,
            sections=list(sections),
            specialty=profile.specialty,
            years_experience_category=category,
            confidence=confidence,
        )
        return ParseResult(
            parsed_data=profile,
            validation=validation,
            confidence=confidence,
            raw_text=text,
            sections=sections,
        )


def compute_confidence(validation: dict[str, bool]) -> float:
    """Share of satisfied checks; 0.0 when nothing was checked."""
    total = len(validation)
    if total == 0:
        return 0.0
    return sum(1 for ok in validation.values() if ok) / total


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return bool(value)
    return True


__all__ = [
    "DEFAULT_REQUIRED_FIELDS",
    "ParseResult",
    "ParserConfig",
    "ResumeParser",
    "compute_confidence",
]
