"""Read-only healthcare reference dictionaries used by the parser and scorer."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from functools import cached_property
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from rapidfuzz import fuzz, process

SECTION_LABELS: tuple[str, ...] = (
    "contact",
    "education",
    "experience",
    "skills",
    "certifications",
    "licenses",
    "other",
)

_DEFAULT_SPECIALTIES: dict[str, tuple[str, ...]] = {
    "ICU": ("ICU", "MICU", "SICU", "CVICU", "Intensive Care", "Critical Care"),
    "Med/Surg": ("Med/Surg", "Med-Surg", "Medical/Surgical", "Medical Surgical"),
    "Emergency": (
        "Emergency",
        "ER",
        "ED",
        "Emergency Department",
        "Emergency Room",
    ),
    "Labor & Delivery": ("Labor & Delivery", "L&D", "Labor and Delivery"),
    "OR": ("OR", "Operating Room", "Perioperative"),
    "PACU": ("PACU", "Post Anesthesia", "Post-Anesthesia"),
    "Telemetry": ("Telemetry", "Tele", "Cardiac", "Cardiology", "Step-Down"),
    "Cath Lab": ("Cath Lab", "Cardiac Cath Lab", "Cardiac Cath"),
    "Oncology": ("Oncology", "Hematology"),
    "Pediatrics": ("Pediatrics", "Peds", "Pediatric"),
    "NICU": ("NICU", "Neonatal Intensive Care"),
    "PICU": ("PICU", "Pediatric Intensive Care"),
    "Psychiatric": ("Psychiatric", "Psych", "Behavioral Health", "Mental Health"),
    "Rehabilitation": ("Rehabilitation", "Rehab"),
    "Home Health": ("Home Health",),
}

_DEFAULT_CERTIFICATIONS: tuple[str, ...] = (
    "BLS",
    "ACLS",
    "PALS",
    "NRP",
    "TNCC",
    "CCRN",
    "CCRN-K",
    "CEN",
    "CPEN",
    "RNC",
    "CNOR",
    "CAPA",
    "CPAN",
    "OCN",
    "CHPN",
    "CFRN",
    "CTRN",
    "CMSRN",
)

_DEFAULT_SECTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "contact": ("contact", "contact information", "personal information"),
    "education": ("education", "academic", "academics", "degree", "degrees"),
    "experience": (
        "experience",
        "work history",
        "employment",
        "professional background",
    ),
    "skills": ("skills", "competencies", "core competencies"),
    "certifications": ("certifications", "certification", "certificates"),
    "licenses": ("licenses", "license", "licensure"),
}

_STATE_CODES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

# Nurse Licensure Compact member states.
_COMPACT_STATES: tuple[str, ...] = (
    "AL", "AR", "CO", "DE", "FL", "GA", "ID", "IN", "IA", "KS",
    "KY", "LA", "ME", "MD", "MS", "MO", "MT", "NE", "NH", "NJ",
    "NM", "NC", "ND", "OK", "SC", "SD", "TN", "TX", "UT", "VA",
    "WV", "WI", "WY",
)


def _freeze_groups(groups: Mapping[str, Iterable[str]]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in groups.items()})


@dataclass(frozen=True)
class Taxonomy:
    """Immutable dictionaries driving section, entity and specialty matching.

    A single instance is built at start-up and handed to every component, so a
    test can swap in its own taxonomy without touching module state.
    """

    specialties: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _freeze_groups(_DEFAULT_SPECIALTIES)
    )
    certifications: tuple[str, ...] = _DEFAULT_CERTIFICATIONS
    section_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _freeze_groups(_DEFAULT_SECTION_KEYWORDS)
    )
    degree_keywords: tuple[str, ...] = (
        "bachelor",
        "bachelors",
        "master",
        "masters",
        "associate",
        "phd",
        "doctor",
        "bsn",
        "msn",
        "adn",
        "diploma",
    )
    title_keywords: tuple[str, ...] = (
        "nurse",
        "rn",
        "lpn",
        "cna",
        "clinical",
        "staff",
        "travel",
        "contract",
    )
    certification_indicators: tuple[str, ...] = (
        "certified in",
        "certification:",
        "certifications:",
        "certificate in",
    )
    license_indicators: tuple[str, ...] = ("license", "licensed", "licensure")
    relocation_phrases: tuple[str, ...] = (
        "willing to relocate",
        "open to relocation",
        "open to travel",
        "travel nurse",
    )
    relocation_negations: tuple[str, ...] = (
        "not willing to relocate",
        "unwilling to relocate",
        "unable to relocate",
        "not open to relocation",
    )
    state_codes: tuple[str, ...] = _STATE_CODES
    compact_states: tuple[str, ...] = _COMPACT_STATES
    fuzzy_cutoff: float = 90.0

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any] | None) -> "Taxonomy":
        """Build a taxonomy from YAML-style overrides on top of the defaults."""
        base = cls()
        if not overrides:
            return base
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown taxonomy keys: {', '.join(unknown)}")

        labels = sorted(set(overrides.get("section_keywords") or {}) - set(SECTION_LABELS))
        if labels:
            raise ValueError(f"Unknown section labels: {', '.join(labels)}")

        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key in ("specialties", "section_keywords"):
                changes[key] = _freeze_groups(value)
            elif key == "fuzzy_cutoff":
                changes[key] = float(value)
            else:
                changes[key] = tuple(value)
        return replace(base, **changes)

    def to_mapping(self) -> dict[str, Any]:
        """Return plain, YAML-friendly data accepted by :meth:`from_mapping`."""
        data: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Mapping):
                data[item.name] = {key: list(values) for key, values in value.items()}
            elif isinstance(value, tuple):
                data[item.name] = list(value)
            else:
                data[item.name] = value
        return data

    def __reduce__(self):
        # Read-only mapping proxies do not pickle; rebuild from plain data in workers.
        return (Taxonomy.from_mapping, (self.to_mapping(),))

    @cached_property
    def specialty_synonyms(self) -> Mapping[str, str]:
        """Map every casefolded specialty term to its canonical value."""
        lookup: dict[str, str] = {}
        for canonical, synonyms in self.specialties.items():
            lookup[canonical.casefold()] = canonical
            for synonym in synonyms:
                lookup.setdefault(synonym.casefold(), canonical)
        return MappingProxyType(lookup)

    @cached_property
    def specialty_terms(self) -> tuple[str, ...]:
        """All specialty terms as written, longest first."""
        terms = {canonical for canonical in self.specialties}
        for synonyms in self.specialties.values():
            terms.update(synonyms)
        return tuple(sorted(terms, key=lambda term: (-len(term), term)))

    def canonical_specialty(self, term: str | None) -> str | None:
        """Return the canonical specialty for ``term`` or None when unknown."""
        if not term or not term.strip():
            return None
        key = " ".join(term.split()).casefold()
        lookup = self.specialty_synonyms
        if key in lookup:
            return lookup[key]
        match = process.extractOne(
            key,
            list(lookup),
            scorer=fuzz.ratio,
            score_cutoff=self.fuzzy_cutoff,
        )
        if match is None:
            return None
        return lookup[match[0]]

    def is_compact_state(self, state: str | None) -> bool:
        return bool(state) and state.strip().upper() in self.compact_states


DEFAULT_TAXONOMY = Taxonomy()

__all__ = ["DEFAULT_TAXONOMY", "SECTION_LABELS", "Taxonomy"]
