"""Weighted, explainable candidate/job match scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog
from pydantic import BaseModel, ValidationError

from ..parsing.experience import BUCKETS, bucket_index
from ..schemas import CandidateProfile, JobRequirement
from ..taxonomy import DEFAULT_TAXONOMY, Taxonomy

FACTORS: tuple[str, ...] = (
    "specialty",
    "experience",
    "location",
    "certifications",
    "licenses",
)

FULL_SCORE = 100.0


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Score of one candidate against one job, with the per-factor breakdown."""

    candidate_id: str | None
    job_id: str | None
    match_percentage: float
    scores: dict[str, float]
    is_strong_match: bool
    details: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "candidateId": self.candidate_id,
            "jobId": self.job_id,
            "matchPercentage": self.match_percentage,
            "scores": dict(self.scores),
            "isStrongMatch": self.is_strong_match,
            "details": dict(self.details),
        }


class MatchScorer:
    """Combine five factor scores (0-100 each) into a weighted match percentage.

    Malformed input never raises. A missing or invalid field zeroes only its
    own factor; the other fields of the record are still scored. A job with no
    required certifications, or no state for the license check, scores full
    marks on that factor.
    """

    DEFAULT_WEIGHTS: dict[str, float] = {
        "specialty": 0.40,
        "experience": 0.20,
        "location": 0.15,
        "certifications": 0.15,
        "licenses": 0.10,
    }

    DEFAULT_STRONG_MATCH_THRESHOLD = 80.0

    def __init__(
        self,
        *,
        taxonomy: Taxonomy | None = None,
        score_weights: Mapping[str, float] | None = None,
        strong_match_threshold: float | None = None,
        same_state_score: float = 70.0,
        compact_license_score: float = 80.0,
        precision: int = 2,
    ) -> None:
        self._taxonomy = taxonomy or DEFAULT_TAXONOMY
        weights = self.DEFAULT_WEIGHTS.copy()
        if score_weights:
            weights.update({key: float(value) for key, value in score_weights.items()})
        unknown = sorted(set(weights) - set(FACTORS))
        if unknown:
            raise ValueError(f"Unknown score factors: {', '.join(unknown)}")
        if any(value < 0 for value in weights.values()) or sum(weights.values()) <= 0:
            raise ValueError("Score weights must be non-negative with a positive sum.")
        self._score_weights = weights
        self._strong_match_threshold = (
            self.DEFAULT_STRONG_MATCH_THRESHOLD
            if strong_match_threshold is None
            else float(strong_match_threshold)
        )
        self._same_state_score = same_state_score
        self._compact_license_score = compact_license_score
        self._precision = precision
        self._logger = structlog.get_logger(__name__)

    @property
    def strong_match_threshold(self) -> float:
        return self._strong_match_threshold

    def __getstate__(self) -> dict[str, Any]:
        # Loggers stay process-local when the scorer is shipped to pool workers.
        state = self.__dict__.copy()
        state.pop("_logger", None)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._logger = structlog.get_logger(__name__)

    def score(
        self,
        candidate: CandidateProfile | Mapping[str, Any] | None,
        job: JobRequirement | Mapping[str, Any] | None,
        *,
        strong_match_threshold: float | None = None,
    ) -> MatchResult:
        profile = self._coerce(CandidateProfile, candidate)
        requirement = self._coerce(JobRequirement, job)

        factor_results = {
            "specialty": self._specialty_score(profile, requirement),
            "experience": self._experience_score(profile, requirement),
            "location": self._location_score(profile, requirement),
            "certifications": self._certification_score(profile, requirement),
            "licenses": self._license_score(profile, requirement),
        }
        scores = {name: _clamp(value) for name, (value, _) in factor_results.items()}
        details = {name: detail for name, (_, detail) in factor_results.items()}

        match_percentage = round(_clamp(self._compute_weighted_score(scores)), self._precision)
        threshold = (
            self._strong_match_threshold
            if strong_match_threshold is None
            else float(strong_match_threshold)
        )
        result = MatchResult(
            candidate_id=profile.candidate_id,
            job_id=requirement.job_id,
            match_percentage=match_percentage,
            scores=scores,
            is_strong_match=match_percentage >= threshold,
            details=details,
        )
        self._logger.debug(
            "match.scored",
            candidate_id=result.candidate_id,
            job_id=result.job_id,
            match_percentage=match_percentage,
            is_strong_match=result.is_strong_match,
        )
        return result

    def _compute_weighted_score(self, scores: dict[str, float]) -> float:
        total_weight = sum(self._score_weights.values())
        weighted = sum(
            scores.get(factor, 0.0) * weight
            for factor, weight in self._score_weights.items()
        )
        return weighted / total_weight

    def _coerce(self, model: type[BaseModel], payload: Any) -> Any:
        if isinstance(payload, model):
            return payload
        if payload is None:
            return model()
        if not isinstance(payload, Mapping):
            self._logger.warning(
                "match.invalid_input",
                model=model.__name__,
                input_type=type(payload).__name__,
            )
            return model()

        # Drop invalid top-level fields and revalidate the rest.
        data = dict(payload)
        while True:
            try:
                return model.model_validate(data)
            except ValidationError as exc:
                invalid = {
                    key
                    for error in exc.errors()
                    if error["loc"]
                    for key in _input_keys(model, error["loc"][0])
                } & set(data)
                self._logger.warning(
                    "match.invalid_input",
                    model=model.__name__,
                    dropped_fields=sorted(str(key) for key in invalid),
                    error_count=exc.error_count(),
                )
                if not invalid:
                    return model()
                for key in invalid:
                    del data[key]

    def _canonical_specialty(self, value: str | None) -> str | None:
        if not value or not value.strip():
            return None
        canonical = self._taxonomy.canonical_specialty(value)
        return (canonical or " ".join(value.split())).casefold()

    def _specialty_score(
        self,
        profile: CandidateProfile,
        job: JobRequirement,
    ) -> tuple[float, dict[str, Any]]:
        candidate = self._canonical_specialty(profile.specialty)
        required = self._canonical_specialty(job.specialty)
        detail = {"candidate": profile.specialty, "job": job.specialty}
        if candidate is None or required is None:
            return 0.0, {**detail, "status": "missing"}
        if candidate == required:
            return FULL_SCORE, {**detail, "status": "match"}
        return 0.0, {**detail, "status": "mismatch"}

    def _experience_score(
        self,
        profile: CandidateProfile,
        job: JobRequirement,
    ) -> tuple[float, dict[str, Any]]:
        required_idx = bucket_index(job.required_experience)
        candidate_idx = bucket_index(profile.years_experience_category)
        if candidate_idx is None:
            candidate_idx = bucket_index(profile.years_of_experience)
        detail = {
            "candidate_bucket": BUCKETS[candidate_idx].label if candidate_idx is not None else None,
            "required_bucket": BUCKETS[required_idx].label if required_idx is not None else None,
        }
        if required_idx is None or candidate_idx is None:
            return 0.0, {**detail, "status": "missing"}

        gap = required_idx - candidate_idx
        if gap <= 0:
            return FULL_SCORE, {**detail, "status": "meets", "gap": 0}
        scaled = FULL_SCORE * (1 - gap / (len(BUCKETS) - 1))
        return max(scaled, 0.0), {**detail, "status": "below", "gap": gap}

    def _location_score(
        self,
        profile: CandidateProfile,
        job: JobRequirement,
    ) -> tuple[float, dict[str, Any]]:
        job_state = _normalize_state(job.location.state)
        candidate_state = _normalize_state(profile.location.state)
        if job_state is None or candidate_state is None:
            return 0.0, {"status": "missing"}

        if candidate_state == job_state:
            if _same_text(profile.location.city, job.location.city):
                return FULL_SCORE, {"status": "same_city"}
            return self._same_state_score, {"status": "same_state"}
        if profile.location.willing_to_relocate:
            return FULL_SCORE, {"status": "relocation"}
        return 0.0, {"status": "different_state"}

    def _certification_score(
        self,
        profile: CandidateProfile,
        job: JobRequirement,
    ) -> tuple[float, dict[str, Any]]:
        required: list[str] = []
        for name in job.required_certifications:
            cleaned = name.strip() if name else ""
            if cleaned and cleaned.casefold() not in {item.casefold() for item in required}:
                required.append(cleaned)
        if not required:
            return FULL_SCORE, {"required": [], "matched": [], "missing": []}

        held = {cert.name.strip().casefold() for cert in profile.certifications if cert.name}
        matched = [name for name in required if name.casefold() in held]
        missing = [name for name in required if name.casefold() not in held]
        score = len(matched) / max(len(required), 1) * FULL_SCORE
        return score, {"required": required, "matched": matched, "missing": missing}

    def _license_score(
        self,
        profile: CandidateProfile,
        job: JobRequirement,
    ) -> tuple[float, dict[str, Any]]:
        job_state = _normalize_state(job.location.state)
        states = sorted(
            {state for state in (_normalize_state(lic.state) for lic in profile.licenses) if state}
        )
        detail: dict[str, Any] = {"job_state": job_state, "candidate_states": states}
        if job_state is None:
            return FULL_SCORE, {**detail, "status": "not_specified"}
        if job_state in states:
            return FULL_SCORE, {**detail, "status": "licensed_in_state"}
        if (
            job.multi_state_compact
            and self._taxonomy.is_compact_state(job_state)
            and any(self._taxonomy.is_compact_state(state) for state in states)
        ):
            return self._compact_license_score, {**detail, "status": "compact_license"}
        return 0.0, {**detail, "status": "unlicensed"}


def _input_keys(model: type[BaseModel], loc: int | str) -> set[int | str]:
    # Errors report the camelCase alias; payloads may use either spelling.
    info = model.model_fields.get(str(loc))
    if info is not None:
        return {loc, info.alias or loc}
    for name, info in model.model_fields.items():
        if info.alias == loc:
            return {loc, name}
    return {loc}


def _clamp(value: float) -> float:
    return min(max(float(value), 0.0), FULL_SCORE)


def _normalize_state(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    return value.strip().upper()


def _same_text(left: str | None, right: str | None) -> bool:
    # Two absent cities count as the same city.
    if not left or not right:
        return not left and not right
    return " ".join(left.split()).casefold() == " ".join(right.split()).casefold()


__all__ = ["FACTORS", "MatchResult", "MatchScorer"]
