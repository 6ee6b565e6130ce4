from __future__ import annotations

from pydantic import AliasChoices, ConfigDict, Field

from .base import ContractModel


class ContactInfo(ContractModel):
    """Contact channels for a candidate."""

    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class EducationEntry(ContractModel):
    """Education record opened by a degree line."""

    degree: str = ""
    dates: str | None = None
    start_year: int | None = None
    end_year: int | None = None


class PositionEntry(ContractModel):
    """Employment history entry opened by a job-title line."""

    title: str = ""
    dates: str | None = None
    start_year: int | None = None
    end_year: int | None = None


class Certification(ContractModel):
    name: str
    issuing_organization: str = ""
    expiration_date: str = ""


class License(ContractModel):
    state: str | None = None
    license_number: str | None = None
    expiration_date: str = ""


class CandidateLocation(ContractModel):
    city: str | None = None
    state: str | None = None
    willing_to_relocate: bool = False


class CandidateProfile(ContractModel):
    """Normalized candidate document, parsed from a resume or supplied by a caller."""

    candidate_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("candidateId", "candidate_id", "id"),
        serialization_alias="candidateId",
    )
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    specialty: str | None = None
    # Application-form records carry the bucket as ``yearsExperience``.
    years_experience_category: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "yearsExperienceCategory",
            "years_experience_category",
            "yearsExperience",
        ),
        serialization_alias="yearsExperienceCategory",
    )
    years_of_experience: int | None = None
    education: list[EducationEntry] = Field(default_factory=list)
    positions: list[PositionEntry] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    licenses: list[License] = Field(default_factory=list)
    location: CandidateLocation = Field(default_factory=CandidateLocation)

    model_config = ConfigDict(extra="allow")
