from __future__ import annotations

from pydantic import AliasChoices, ConfigDict, Field

from .base import ContractModel


class JobLocation(ContractModel):
    """Work site of a job opportunity."""

    city: str | None = None
    state: str | None = None


class JobRequirement(ContractModel):
    """Structured job requirement supplied by the job feed or a recruiter."""

    job_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("jobId", "job_id", "id"),
        serialization_alias="jobId",
    )
    title: str | None = None
    specialty: str | None = None
    # Either numeric years or a bucket label such as "2-5" or "10+".
    required_experience: str | int | float | None = None
    location: JobLocation = Field(default_factory=JobLocation)
    required_certifications: list[str] = Field(default_factory=list)
    multi_state_compact: bool = False

    model_config = ConfigDict(extra="allow")
