"""Pydantic schema definitions for the candidate and job data contracts."""

from __future__ import annotations

from .candidate import (
    CandidateLocation,
    CandidateProfile,
    Certification,
    ContactInfo,
    EducationEntry,
    License,
    PositionEntry,
)
from .job import JobLocation, JobRequirement

__all__ = [
    "CandidateLocation",
    "CandidateProfile",
    "Certification",
    "ContactInfo",
    "EducationEntry",
    "JobLocation",
    "JobRequirement",
    "License",
    "PositionEntry",
]
