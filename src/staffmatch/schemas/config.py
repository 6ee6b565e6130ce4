"""Pydantic configuration schema for YAML settings files."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class CoreConfig(BaseModel):
    score_weights: dict[str, float] | None = None
    strong_match_threshold: float | None = Field(default=None, ge=0, le=100)
    same_state_score: float | None = Field(default=None, ge=0, le=100)
    compact_license_score: float | None = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(extra="forbid")


class RankingSettings(BaseModel):
    min_match_percentage: float | None = Field(default=None, ge=0, le=100)
    limit: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class ExtractionSettings(BaseModel):
    timeout_seconds: float | None = Field(default=None, gt=0)
    commands: dict[str, list[list[str]]] | None = None

    model_config = ConfigDict(extra="forbid")


class ParserSettings(BaseModel):
    required_fields: list[str] | None = None
    max_header_length: int | None = Field(default=None, gt=0)
    max_header_words: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")


class PipelineSettings(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    core: CoreConfig = Field(default_factory=CoreConfig)
    ranking: RankingSettings = Field(default_factory=RankingSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    taxonomy: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("core", "ranking", "extraction", "parser", "pipeline"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        if self.taxonomy:
            settings["taxonomy"] = dict(self.taxonomy)
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return AppConfig.model_validate(raw)


__all__ = ["AppConfig", "ValidationError", "load_config"]
