"""Dependency injection container for the parsing and matching services."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import MatchScorer, Ranker, RankingConfig
from .extraction import DocumentTextExtractor, ExtractionConfig
from .parsing import (
    EntityExtractor,
    ExperienceCalculator,
    ParserConfig,
    ResumeParser,
    SectionSegmenter,
    SegmenterConfig,
)
from .pipeline import MatchingPipeline
from .taxonomy import Taxonomy


class StaffMatchContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    taxonomy = providers.Singleton(Taxonomy)

    extractor = providers.Singleton(DocumentTextExtractor)
    experience_calculator = providers.Singleton(ExperienceCalculator)
    segmenter = providers.Singleton(SectionSegmenter, taxonomy=taxonomy)
    entity_extractor = providers.Singleton(
        EntityExtractor,
        taxonomy=taxonomy,
        calculator=experience_calculator,
    )
    resume_parser = providers.Singleton(
        ResumeParser,
        extractor=extractor,
        segmenter=segmenter,
        entities=entity_extractor,
    )

    scorer = providers.Singleton(
        MatchScorer,
        taxonomy=taxonomy,
        score_weights=config.core.score_weights,
        strong_match_threshold=config.core.strong_match_threshold,
    )
    ranker = providers.Singleton(Ranker)

    pipeline = providers.Factory(
        MatchingPipeline,
        scorer=scorer,
        ranker=ranker,
        parser=resume_parser,
        max_workers=config.pipeline.max_workers,
    )


def create_container(*, settings: dict[str, Any] | None = None) -> StaffMatchContainer:
    """Instantiate the container with optional overrides from a settings mapping."""

    container = StaffMatchContainer()

    if not settings:
        return container

    core_settings = settings.get("core", {}) if isinstance(settings, dict) else {}
    pipeline_settings = settings.get("pipeline", {})
    if core_settings or pipeline_settings:
        container.config.override({"core": core_settings, "pipeline": pipeline_settings})
    if core_settings:
        extra_scores = {
            key: core_settings[key]
            for key in ("same_state_score", "compact_license_score")
            if key in core_settings
        }
        if extra_scores:
            container.scorer.add_kwargs(**extra_scores)

    if settings.get("taxonomy"):
        taxonomy = Taxonomy.from_mapping(settings["taxonomy"])
        container.taxonomy.override(providers.Object(taxonomy))

    if "extraction" in settings:
        extraction_config = ExtractionConfig(**settings["extraction"])
        container.extractor.override(
            providers.Singleton(DocumentTextExtractor, config=extraction_config)
        )

    parser_settings = settings.get("parser", {})
    header_settings = {
        key: parser_settings[key]
        for key in ("max_header_length", "max_header_words")
        if key in parser_settings
    }
    if header_settings:
        container.segmenter.add_kwargs(config=SegmenterConfig(**header_settings))
    if "required_fields" in parser_settings:
        container.resume_parser.add_kwargs(
            config=ParserConfig(required_fields=tuple(parser_settings["required_fields"]))
        )

    if "ranking" in settings:
        container.ranker.override(
            providers.Singleton(Ranker, config=RankingConfig(**settings["ranking"]))
        )

    return container
