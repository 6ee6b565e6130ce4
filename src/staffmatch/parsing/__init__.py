"""Resume segmentation, entity extraction and experience inference."""

from .entities import EntityExtractor
from .experience import BUCKET_LABELS, ExperienceCalculator, bucket_for_years, bucket_index
from .resume import ParseResult, ParserConfig, ResumeParser
from .sections import SectionSegmenter, SegmenterConfig

__all__ = [
    "BUCKET_LABELS",
    "EntityExtractor",
    "ExperienceCalculator",
    "ParseResult",
    "ParserConfig",
    "ResumeParser",
    "SectionSegmenter",
    "SegmenterConfig",
    "bucket_for_years",
    "bucket_index",
]
