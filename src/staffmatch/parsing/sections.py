"""Heuristic resume section segmentation."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..taxonomy import DEFAULT_TAXONOMY, Taxonomy

OTHER = "other"


@dataclass
class SegmenterConfig:
    """Limits deciding whether a short line is a section header."""

    max_header_length: int = 40
    max_header_words: int = 4


class SectionSegmenter:
    """Split resume text into labeled sections with a single forward scan.

    The scanner keeps the current label (initially ``other``). A short line
    containing a header keyword switches the label and is consumed; every other
    non-empty line is appended to the current label. Lines are never revisited.
    """

    def __init__(
        self,
        *,
        taxonomy: Taxonomy | None = None,
        config: SegmenterConfig | None = None,
    ) -> None:
        self._taxonomy = taxonomy or DEFAULT_TAXONOMY
        self._config = config or SegmenterConfig()
        self._header_patterns = {
            label: _keyword_pattern(keywords)
            for label, keywords in self._taxonomy.section_keywords.items()
            if keywords
        }

    def segment(self, text: str) -> dict[str, str]:
        sections: dict[str, list[str]] = {}
        current = OTHER
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            label = self.header_label(line)
            if label is not None:
                current = label
                sections.setdefault(current, [])
                continue
            sections.setdefault(current, []).append(line)
        return {label: "\n".join(lines) for label, lines in sections.items()}

    def header_label(self, line: str) -> str | None:
        """Return the section a header line opens, or None for content lines."""
        stripped = line.strip().rstrip(":").strip()
        if not stripped or len(stripped) > self._config.max_header_length:
            return None
        if len(stripped.split()) > self._config.max_header_words:
            return None

        best: tuple[int, str] | None = None
        for label, pattern in self._header_patterns.items():
            match = pattern.search(stripped)
            if match and (best is None or match.start() < best[0]):
                best = (match.start(), label)
        return best[1] if best else None


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    ordered = sorted(keywords, key=len, reverse=True)
    alternation = "|".join(re.escape(keyword) for keyword in ordered)
    return re.compile(rf"(?<![A-Za-z0-9])(?:{alternation})(?![A-Za-z0-9])", re.IGNORECASE)


__all__ = ["OTHER", "SectionSegmenter", "SegmenterConfig"]
