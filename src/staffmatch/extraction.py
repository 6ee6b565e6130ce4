"""Plain-text extraction from uploaded resume documents."""

from __future__ import annotations

import io
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence
from zipfile import BadZipFile

import docx
import structlog
from docx.opc.exceptions import PackageNotFoundError

_DEFAULT_COMMANDS: dict[str, tuple[tuple[str, ...], ...]] = {
    ".pdf": (("pdftotext", "-layout", "-nopgbrk", "{path}", "-"),),
    ".doc": (("antiword", "{path}"), ("catdoc", "{path}")),
}

TEXT_EXTENSIONS: tuple[str, ...] = (".txt",)
DOCX_EXTENSIONS: tuple[str, ...] = (".docx",)


class ResumeParsingError(Exception):
    """Base class for failures that prevent a resume from being parsed."""


class UnsupportedFormatError(ResumeParsingError):
    """Raised for a file extension the extractor cannot convert."""

    def __init__(self, extension: str | None):
        super().__init__(f"Unsupported file format: {extension or '<none>'}")
        self.extension = extension


class ExtractionFailureError(ResumeParsingError):
    """Raised when text conversion fails, times out or yields nothing."""


@dataclass
class ExtractionConfig:
    """Conversion tools and limits for the text extractor."""

    timeout_seconds: float = 10.0
    # Commands per extension, tried in order until one produces text.
    commands: Mapping[str, Sequence[Sequence[str]]] = field(
        default_factory=lambda: dict(_DEFAULT_COMMANDS)
    )

    def __post_init__(self) -> None:
        # Overrides replace the tool chain of their extension only.
        merged = dict(_DEFAULT_COMMANDS)
        for extension, commands in self.commands.items():
            merged[normalize_extension(extension)] = tuple(tuple(command) for command in commands)
        self.commands = merged


class DocumentTextExtractor:
    """Convert PDF, DOC, DOCX and TXT resumes into plain text.

    PDF and DOC go through external converters; DOCX is read in-process.
    """

    def __init__(self, *, config: ExtractionConfig | None = None) -> None:
        self._config = config or ExtractionConfig()
        self._logger = structlog.get_logger(__name__)

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return TEXT_EXTENSIONS + DOCX_EXTENSIONS + tuple(self._config.commands)

    def extract(self, source: str | Path | bytes, extension: str | None = None) -> str:
        """Return the text of ``source``, a file path or the raw file bytes.

        Parameters
        ----------
        source:
            Path to the uploaded file, or its content.
        extension:
            Declared extension such as ``".pdf"`` or ``"docx"``. Defaults to the
            path suffix when ``source`` is a path.
        """

        if extension is None and not isinstance(source, bytes):
            extension = Path(source).suffix
        ext = normalize_extension(extension)
        if ext not in self.supported_extensions:
            raise UnsupportedFormatError(extension)

        if ext in TEXT_EXTENSIONS:
            return _clean_text(_read_bytes(source).decode("utf-8", errors="replace"))

        if ext in DOCX_EXTENSIONS:
            return self._read_docx(source)

        if isinstance(source, bytes):
            with tempfile.TemporaryDirectory(prefix="staffmatch-") as workdir:
                path = Path(workdir) / f"resume{ext}"
                path.write_bytes(source)
                return self._convert(path, ext)

        path = Path(source)
        if not path.is_file():
            raise ExtractionFailureError(f"Resume file not found: {path}")
        return self._convert(path, ext)

    def _read_docx(self, source: str | Path | bytes) -> str:
        if isinstance(source, bytes):
            handle: str | io.BytesIO = io.BytesIO(source)
        else:
            path = Path(source)
            if not path.is_file():
                raise ExtractionFailureError(f"Resume file not found: {path}")
            handle = str(path)

        self._logger.debug("extraction.started", tool="python-docx", extension=".docx")
        try:
            document = docx.Document(handle)
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as exc:
            self._logger.warning(
                "extraction.failed",
                tool="python-docx",
                reason="invalid_document",
                error=str(exc),
            )
            raise ExtractionFailureError(f"Unable to read DOCX resume: {exc}") from exc

        lines = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                lines.append(" | ".join(cell for cell in cells if cell))
        text = _clean_text("\n".join(lines))
        if not text.strip():
            self._logger.warning("extraction.failed", tool="python-docx", reason="empty_output")
            raise ExtractionFailureError("python-docx produced no text for the DOCX resume")
        return text

    def _convert(self, path: Path, ext: str) -> str:
        has_content = path.stat().st_size > 0
        tried: list[str] = []
        failures: list[str] = []
        for command in self._config.commands[ext]:
            argv = [part.replace("{path}", str(path)) for part in command]
            tool = argv[0]
            tried.append(tool)
            self._logger.debug("extraction.started", tool=tool, extension=ext)
            try:
                completed = subprocess.run(
                    argv,
                    capture_output=True,
                    timeout=self._config.timeout_seconds,
                    check=False,
                )
            except FileNotFoundError:
                self._logger.info("extraction.tool_missing", tool=tool, extension=ext)
                continue
            except subprocess.TimeoutExpired as exc:
                self._logger.warning(
                    "extraction.failed",
                    tool=tool,
                    reason="timeout",
                    timeout_seconds=self._config.timeout_seconds,
                )
                raise ExtractionFailureError(
                    f"{tool} timed out after {self._config.timeout_seconds:g}s"
                ) from exc

            if completed.returncode != 0:
                stderr = completed.stderr.decode("utf-8", errors="replace").strip()
                self._logger.warning(
                    "extraction.failed",
                    tool=tool,
                    reason="exit_status",
                    returncode=completed.returncode,
                    stderr=stderr[:200],
                )
                failures.append(f"{tool} exited with status {completed.returncode}: {stderr}")
                continue

            text = _clean_text(completed.stdout.decode("utf-8", errors="replace"))
            if has_content and not text.strip():
                self._logger.warning("extraction.failed", tool=tool, reason="empty_output")
                failures.append(f"{tool} produced no text for {path.name}")
                continue
            return text

        if failures:
            raise ExtractionFailureError("; ".join(failures))
        raise ExtractionFailureError(
            f"No text extraction tool available for {ext} (tried: {', '.join(tried)})"
        )


def normalize_extension(extension: str | None) -> str:
    """Lower-case an extension and make sure it carries a leading dot."""
    if not extension:
        return ""
    ext = extension.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _read_bytes(source: str | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise ExtractionFailureError(f"Unable to read resume file: {source}") from exc


def _clean_text(text: str) -> str:
    # Normalize line endings and drop page-break form feeds.
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")


__all__ = [
    "DocumentTextExtractor",
    "ExtractionConfig",
    "ExtractionFailureError",
    "ResumeParsingError",
    "UnsupportedFormatError",
    "normalize_extension",
]
