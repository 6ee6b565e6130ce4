from __future__ import annotations

import subprocess
from pathlib import Path

import docx
import pytest

import staffmatch.extraction as extraction
from staffmatch.extraction import (
    DocumentTextExtractor,
    ExtractionConfig,
    ExtractionFailureError,
    UnsupportedFormatError,
    normalize_extension,
)


def completed(argv, *, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4\n% Dummy")
    return path


def test_pdf_is_converted_with_pdftotext(monkeypatch: pytest.MonkeyPatch, pdf_file: Path):
    calls: list[list[str]] = []

    def fake_run(argv, **kwargs):
        calls.append(argv)
        assert kwargs["timeout"] == 10.0
        return completed(argv, stdout=b"Jane Smith\r\nICU\f")

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    text = DocumentTextExtractor().extract(pdf_file)

    assert text == "Jane Smith\nICU\n"
    assert calls == [["pdftotext", "-layout", "-nopgbrk", str(pdf_file), "-"]]


def test_bytes_are_written_to_a_temporary_file(monkeypatch: pytest.MonkeyPatch):
    content = b"%PDF-1.4 uploaded"
    seen: list[bytes] = []

    def fake_run(argv, **kwargs):
        seen.append(Path(argv[3]).read_bytes())
        return completed(argv, stdout=b"Uploaded resume")

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    assert DocumentTextExtractor().extract(content, "PDF") == "Uploaded resume"
    assert seen == [content]


def test_timeout_raises_extraction_failure(monkeypatch: pytest.MonkeyPatch, pdf_file: Path):
    def fake_run(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs["timeout"])

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)
    extractor = DocumentTextExtractor(config=ExtractionConfig(timeout_seconds=2))

    with pytest.raises(ExtractionFailureError, match="timed out after 2s"):
        extractor.extract(pdf_file)


def test_non_zero_exit_raises(monkeypatch: pytest.MonkeyPatch, pdf_file: Path):
    monkeypatch.setattr(
        extraction.subprocess,
        "run",
        lambda argv, **kwargs: completed(argv, stderr=b"Syntax Error", returncode=1),
    )

    with pytest.raises(ExtractionFailureError, match="status 1"):
        DocumentTextExtractor().extract(pdf_file)


def test_empty_output_for_non_empty_file_raises(monkeypatch: pytest.MonkeyPatch, pdf_file: Path):
    monkeypatch.setattr(
        extraction.subprocess,
        "run",
        lambda argv, **kwargs: completed(argv, stdout=b"  \n"),
    )

    with pytest.raises(ExtractionFailureError, match="produced no text"):
        DocumentTextExtractor().extract(pdf_file)


def test_missing_tool_falls_back_to_next(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    doc = tmp_path / "resume.doc"
    doc.write_bytes(b"\xd0\xcf\x11\xe0 legacy word")
    tools: list[str] = []

    def fake_run(argv, **kwargs):
        tools.append(argv[0])
        if argv[0] == "antiword":
            raise FileNotFoundError(argv[0])
        return completed(argv, stdout=b"Legacy resume text")

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    assert DocumentTextExtractor().extract(doc) == "Legacy resume text"
    assert tools == ["antiword", "catdoc"]


def test_no_tool_available(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    doc = tmp_path / "resume.doc"
    doc.write_bytes(b"legacy")

    def fake_run(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    with pytest.raises(ExtractionFailureError, match="No text extraction tool"):
        DocumentTextExtractor().extract(doc)


def test_unsupported_extension(tmp_path: Path):
    sheet = tmp_path / "resume.csv"
    sheet.write_text("name,email\n", encoding="utf-8")

    with pytest.raises(UnsupportedFormatError) as excinfo:
        DocumentTextExtractor().extract(sheet)

    assert excinfo.value.extension == ".csv"


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(ExtractionFailureError, match="not found"):
        DocumentTextExtractor().extract(tmp_path / "missing.pdf")


def test_plain_text_skips_subprocess(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    def fail_run(argv, **kwargs):  # pragma: no cover - must not be called
        raise AssertionError("subprocess should not run for text files")

    monkeypatch.setattr(extraction.subprocess, "run", fail_run)
    resume = tmp_path / "resume.TXT"
    resume.write_bytes(b"Jane Smith\r\nICU nurse")

    assert DocumentTextExtractor().extract(resume) == "Jane Smith\nICU nurse"


def test_command_overrides_replace_only_their_extension():
    config = ExtractionConfig(commands={"PDF": [["mutool", "draw", "-F", "txt", "{path}"]]})

    assert config.commands[".pdf"] == (("mutool", "draw", "-F", "txt", "{path}"),)
    assert config.commands[".doc"][0][0] == "antiword"
    assert ".docx" in DocumentTextExtractor(config=config).supported_extensions


def test_normalize_extension():
    assert normalize_extension("DOCX") == ".docx"
    assert normalize_extension(" .Pdf ") == ".pdf"
    assert normalize_extension(None) == ""


def test_failing_tool_falls_back_to_next(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    doc = tmp_path / "resume.doc"
    doc.write_bytes(b"\xd0\xcf\x11\xe0 word 6 file")
    tools: list[str] = []

    def fake_run(argv, **kwargs):
        tools.append(argv[0])
        if argv[0] == "antiword":
            return completed(argv, stderr=b"not a Word Document", returncode=1)
        return completed(argv, stdout=b"Catdoc resume text")

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    assert DocumentTextExtractor().extract(doc) == "Catdoc resume text"
    assert tools == ["antiword", "catdoc"]


def test_every_tool_failing_reports_each(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    doc = tmp_path / "resume.doc"
    doc.write_bytes(b"\xd0\xcf\x11\xe0 damaged")

    def fake_run(argv, **kwargs):
        if argv[0] == "antiword":
            return completed(argv, stderr=b"not a Word Document", returncode=1)
        return completed(argv, stdout=b"")

    monkeypatch.setattr(extraction.subprocess, "run", fake_run)

    with pytest.raises(ExtractionFailureError) as excinfo:
        DocumentTextExtractor().extract(doc)

    message = str(excinfo.value)
    assert "antiword exited with status 1" in message
    assert "catdoc produced no text" in message


def test_docx_is_read_without_subprocess(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    def fail_run(argv, **kwargs):  # pragma: no cover - must not be called
        raise AssertionError("subprocess should not run for DOCX files")

    monkeypatch.setattr(extraction.subprocess, "run", fail_run)
    document = docx.Document()
    document.add_paragraph("Jane Smith")
    document.add_paragraph("ICU Staff Nurse")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "BLS"
    table.rows[0].cells[1].text = "ACLS"
    resume = tmp_path / "resume.docx"
    document.save(resume)

    extractor = DocumentTextExtractor()
    expected = ["Jane Smith", "ICU Staff Nurse", "BLS | ACLS"]

    for text in (extractor.extract(resume), extractor.extract(resume.read_bytes(), "docx")):
        assert [line for line in text.splitlines() if line] == expected


def test_invalid_docx_raises_extraction_failure():
    with pytest.raises(ExtractionFailureError, match="Unable to read DOCX"):
        DocumentTextExtractor().extract(b"not a zip archive", ".docx")
