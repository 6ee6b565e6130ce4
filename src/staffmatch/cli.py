"""Typer CLI entrypoint for resume parsing and batch matching."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from .config import load_settings
from .container import create_container
from .extraction import ResumeParsingError
from .logging import configure_logging
from .pipeline import AuditLogger

app = typer.Typer(help="Healthcare resume parsing and job matching CLI.")


def _settings_from(config: Optional[Path]) -> dict[str, Any]:
    if config is None:
        return {}
    try:
        return load_settings(config)
    except (ValidationError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


def _emit(payload: dict[str, Any], output: Optional[Path]) -> None:
    rendered = json.dumps(payload, ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(rendered)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered, encoding="utf-8")


@app.command()
def parse(
    resume: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Resume file."),
    extension: Optional[str] = typer.Option(None, help="Declared extension; defaults to the file suffix."),
    candidate_id: Optional[str] = typer.Option(None, help="Identifier attached to the parsed profile."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write JSON here instead of stdout."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
    log_json: bool = typer.Option(True, "--log-json/--log-console", help="Render logs as JSON or console text."),
) -> None:
    """Parse a resume into a candidate profile."""
    configure_logging(log_level, json_output=log_json)
    container = create_container(settings=_settings_from(config))
    parser = container.resume_parser()

    try:
        result = parser.parse(resume, extension, candidate_id=candidate_id)
    except ResumeParsingError as exc:
        _emit({"error": str(exc), "confidence": 0.0}, output)
        raise typer.Exit(code=1) from exc

    _emit(result.to_payload(), output)


@app.command()
def match(
    candidates: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."),
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Jobs JSON path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    min_match: Optional[float] = typer.Option(None, min=0, max=100, help="Minimum match percentage."),
    limit: Optional[int] = typer.Option(None, min=0, help="Maximum jobs per candidate."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    log_json: bool = typer.Option(True, "--log-json/--log-console", help="Render logs as JSON or console text."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Score every candidate against every job and keep the best jobs per candidate."""
    configure_logging(log_level, json_output=log_json)

    container = create_container(settings=_settings_from(config))
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    results = pipeline.run(
        candidates_path=candidates,
        jobs_path=jobs,
        output_path=output,
        min_match_percentage=min_match,
        limit=limit,
        audit_logger=audit_logger,
    )
    typer.echo(f"Matched {len(results)} candidates. Results saved to {output}.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
