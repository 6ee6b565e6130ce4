"""Batch matching pipeline: loading, parallel scoring, ranking and output."""

from __future__ import annotations

import json
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from itertools import product
from pathlib import Path
from typing import Any, Sequence

import pendulum
import structlog
from pydantic import ValidationError

from . import __version__
from .core import MatchResult, MatchScorer, RankedMatch, Ranker
from .extraction import ResumeParsingError
from .parsing import ResumeParser
from .schemas import CandidateProfile, JobRequirement

_RESUME_KEYS = ("resumePath", "resume_path")


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[CandidateProfile]):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Load candidate profiles from JSON lines.

    A line is either a candidate profile record or ``{"resumePath": ...}``
    pointing at a resume file (relative paths resolve against the JSONL file),
    which is parsed on load.
    """

    def __init__(self, parser: ResumeParser | None = None):
        self._parser = parser

    def load(self, path: Path) -> list[CandidateProfile]:
        candidates: list[CandidateProfile] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected a JSON object")
                    continue
                try:
                    candidates.append(self._load_record(record, base_dir=path.parent))
                except (ValidationError, ResumeParsingError, ValueError) as exc:
                    errors.append(f"line {idx}: {exc}")
        if errors:
            raise CandidateLoadError(errors, candidates)
        return candidates

    def _load_record(self, record: dict[str, Any], *, base_dir: Path) -> CandidateProfile:
        resume = next((record[key] for key in _RESUME_KEYS if record.get(key)), None)
        if resume is None:
            return CandidateProfile.model_validate(record)
        if self._parser is None:
            raise ValueError("resume records require a resume parser")
        resume_path = Path(resume)
        if not resume_path.is_absolute():
            resume_path = base_dir / resume_path
        candidate_id = record.get("candidateId") or record.get("id") or resume_path.stem
        return self._parser.parse(resume_path, candidate_id=str(candidate_id)).parsed_data


class JobLoader:
    """Load job requirements from a JSON array, a ``{"jobs": [...]}`` or a single job."""

    def load(self, path: Path) -> list[JobRequirement]:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid jobs JSON: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("jobs", [data])
        if not isinstance(data, list):
            raise ValueError("Jobs JSON must be an object or an array of objects")
        return [JobRequirement.model_validate(item) for item in data]


class OutputWriter:
    """Persist matching outcomes."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class MatchingPipeline:
    """Score candidate x job pairs over a worker pool and rank jobs per candidate."""

    def __init__(
        self,
        *,
        scorer: MatchScorer,
        ranker: Ranker,
        parser: ResumeParser | None = None,
        candidate_loader: CandidateLoader | None = None,
        job_loader: JobLoader | None = None,
        writer: OutputWriter | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._scorer = scorer
        self._ranker = ranker
        self._candidates = candidate_loader or CandidateLoader(parser)
        self._jobs = job_loader or JobLoader()
        self._writer = writer or OutputWriter()
        self._max_workers = max_workers or os.cpu_count() or 1
        self._logger = structlog.get_logger(__name__)

    def score_all(
        self,
        candidates: Sequence[CandidateProfile],
        jobs: Sequence[JobRequirement],
    ) -> list[list[MatchResult]]:
        """Return ``results[i][j]``, the score of candidate ``i`` against job ``j``."""
        pairs = list(product(candidates, jobs))
        if self._max_workers <= 1 or len(pairs) < 2:
            flat = _score_chunk(self._scorer, pairs)
        else:
            flat = self._score_parallel(pairs)

        width = len(jobs)
        return [flat[row * width:(row + 1) * width] for row in range(len(candidates))]

    def _score_parallel(
        self,
        pairs: list[tuple[CandidateProfile, JobRequirement]],
    ) -> list[MatchResult]:
        workers = min(self._max_workers, len(pairs))
        size = -(-len(pairs) // (workers * 4))
        chunks = [pairs[start:start + size] for start in range(0, len(pairs), size)]
        collected: dict[int, list[MatchResult]] = {}
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_score_chunk, self._scorer, chunk): index
                for index, chunk in enumerate(chunks)
            }
            # Completion order is arbitrary; chunks are reassembled by index.
            for future in as_completed(futures):
                collected[futures[future]] = future.result()
        return [result for index in range(len(chunks)) for result in collected[index]]

    def rank_jobs(
        self,
        candidates: Sequence[CandidateProfile],
        jobs: Sequence[JobRequirement],
        *,
        min_match_percentage: float | None = None,
        limit: int | None = None,
    ) -> list[tuple[CandidateProfile, list[RankedMatch]]]:
        matrix = self.score_all(candidates, jobs)
        return [
            (
                candidate,
                self._ranker.rank(
                    zip(jobs, row),
                    min_match_percentage=min_match_percentage,
                    limit=limit,
                ),
            )
            for candidate, row in zip(candidates, matrix)
        ]

    def run(
        self,
        *,
        candidates_path: Path,
        jobs_path: Path,
        output_path: Path,
        min_match_percentage: float | None = None,
        limit: int | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> list[dict]:
        jobs = self._jobs.load(jobs_path)
        load_errors: list[str] = []
        try:
            candidates = self._candidates.load(candidates_path)
        except CandidateLoadError as exc:
            candidates = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        serialized_results: list[dict] = []
        ranked = self.rank_jobs(
            candidates,
            jobs,
            min_match_percentage=min_match_percentage,
            limit=limit,
        )
        for candidate, matches in ranked:
            entry = {
                "candidateId": candidate.candidate_id,
                "matches": [
                    {"job": match.entity.to_payload(), **match.result.to_payload()}
                    for match in matches
                ],
            }
            serialized_results.append(entry)

            if audit_logger:
                audit_logger.append(
                    {
                        "candidateId": candidate.candidate_id,
                        "matches": [
                            {
                                "jobId": match.result.job_id,
                                "matchPercentage": match.match_percentage,
                                "scores": match.result.scores,
                                "isStrongMatch": match.is_strong_match,
                            }
                            for match in matches
                        ],
                    }
                )

            self._logger.info(
                "pipeline.result",
                candidate_id=candidate.candidate_id,
                match_count=len(matches),
                top_match=matches[0].match_percentage if matches else None,
            )

        metadata = {
            "candidateCount": len(candidates),
            "jobCount": len(jobs),
            "errors": load_errors,
            "timestamp": pendulum.now().to_iso8601_string(),
            "appVersion": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "results": serialized_results})
        return serialized_results


def _score_chunk(
    scorer: MatchScorer,
    chunk: Sequence[tuple[CandidateProfile, JobRequirement]],
) -> list[MatchResult]:
    return [scorer.score(candidate, job) for candidate, job in chunk]


__all__ = [
    "AuditLogger",
    "CandidateLoadError",
    "CandidateLoader",
    "JobLoader",
    "MatchingPipeline",
    "OutputWriter",
]
