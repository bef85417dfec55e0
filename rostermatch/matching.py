from __future__ import annotations
"""
Entry points for file -> student reconciliation.

Validates request shapes at the boundary, then runs
normalise -> score -> resolve -> classify as one pure, synchronous call.
"""

from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from .classify import compute_stats
from .config import (
    MATCH_FLOOR,
    MAX_ALTERNATES,
    TIER_HIGH,
    TIER_UNMATCHED,
    Alternate,
    FileRef,
    MatchRequest,
    MatchResponse,
    MatchResult,
    StudentInfo,
)
from .normalize import normalize_filename
from .resolve import resolve_matches
from .scoring import build_score_matrix, student_variants

_M = TypeVar("_M", bound=BaseModel)


class InputShapeError(ValueError):
    """Request body is missing a field or has the wrong shape."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class MatchingError(RuntimeError):
    """Unexpected failure inside the matching core."""


# -----------------------
# Boundary validation
# -----------------------

def _parse_items(model: Type[_M], field: str, items: Sequence[Any]) -> List[_M]:
    out: List[_M] = []
    for i, item in enumerate(items):
        try:
            out.append(model.model_validate(item))
        except ValidationError as e:
            err = e.errors()[0]
            loc = ".".join(str(p) for p in err.get("loc", ()))
            name = f"{field}[{i}].{loc}" if loc else f"{field}[{i}]"
            raise InputShapeError(name, f"Invalid {name}: {err.get('msg')}") from e
    return out


def parse_match_request(payload: Any) -> MatchRequest:
    """
    Validate a raw ``{"files": [...], "students": [...]}`` body.
    Raises InputShapeError naming the offending field.
    """
    if not isinstance(payload, Mapping):
        raise InputShapeError("body", "Request body must be a JSON object")
    for field in ("files", "students"):
        if not isinstance(payload.get(field), list):
            raise InputShapeError(field, f"Missing required field: {field} (array)")
    files = _parse_items(FileRef, "files", payload["files"])
    students = _parse_items(StudentInfo, "students", payload["students"])
    return MatchRequest(files=files, students=students)


# -----------------------
# Matching
# -----------------------

def match_files_to_students(
    files: Sequence[FileRef],
    students: Sequence[StudentInfo],
    floor: float = MATCH_FLOOR,
    max_alternates: int = MAX_ALTERNATES,
) -> MatchResponse:
    """
    One MatchResult per file (input order) plus fresh stats. Either the whole
    batch succeeds or MatchingError is raised; no partial result escapes.
    """
    try:
        file_names = [normalize_filename(f.name) for f in files]
        variants = [student_variants(s) for s in students]
        scores, winners = build_score_matrix(file_names, variants)
        matches = resolve_matches(
            files,
            file_names,
            students,
            scores,
            winners,
            floor=floor,
            max_alternates=max_alternates,
        )
        stats = compute_stats(matches)
    except Exception as e:
        logger.exception("Matching failed for {} files / {} students", len(files), len(students))
        raise MatchingError("Matching failed") from e

    logger.info(
        "Matched {}/{} files against {} students ({} high, {} medium confidence)",
        stats.matched, stats.total, len(students), stats.high_confidence, stats.medium_confidence,
    )
    return MatchResponse(matches=matches, stats=stats)


def match_request(req: MatchRequest, floor: float = MATCH_FLOOR) -> MatchResponse:
    return match_files_to_students(req.files, req.students, floor=floor)


# -----------------------
# Manual correction
# -----------------------

def _release(m: MatchResult) -> MatchResult:
    """Unassign a file, offering its former student first among alternates."""
    alternates = [Alternate(student=m.matched_student, score=m.confidence)] + list(m.alternates)
    return m.model_copy(
        update={
            "matched_student": None,
            "matched_variant": None,
            "tier": TIER_UNMATCHED,
            "alternates": alternates[:MAX_ALTERNATES],
        }
    )


def apply_override(
    matches: Sequence[MatchResult],
    file_id: str,
    student: Optional[StudentInfo],
) -> List[MatchResult]:
    """
    Pin ``file_id`` to ``student`` (confidence 1.0), or clear it when
    ``student`` is None. A file previously holding that student is released
    so no student ends up on two files. Returns a new list.
    """
    if not any(m.file_id == file_id for m in matches):
        raise KeyError(file_id)

    out: List[MatchResult] = []
    for m in matches:
        if m.file_id == file_id:
            if student is None:
                out.append(
                    m.model_copy(
                        update={
                            "matched_student": None,
                            "matched_variant": None,
                            "confidence": 0.0,
                            "tier": TIER_UNMATCHED,
                        }
                    )
                )
            else:
                out.append(
                    m.model_copy(
                        update={
                            "matched_student": student,
                            "matched_variant": None,
                            "confidence": 1.0,
                            "tier": TIER_HIGH,
                            "alternates": [a for a in m.alternates if a.student.id != student.id],
                        }
                    )
                )
        elif (
            student is not None
            and m.matched_student is not None
            and m.matched_student.id == student.id
        ):
            logger.info("Override of {} releases {} from file {}", file_id, student.id, m.file_id)
            out.append(_release(m))
        else:
            out.append(m)
    return out
