from __future__ import annotations
from typing import List, Optional, Sequence

import numpy as np  # type: ignore
from loguru import logger

from .classify import confidence_tier
from .config import MATCH_FLOOR, MAX_ALTERNATES, Alternate, FileRef, MatchResult, StudentInfo
from .pipeline_types import CandidateScore, NormalizedName


def rank_pairs(scores: np.ndarray) -> List[CandidateScore]:
    """
    All (file, student) pairs ordered by score descending, then file input
    order, then student input order.
    """
    if scores.size == 0:
        return []
    n_files, n_students = scores.shape
    file_idx, student_idx = np.meshgrid(np.arange(n_files), np.arange(n_students), indexing="ij")
    flat_scores = scores.ravel()
    flat_files = file_idx.ravel()
    flat_students = student_idx.ravel()
    # lexsort: last key is primary
    order = np.lexsort((flat_students, flat_files, -flat_scores))
    return [
        CandidateScore(
            file_index=int(flat_files[k]),
            student_index=int(flat_students[k]),
            score=float(flat_scores[k]),
        )
        for k in order
    ]


def greedy_assign(
    scores: np.ndarray,
    floor: float = MATCH_FLOOR,
) -> List[Optional[int]]:
    """
    Walk the globally ranked pairs and accept a pair only when neither side is
    taken and the score clears ``floor``.

    Returns
    -------
    List[Optional[int]]
        Student index per file, ``None`` for files left unmatched.
    """
    n_files = scores.shape[0] if scores.ndim == 2 else 0
    assigned: List[Optional[int]] = [None] * n_files
    taken: set = set()
    remaining = min(n_files, scores.shape[1]) if scores.ndim == 2 else 0

    for pair in rank_pairs(scores):
        if remaining == 0 or pair.score < floor or pair.score <= 0.0:
            # sorted descending: nothing below this point can clear the floor
            break
        if assigned[pair.file_index] is not None or pair.student_index in taken:
            continue
        assigned[pair.file_index] = pair.student_index
        taken.add(pair.student_index)
        remaining -= 1
        logger.debug(
            "Assigned file #{} -> student #{} (score={:.4f})",
            pair.file_index, pair.student_index, pair.score,
        )
    return assigned


def alternates_for(
    row: np.ndarray,
    students: Sequence[StudentInfo],
    exclude: Optional[int],
    k: int = MAX_ALTERNATES,
) -> List[Alternate]:
    """Next-best students for one file, score descending, input order on ties."""
    if k <= 0 or row.size == 0:
        return []
    order = np.argsort(-row, kind="stable")
    out: List[Alternate] = []
    for j in order:
        j = int(j)
        if j == exclude:
            continue
        score = float(row[j])
        if score <= 0.0:
            break
        out.append(Alternate(student=students[j], score=score))
        if len(out) >= k:
            break
    return out


def resolve_matches(
    files: Sequence[FileRef],
    file_names: Sequence[NormalizedName],
    students: Sequence[StudentInfo],
    scores: np.ndarray,
    variants: Sequence[Sequence[Optional[str]]],
    floor: float = MATCH_FLOOR,
    max_alternates: int = MAX_ALTERNATES,
) -> List[MatchResult]:
    """
    Turn the dense score matrix into one MatchResult per file, in input order.

    Unmatched files report their best score against any student (even below
    the floor) as ``confidence`` so callers can show a closest guess.
    """
    assigned = greedy_assign(scores, floor=floor)
    results: List[MatchResult] = []

    for i, f in enumerate(files):
        row = scores[i] if scores.shape[1] else np.zeros(0)
        j = assigned[i]
        if j is not None:
            matched = students[j]
            confidence = float(row[j])
            variant = variants[i][j]
        else:
            matched = None
            confidence = float(row.max()) if row.size else 0.0
            variant = None

        results.append(
            MatchResult(
                file_id=f.id,
                file_name=f.name,
                normalized_name=file_names[i].full,
                matched_student=matched,
                confidence=min(1.0, max(0.0, confidence)),
                matched_variant=variant,
                tier=confidence_tier(confidence, matched is not None),
                alternates=alternates_for(row, students, exclude=j, k=max_alternates),
            )
        )
    return results
