# rostermatch/scoring.py
from __future__ import annotations

"""
Pairwise scoring of a normalised filename against a roster entry.

A student is expanded into name variants (display, sortable, short and the
surname-first rotation of each); the pair score is the best variant score.
Per variant the score is

* 1.0 when the variant's tokens appear as a contiguous run in the filename
  (or the compact forms are equal), otherwise
* TOKEN_WEIGHT * token overlap + STRING_WEIGHT * string similarity,

clipped to [0, 1]. Ties between students are left alone here; the resolver
breaks them by input order.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from .config import (
    EMBEDDED_TOKEN_CREDIT,
    HANDLE_CREDIT,
    MIN_EMBEDDED_TOKEN_LEN,
    NEAR_TOKEN_CREDIT,
    PARTIAL_RATIO_DISCOUNT,
    PARTIAL_RATIO_MIN_LEN,
    SCORE_DECIMALS,
    SHORT_TOKEN_LEN,
    STRING_WEIGHT,
    TOKEN_WEIGHT,
    StudentInfo,
)
from .normalize import normalize_name
from .pipeline_types import NormalizedName


def _clip(x: float) -> float:
    return min(1.0, max(0.0, float(x)))


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

def student_variants(student: StudentInfo) -> List[NormalizedName]:
    """
    Normalised spellings for a student, display name first, de-duplicated.
    Each multi-token spelling also contributes its surname-first rotation so
    "Doe Jane" and Canvas-style "doejane" prefixes line up without a comma.
    """
    out: List[NormalizedName] = []
    seen = set()
    for spelling in student.name_variants():
        norm = normalize_name(spelling)
        if norm.degenerate:
            continue
        candidates = [norm]
        if len(norm.tokens) >= 2:
            rotated = (norm.tokens[-1],) + norm.tokens[:-1]
            candidates.append(NormalizedName(raw=spelling, tokens=rotated))
        for cand in candidates:
            if cand.tokens not in seen:
                seen.add(cand.tokens)
                out.append(cand)
    return out


def name_handles(tokens: Sequence[str]) -> frozenset:
    """Username-style abbreviations: jdoe, doej, janed."""
    if len(tokens) < 2:
        return frozenset()
    first, last = tokens[0], tokens[-1]
    return frozenset({first[0] + last, last + first[0], first + last[0]})


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def _contains_run(haystack: Sequence[str], needle: Sequence[str]) -> bool:
    n = len(needle)
    if n == 0 or n > len(haystack):
        return False
    return any(tuple(haystack[i:i + n]) == tuple(needle) for i in range(len(haystack) - n + 1))


def is_full_name_match(file_name: NormalizedName, variant: NormalizedName) -> bool:
    """Exact match after normalisation; single-token names must match the whole filename."""
    if file_name.degenerate or variant.degenerate:
        return False
    if file_name.compact == variant.compact:
        return True
    return len(variant.tokens) >= 2 and _contains_run(file_name.tokens, variant.tokens)


def edit_budget(token: str) -> int:
    if len(token) <= 2:
        return 0
    return 1 if len(token) <= SHORT_TOKEN_LEN else 2


def token_credit(token: str, file_tokens: Sequence[str]) -> float:
    """Best credit for one student token against the filename tokens."""
    if token in file_tokens:
        return 1.0
    best = 0.0
    budget = edit_budget(token)
    for ft in file_tokens:
        if budget and Levenshtein.distance(token, ft, score_cutoff=budget) <= budget:
            best = max(best, NEAR_TOKEN_CREDIT)
        elif len(token) >= MIN_EMBEDDED_TOKEN_LEN and len(ft) > len(token) and token in ft:
            best = max(best, EMBEDDED_TOKEN_CREDIT)
    return best


def token_overlap(student_tokens: Sequence[str], file_tokens: Sequence[str]) -> float:
    """Fraction of student tokens found in the filename; order is irrelevant."""
    if not student_tokens or not file_tokens:
        return 0.0
    credit = sum(token_credit(t, file_tokens) for t in student_tokens) / len(student_tokens)
    if set(file_tokens) & name_handles(student_tokens):
        credit = max(credit, HANDLE_CREDIT)
    return _clip(credit)


def string_similarity(file_name: NormalizedName, variant: NormalizedName) -> float:
    """Indel ratio of the full strings, or a discounted best-substring ratio."""
    if file_name.degenerate or variant.degenerate:
        return 0.0
    sim = fuzz.ratio(file_name.full, variant.full) / 100.0
    if len(variant.compact) >= PARTIAL_RATIO_MIN_LEN:
        partial = fuzz.partial_ratio(variant.compact, file_name.compact) / 100.0
        sim = max(sim, PARTIAL_RATIO_DISCOUNT * partial)
    return _clip(sim)


# ---------------------------------------------------------------------------
# Public scoring
# ---------------------------------------------------------------------------

def score_variant(file_name: NormalizedName, variant: NormalizedName) -> float:
    if file_name.degenerate or variant.degenerate:
        return 0.0
    if is_full_name_match(file_name, variant):
        return 1.0
    overlap = token_overlap(variant.tokens, file_name.tokens)
    sim = string_similarity(file_name, variant)
    blended = TOKEN_WEIGHT * overlap + STRING_WEIGHT * sim
    return round(_clip(blended), SCORE_DECIMALS)


def score_pair(
    file_name: NormalizedName,
    variants: Sequence[NormalizedName],
) -> Tuple[float, Optional[str]]:
    """
    Best ``(score, variant)`` over a student's variants; first variant wins
    ties. Filenames are scored both without and with their noise words.
    """
    best_score, best_variant = 0.0, None
    for view in file_name.views():
        for variant in variants:
            s = score_variant(view, variant)
            if s > best_score:
                best_score, best_variant = s, variant.full
                if s >= 1.0:
                    return best_score, best_variant
    return best_score, best_variant


def build_score_matrix(
    file_names: Sequence[NormalizedName],
    variants_per_student: Sequence[Sequence[NormalizedName]],
) -> Tuple[np.ndarray, List[List[Optional[str]]]]:
    """
    Dense (n_files, n_students) score matrix plus the winning variant for
    every cell.
    """
    n_files, n_students = len(file_names), len(variants_per_student)
    scores = np.zeros((n_files, n_students), dtype="float64")
    winners: List[List[Optional[str]]] = [[None] * n_students for _ in range(n_files)]
    for i, fname in enumerate(file_names):
        for j, variants in enumerate(variants_per_student):
            s, v = score_pair(fname, variants)
            scores[i, j] = s
            winners[i][j] = v
    return scores, winners
