from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------
# Paths
# ---------------------------

# Relative, so the CLI writes next to wherever it is run from
DEFAULT_MATCHES_PATH = Path("matches.csv")


# ---------------------------
# Assignment policy
# ---------------------------

# Minimum score to accept a file -> student assignment.
DEFAULT_MATCH_FLOOR = 0.3
MATCH_FLOOR = float(os.getenv("MATCH_FLOOR", str(DEFAULT_MATCH_FLOOR)))

# Next-best students kept per file for manual correction.
MAX_ALTERNATES = 4


# ---------------------------
# Scoring weights (calibration targets, not fixed law)
# ---------------------------

TOKEN_WEIGHT = 0.65
STRING_WEIGHT = 0.35

# Per-token credit inside the overlap fraction
NEAR_TOKEN_CREDIT = 0.85      # within the edit budget
EMBEDDED_TOKEN_CREDIT = 0.75  # "jane" inside "janedoe"
HANDLE_CREDIT = 0.9           # "jdoe", "doej", "janed"

# Edit budget: 1 edit up to this token length, 2 beyond it
SHORT_TOKEN_LEN = 5
MIN_EMBEDDED_TOKEN_LEN = 3

# partial_ratio on compact strings is discounted and only used for names
# long enough not to align with random substrings
PARTIAL_RATIO_DISCOUNT = 0.9
PARTIAL_RATIO_MIN_LEN = 4

SCORE_DECIMALS = 4


# ---------------------------
# Confidence tiers
# ---------------------------

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5

TIER_HIGH = "high"
TIER_MEDIUM = "medium"
TIER_LOW = "low"
TIER_UNMATCHED = "unmatched"


# ---------------------------
# Text processing
# ---------------------------

MAX_NAME_CHARS = 512  # input size cap
MIN_TOKEN_LEN = 2

# Extensions stripped from uploaded filenames (lower-case, no dot).
# Document / image extensions may repeat ("essay.docx.pdf").
FILE_EXTENSIONS: Tuple[str, ...] = (
    "pdf", "doc", "docx", "odt", "rtf", "txt", "pages",
    "ppt", "pptx", "odp",
    "xls", "xlsx", "csv", "numbers",
    "png", "jpg", "jpeg", "gif", "heic", "webp", "tif", "tiff",
    "zip",
)
# Short or name-like extensions are only stripped as the final extension,
# so "Smith, J.C.pdf" keeps its initials and "Lee.Key.pdf" its surname.
SINGLE_EXTENSIONS: Tuple[str, ...] = (
    "key", "md", "html", "htm", "py", "ipynb", "java", "c", "cpp", "js",
)

# Generational suffixes after a comma ("King, Jr.") are dropped, not reordered
NAME_SUFFIXES: Tuple[str, ...] = ("jr", "sr", "ii", "iii", "iv")

# Words upload platforms and students tack onto submissions
NOISE_TOKENS: Tuple[str, ...] = (
    "submission", "submissions", "resubmission", "submit", "submitted",
    "final", "draft", "revised", "revision", "copy", "late", "updated",
    "assignment", "essay", "homework", "hw", "lab", "report", "project",
    "paper", "worksheet", "quiz", "exam", "test", "midterm",
)


# ---------------------------
# Logging / observability
# ---------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class _Record(BaseModel):
    """Immutable wire record: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class FileRef(_Record):
    """An uploaded artifact and its raw filename."""

    id: str
    name: str


class StudentInfo(_Record):
    """
    One roster entry. ``sortable_name`` is the "Last, First" form and
    ``short_name`` a preferred / display name, both optional.
    """

    id: str
    name: str
    sortable_name: Optional[str] = None
    short_name: Optional[str] = None

    def name_variants(self) -> List[str]:
        """Distinct non-empty spellings, display name first."""
        out: List[str] = []
        for value in (self.name, self.sortable_name, self.short_name):
            if value and value.strip() and value not in out:
                out.append(value)
        return out


class Alternate(_Record):
    student: StudentInfo
    score: float = Field(ge=0.0, le=1.0)


class MatchResult(_Record):
    """
    Outcome for one uploaded file. ``confidence`` is the assigned score, or
    the best score against any student when the file stayed unmatched.
    """

    file_id: str
    file_name: str
    normalized_name: str
    matched_student: Optional[StudentInfo] = None
    confidence: float = Field(ge=0.0, le=1.0)
    matched_variant: Optional[str] = None
    tier: str
    alternates: List[Alternate] = Field(default_factory=list)


class MatchStats(_Record):
    total: int = Field(ge=0)
    matched: int = Field(ge=0)
    high_confidence: int = Field(ge=0)
    medium_confidence: int = Field(ge=0)
    unmatched: int = Field(ge=0)


class MatchRequest(_Record):
    files: List[FileRef]
    students: List[StudentInfo]


class MatchResponse(_Record):
    """
    Response body for POST /match-students.
    """

    success: bool = True
    matches: List[MatchResult]
    stats: MatchStats


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
