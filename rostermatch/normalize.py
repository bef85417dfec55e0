from __future__ import annotations

"""
Name normalisation shared by roster entries and uploaded filenames.

The goal is a single, well-defined place that turns a display name, a
"Last, First" sortable name or a messy upload filename into the same
canonical token view, so the scorer only ever compares like with like.

Public helpers:

* normalize_name(text) -> NormalizedName
    Roster side: clean, reorder "Last, First", tokenise.

* normalize_filename(filename) -> NormalizedName
    Upload side: additionally strips extensions, upload decorations,
    bulk-download IDs and submission noise words.

* name_tokens(text) -> List[str]
    Tokeniser used by both of the above.
"""

from typing import List
import re

from loguru import logger

from .config import MIN_TOKEN_LEN, NAME_SUFFIXES, NOISE_TOKENS
from .pipeline_types import NormalizedName
from .utils.filenames import is_upload_id, strip_extensions, strip_upload_decorations
from .utils.text_clean import clean_name_text

_NOISE = frozenset(NOISE_TOKENS)
_SUFFIXES = frozenset(NAME_SUFFIXES)

# "Van der Berg, Anna" still counts as a surname segment; longer left-hand
# sides are more likely a sentence with a stray comma.
_MAX_SURNAME_WORDS = 3

_SPLIT_RE = re.compile(r"[^a-z0-9]+")
_WORD_SPLIT_RE = re.compile(r"[\s_\-.]+")

# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def _reorder_last_first(text: str) -> str:
    """Rewrite "Last, First[ - tail]" as "First Last tail".

    Anything that does not look like a single surname segment followed by a
    first-name segment only has its comma turned into a separator.
    """
    if text.count(",") != 1:
        return text.replace(",", " ")
    last, rest = text.split(",", 1)
    if re.sub(r"[^a-z]", "", rest.lower()) in _SUFFIXES:
        # "King, Jr." is a display name with a suffix, not "Last, First"
        return last
    surname_words = [w for w in _WORD_SPLIT_RE.split(last.strip()) if w]
    if not surname_words or not rest.strip() or len(surname_words) > _MAX_SURNAME_WORDS:
        return text.replace(",", " ")
    first, _, tail = rest.partition(" - ")
    return f"{first} {last} {tail}"


def _drop_short(tokens: List[str]) -> List[str]:
    kept = [t for t in tokens if len(t) >= MIN_TOKEN_LEN]
    # initials-only input ("J D") degrades to the initials
    return kept or tokens


def _drop_upload_ids(tokens: List[str]) -> List[str]:
    return [t for t in tokens if not is_upload_id(t)] or tokens


def _drop_filename_noise(tokens: List[str]) -> List[str]:
    without_ids = _drop_upload_ids(tokens)
    # "hw3", "draft2" count as noise too
    kept = [t for t in without_ids if t.rstrip("0123456789") not in _NOISE]
    if kept:
        return kept
    # nothing but noise: keep the words rather than returning an empty name
    return without_ids


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def name_tokens(text: str | None) -> List[str]:
    """Lower-case and split on anything that is not a letter or digit.

    Apostrophes join rather than split ("O'Brien" -> "obrien").
    """
    if not text:
        return []
    return [t for t in _SPLIT_RE.split(text.lower().replace("'", "")) if t]


def normalize_name(text: str | None) -> NormalizedName:
    """Canonical form of a roster name ("Doe, Jane" == "Jane Doe")."""
    raw = "" if text is None else str(text)
    cleaned = clean_name_text(raw)
    tokens = _drop_short(name_tokens(_reorder_last_first(cleaned)))
    norm = NormalizedName(raw=raw, tokens=tuple(tokens))
    if norm.degenerate:
        logger.debug("Degenerate student name {!r}", raw)
    return norm


def normalize_filename(filename: str | None) -> NormalizedName:
    """Canonical form of an uploaded filename.

    ``"Copy of Doe, Jane - final (1).docx"`` -> ``jane doe``
    """
    raw = "" if filename is None else str(filename)
    cleaned = clean_name_text(raw)
    cleaned = strip_extensions(cleaned)
    cleaned = strip_upload_decorations(cleaned)
    tokens = name_tokens(_reorder_last_first(cleaned))
    # noise words can be real surnames ("Lily Test"), so the view with them
    # kept travels along for scoring
    unstripped = tuple(_drop_short(_drop_upload_ids(tokens)))
    tokens = _drop_short(_drop_filename_noise(tokens))
    norm = NormalizedName(
        raw=raw,
        tokens=tuple(tokens),
        unstripped=unstripped if unstripped != tuple(tokens) else (),
    )
    if norm.degenerate:
        logger.debug("Degenerate filename {!r}", raw)
    return norm
