# rostermatch/utils/filenames.py
import re

from ..config import FILE_EXTENSIONS, SINGLE_EXTENSIONS


def _ext_pattern(exts):
    return re.compile(
        r"\.(?:" + "|".join(re.escape(e) for e in exts) + r")\s*$",
        re.IGNORECASE,
    )


_EXT_RE = _ext_pattern(FILE_EXTENSIONS)
_LAST_EXT_RE = _ext_pattern(FILE_EXTENSIONS + SINGLE_EXTENSIONS)
_COPY_OF_RE = re.compile(r"^\s*copy\s+of\s+", re.IGNORECASE)
_DUP_COUNTER_RE = re.compile(r"\s*\(\d+\)\s*")
_VERSION_RE = re.compile(r"^(?:v|ver|rev|version)\d+$")


def strip_extensions(filename: str) -> str:
    """Drop the trailing extension, then any repeated document extensions.

    "a.docx.pdf" -> "a", "Smith, J.C.pdf" -> "Smith, J.C"
    """
    if not filename:
        return ""
    out = filename.strip()
    pattern = _LAST_EXT_RE
    while True:
        stripped = pattern.sub("", out)
        if stripped == out or not stripped:
            return out
        out = stripped
        pattern = _EXT_RE


def strip_upload_decorations(filename: str) -> str:
    """Remove "Copy of" prefixes and "(1)" duplicate counters."""
    if not filename:
        return ""
    out = _COPY_OF_RE.sub("", filename)
    out = _DUP_COUNTER_RE.sub(" ", out)
    return out.strip()


def is_upload_id(token: str) -> bool:
    """Canvas bulk-download IDs, dates, attempt numbers and version tags."""
    return token.isdigit() or bool(_VERSION_RE.match(token))
