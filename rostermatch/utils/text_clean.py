# rostermatch/utils/text_clean.py
from __future__ import annotations
import re
import unicodedata

import unidecode

from ..config import MAX_NAME_CHARS


def clean_name_text(text: str | None, max_len: int = MAX_NAME_CHARS) -> str:
    """
    Minimal, safe pre-clean shared by names and filenames:
    - NFKC + ASCII transliteration ("José" -> "Jose")
    - collapse whitespace/newlines
    - trim
    - hard cap
    """
    t = "" if text is None else str(text)
    if len(t) > max_len:
        t = t[:max_len]
    t = unicodedata.normalize("NFKC", t)
    t = unidecode.unidecode(t)
    # transliteration can grow the text ("李" -> "Li ")
    if len(t) > max_len:
        t = t[:max_len]
    t = re.sub(r"\s+", " ", t).strip()
    return t
