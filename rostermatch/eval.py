# rostermatch/eval.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd
from loguru import logger

from . import config
from .config import FileRef, MatchResult, StudentInfo
from .matching import match_files_to_students

# ---------- column detection ----------

# header (lower-cased) -> canonical column
FILE_COLUMNS: Dict[str, List[str]] = {
    "id": ["id", "file_id", "fileid"],
    "name": ["name", "filename", "file_name", "file"],
}
ROSTER_COLUMNS: Dict[str, List[str]] = {
    "id": ["id", "student_id", "studentid", "user_id", "sis_user_id"],
    "name": ["name", "student", "student_name", "display_name"],
    "sortable_name": ["sortable_name", "sortablename", "sortable name"],
    "short_name": ["short_name", "shortname", "short name", "preferred_name"],
}
GOLD_COLUMNS: Dict[str, List[str]] = {
    "file_id": ["file_id", "fileid", "file"],
    "student_id": ["student_id", "studentid", "student"],
}

# ---------- IO helpers ----------

def _read_any(path: Path, columns: Dict[str, List[str]], required: Sequence[str]) -> pd.DataFrame:
    """Read CSV/XLSX as strings and rename recognised headers to canonical names."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    ext = path.suffix.lower()
    if ext in [".xlsx", ".xls"]:
        df = pd.read_excel(path, dtype=str)
    else:
        df = pd.read_csv(path, encoding="utf-8", dtype=str, keep_default_na=False)
    df = df.fillna("")
    lowered = {str(c).strip().lower(): c for c in df.columns}
    rename: Dict[str, str] = {}
    for canon, aliases in columns.items():
        for alias in aliases:
            if alias in lowered:
                rename[lowered[alias]] = canon
                break
    missing = [c for c in required if c not in rename.values()]
    if missing:
        raise ValueError(f"Expected columns {list(required)} in {path}. Found: {list(df.columns)}")
    return df.rename(columns=rename)


def load_files(path: Path) -> List[FileRef]:
    df = _read_any(path, FILE_COLUMNS, required=["id", "name"])
    return [FileRef(id=str(r["id"]).strip(), name=str(r["name"])) for _, r in df.iterrows()]


def load_roster(path: Path) -> List[StudentInfo]:
    df = _read_any(path, ROSTER_COLUMNS, required=["id", "name"])
    students: List[StudentInfo] = []
    for _, r in df.iterrows():
        students.append(
            StudentInfo(
                id=str(r["id"]).strip(),
                name=str(r["name"]),
                sortable_name=str(r.get("sortable_name", "") or "") or None,
                short_name=str(r.get("short_name", "") or "") or None,
            )
        )
    return students


def load_gold(path: Path) -> Dict[str, Optional[str]]:
    """file_id -> expected student_id (None = expected unmatched)."""
    df = _read_any(path, GOLD_COLUMNS, required=["file_id", "student_id"])
    gold: Dict[str, Optional[str]] = {}
    for _, r in df.iterrows():
        sid = str(r["student_id"]).strip()
        gold[str(r["file_id"]).strip()] = sid or None
    return gold

# ---------- metrics ----------

def assignment_metrics(matches: Sequence[MatchResult], gold: Dict[str, Optional[str]]) -> Dict[str, float]:
    """
    precision: correct assignments / assignments made (on gold files)
    recall:    correct assignments / gold files that expect a student
    accuracy:  files whose outcome (student or unmatched) equals gold
    """
    made = correct = expected = agree = n = 0
    for m in matches:
        if m.file_id not in gold:
            continue
        n += 1
        want = gold[m.file_id]
        got = m.matched_student.id if m.matched_student is not None else None
        if want is not None:
            expected += 1
        if got is not None:
            made += 1
            if got == want:
                correct += 1
        if got == want:
            agree += 1
    return {
        "precision": correct / made if made else 0.0,
        "recall": correct / expected if expected else 0.0,
        "accuracy": agree / n if n else 0.0,
    }

# ---------- prediction writer ----------

def write_matches(matches: Sequence[MatchResult], path: Path) -> None:
    """One row per file, in input order."""
    rows = []
    for m in matches:
        rows.append(
            {
                "file_id": m.file_id,
                "file_name": m.file_name,
                "normalized_name": m.normalized_name,
                "student_id": m.matched_student.id if m.matched_student else "",
                "student_name": m.matched_student.name if m.matched_student else "",
                "confidence": round(m.confidence, config.SCORE_DECIMALS),
                "tier": m.tier,
                "alternates": "; ".join(f"{a.student.name} ({a.score:.2f})" for a in m.alternates),
            }
        )
    df = pd.DataFrame(
        rows,
        columns=["file_id", "file_name", "normalized_name", "student_id",
                 "student_name", "confidence", "tier", "alternates"],
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("Wrote {} matches to {}", len(df), path)

# ---------- CLI ----------

def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Match uploaded filenames to a class roster.")
    ap.add_argument("--files", type=Path, required=True,
                    help="CSV/XLSX with file id and name columns")
    ap.add_argument("--roster", type=Path, required=True,
                    help="CSV/XLSX with student id and name (optional sortable_name, short_name)")
    ap.add_argument("--gold", type=Path, default=None,
                    help="Optional CSV with file_id,student_id for precision/recall")
    ap.add_argument("--out", type=Path, default=config.DEFAULT_MATCHES_PATH,
                    help="Where to write the match table")
    ap.add_argument("--floor", type=float, default=config.MATCH_FLOOR,
                    help="Minimum score to accept an assignment")
    args = ap.parse_args(argv)

    files = load_files(args.files)
    students = load_roster(args.roster)
    response = match_files_to_students(files, students, floor=args.floor)
    write_matches(response.matches, args.out)

    s = response.stats
    print(f"Total: {s.total}  Matched: {s.matched}  Unmatched: {s.unmatched}")
    print(f"High confidence: {s.high_confidence}  Medium confidence: {s.medium_confidence}")

    if args.gold is not None:
        metrics = assignment_metrics(response.matches, load_gold(args.gold))
        for k in ("precision", "recall", "accuracy"):
            print(f"{k.capitalize()}: {metrics[k]:.4f}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
