from rostermatch.classify import compute_stats, confidence_badge, confidence_tier
from rostermatch.config import MatchResult, StudentInfo


def _result(fid, confidence, matched=True):
    student = StudentInfo(id=fid, name=f"Student {fid}") if matched else None
    return MatchResult(
        file_id=fid,
        file_name=f"{fid}.pdf",
        normalized_name=fid,
        matched_student=student,
        confidence=confidence,
        tier=confidence_tier(confidence, matched),
    )


def test_confidence_tier_cutoffs():
    assert confidence_tier(0.8) == "high"
    assert confidence_tier(0.79) == "medium"
    assert confidence_tier(0.5) == "medium"
    assert confidence_tier(0.49) == "low"
    assert confidence_tier(0.95, matched=False) == "unmatched"


def test_confidence_badge():
    assert confidence_badge(1.0) == {"text": "High", "color": "green"}
    assert confidence_badge(0.6) == {"text": "Medium", "color": "yellow"}
    assert confidence_badge(0.1) == {"text": "Low", "color": "red"}


def test_compute_stats_counts_tiers_over_matched_files():
    matches = [
        _result("1", 1.0),
        _result("2", 0.6),
        _result("3", 0.35),
        # lost a conflict: high closest-guess score but not a match
        _result("4", 0.9, matched=False),
    ]
    stats = compute_stats(matches)
    assert stats.total == 4
    assert stats.matched == 3
    assert stats.unmatched == 1
    assert stats.high_confidence == 1
    assert stats.medium_confidence == 1
    assert stats.matched + stats.unmatched == stats.total


def test_compute_stats_empty_and_pure():
    assert compute_stats([]).model_dump() == {
        "total": 0,
        "matched": 0,
        "high_confidence": 0,
        "medium_confidence": 0,
        "unmatched": 0,
    }
    matches = [_result("1", 0.9)]
    before = [m.model_dump() for m in matches]
    compute_stats(matches)
    assert [m.model_dump() for m in matches] == before
