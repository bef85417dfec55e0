import pandas as pd
import pytest

from rostermatch.config import MatchResult, StudentInfo
from rostermatch.eval import assignment_metrics, load_roster, main


def _result(fid, sid):
    student = StudentInfo(id=sid, name=f"S{sid}") if sid else None
    return MatchResult(
        file_id=fid,
        file_name=f"{fid}.pdf",
        normalized_name=fid,
        matched_student=student,
        confidence=0.9 if sid else 0.1,
        tier="high" if sid else "unmatched",
    )


def test_assignment_metrics_basic():
    matches = [_result("a", "1"), _result("b", "9"), _result("c", None), _result("d", None)]
    gold = {"a": "1", "b": "2", "c": "3", "d": None}
    m = assignment_metrics(matches, gold)
    # 2 assignments made, 1 correct; 3 files expect a student
    assert m["precision"] == pytest.approx(0.5)
    assert m["recall"] == pytest.approx(1 / 3)
    # a and d agree with gold
    assert m["accuracy"] == pytest.approx(0.5)


def test_load_roster_header_aliases(tmp_path):
    path = tmp_path / "roster.csv"
    path.write_text("Student_ID,Student Name\n1,Jane Doe\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_roster(path)

    path.write_text("Student_ID,Name,Sortable_Name\n1,Jane Doe,\"Doe, Jane\"\n", encoding="utf-8")
    roster = load_roster(path)
    assert roster[0].id == "1"
    assert roster[0].sortable_name == "Doe, Jane"
    assert roster[0].short_name is None


def test_main_writes_one_row_per_file(tmp_path, capsys):
    files = tmp_path / "files.csv"
    roster = tmp_path / "roster.csv"
    gold = tmp_path / "gold.csv"
    out = tmp_path / "out" / "matches.csv"
    files.write_text(
        "id,name\nf1,Jane_Doe_Essay.pdf\nf2,\"Lee, Bob - final.docx\"\nf3,random_upload_923.pdf\n",
        encoding="utf-8",
    )
    roster.write_text("id,name\n1,Jane Doe\n2,Bob Lee\n", encoding="utf-8")
    gold.write_text("file_id,student_id\nf1,1\nf2,2\nf3,\n", encoding="utf-8")

    rc = main(["--files", str(files), "--roster", str(roster), "--gold", str(gold), "--out", str(out)])
    assert rc == 0

    df = pd.read_csv(out, dtype=str, keep_default_na=False)
    assert df["file_id"].tolist() == ["f1", "f2", "f3"]
    assert df["student_id"].tolist() == ["1", "2", ""]

    printed = capsys.readouterr().out
    assert "Matched: 2" in printed
    assert "Precision: 1.0000" in printed
    assert "Accuracy: 1.0000" in printed


def test_main_default_output_is_relative_to_cwd(tmp_path, monkeypatch):
    files = tmp_path / "files.csv"
    roster = tmp_path / "roster.csv"
    files.write_text("id,name\nf1,Jane_Doe.pdf\n", encoding="utf-8")
    roster.write_text("id,name\n1,Jane Doe\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert main(["--files", str(files), "--roster", str(roster)]) == 0
    df = pd.read_csv(tmp_path / "matches.csv", dtype=str, keep_default_na=False)
    assert df["student_id"].tolist() == ["1"]
