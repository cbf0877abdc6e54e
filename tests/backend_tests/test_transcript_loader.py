"""
Tests for load_transcript() over CSV directories and .xlsx workbooks.

All fixtures are synthetic and written to tmp_path.
"""

import pandas as pd
import pytest

from data_loader import load_transcript
from gpa import compute_cgpa
from progress import compute_progress
from requirements import get_policy
from validators import flatten_courses


def _semesters_df():
    return pd.DataFrame([
        {"semesterNum": 2, "type": "regular", "sgpa": None},
        {"semesterNum": 1, "type": "REGULAR", "sgpa": 9.0},
        {"semesterNum": 3, "type": "summer", "sgpa": None},
    ])


def _courses_df():
    return pd.DataFrame([
        {"semesterNum": 1, "code": "CSE101", "name": "Intro", "credits": 4, "grade": "A",
         "type": "Core", "gradePoints": 10, "excludeFromCGPA": False},
        {"semesterNum": 1, "code": None, "name": "MTH100-Linear Algebra", "credits": 4, "grade": "B",
         "type": "Core", "gradePoints": 8, "excludeFromCGPA": False},
        {"semesterNum": 2, "code": "CSE301", "name": "ML", "credits": 4, "grade": "C",
         "type": "Elective", "gradePoints": None, "excludeFromCGPA": "yes"},
        {"semesterNum": 3, "code": "SGA101", "name": "Yoga", "credits": 2, "grade": "S",
         "type": "SG", "gradePoints": 0, "excludeFromCGPA": False},
    ])


@pytest.fixture
def csv_dir(tmp_path):
    _semesters_df().to_csv(tmp_path / "semesters.csv", index=False)
    _courses_df().to_csv(tmp_path / "courses.csv", index=False)
    return tmp_path


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "transcript.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        _semesters_df().to_excel(writer, sheet_name="semesters", index=False)
        _courses_df().to_excel(writer, sheet_name="courses", index=False)
    return path


class TestLoadCsvDirectory:
    def test_semesters_sorted_and_normalized(self, csv_dir):
        data = load_transcript(str(csv_dir))
        semesters = data["semesters"]
        assert [s["semester_num"] for s in semesters] == [1, 2, 3]
        assert [s["type"] for s in semesters] == ["REGULAR", "REGULAR", "SUMMER"]
        assert semesters[0]["sgpa"] == 9.0
        assert semesters[1]["sgpa"] is None

    def test_courses_grouped(self, csv_dir):
        semesters = load_transcript(str(csv_dir))["semesters"]
        assert [len(s["courses"]) for s in semesters] == [2, 1, 1]
        assert "semester_num" not in semesters[0]["courses"][0]

    def test_course_fields(self, csv_dir):
        semesters = load_transcript(str(csv_dir))["semesters"]
        no_code = semesters[0]["courses"][1]
        assert no_code["code"] == ""
        assert no_code["name"] == "MTH100-Linear Algebra"
        elective = semesters[1]["courses"][0]
        assert elective["grade_points"] is None
        assert elective["exclude_from_cgpa"] is True

    def test_dataframes_returned(self, csv_dir):
        data = load_transcript(str(csv_dir))
        assert len(data["semesters_df"]) == 3
        assert len(data["courses_df"]) == 4

    def test_feeds_cgpa(self, csv_dir):
        semesters = load_transcript(str(csv_dir))["semesters"]
        result = compute_cgpa(semesters, len(semesters))
        # CSE301 is manually excluded; S is not graded.
        assert result["cgpa"] == 9.0
        assert result["earned_credits"] == 14

    def test_info_logged(self, csv_dir, capsys):
        load_transcript(str(csv_dir))
        assert "[INFO] Loaded 4 courses across 3 semesters" in capsys.readouterr().out


class TestLoadWorkbook:
    def test_matches_csv(self, workbook, csv_dir):
        from_xlsx = load_transcript(str(workbook))["semesters"]
        from_csv = load_transcript(str(csv_dir))["semesters"]
        assert [s["semester_num"] for s in from_xlsx] == [s["semester_num"] for s in from_csv]
        assert [len(s["courses"]) for s in from_xlsx] == [len(s["courses"]) for s in from_csv]

    def test_missing_sheet(self, tmp_path):
        path = tmp_path / "partial.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            _semesters_df().to_excel(writer, sheet_name="semesters", index=False)
        with pytest.raises(ValueError, match="courses"):
            load_transcript(str(path))


class TestLoadErrors:
    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_transcript(str(tmp_path / "nope.xlsx"))

    def test_directory_without_courses(self, tmp_path):
        _semesters_df().to_csv(tmp_path / "semesters.csv", index=False)
        with pytest.raises(FileNotFoundError):
            load_transcript(str(tmp_path))

    def test_missing_semester_column(self, tmp_path):
        pd.DataFrame([{"type": "REGULAR"}]).to_csv(tmp_path / "semesters.csv", index=False)
        _courses_df().to_csv(tmp_path / "courses.csv", index=False)
        with pytest.raises(ValueError, match="semester_num"):
            load_transcript(str(tmp_path))

    def test_orphaned_courses_skipped(self, tmp_path, capsys):
        _semesters_df().to_csv(tmp_path / "semesters.csv", index=False)
        orphan = pd.DataFrame([{
            "semesterNum": 9, "code": "CSE999", "name": "", "credits": 4, "grade": "A",
            "type": "OC", "gradePoints": 10, "excludeFromCGPA": False,
        }])
        courses = pd.concat([_courses_df(), orphan], ignore_index=True)
        courses.to_csv(tmp_path / "courses.csv", index=False)

        data = load_transcript(str(tmp_path))
        assert len(data["courses_df"]) == 4
        assert "[WARN] 1 course row(s) reference unknown semesters" in capsys.readouterr().err


class TestUnreleasedGrade:
    @staticmethod
    def _frames():
        semesters = pd.DataFrame([{"semester_num": 1, "type": "REGULAR"}])
        courses = pd.DataFrame([
            {"semester_num": 1, "code": "CSE101", "credits": 4, "grade": "A", "type": "Core"},
            {"semester_num": 1, "code": "CSE301", "credits": 4, "grade": "N/A", "type": "Elective"},
        ])
        return semesters, courses

    def _check(self, data):
        semesters = data["semesters"]
        assert [c["grade"] for c in semesters[0]["courses"]] == ["A", "N/A"]
        result = compute_cgpa(semesters, 1)
        assert result["earned_credits"] == 4
        progress = compute_progress(flatten_courses(semesters), result["cgpa"], get_policy("CSE"))
        assert progress["discipline_electives"]["cse_electives"]["earned"] == 0
        assert progress["total"]["earned"] == 4

    def test_csv_keeps_na_token(self, tmp_path):
        semesters, courses = self._frames()
        semesters.to_csv(tmp_path / "semesters.csv", index=False)
        courses.to_csv(tmp_path / "courses.csv", index=False)
        self._check(load_transcript(str(tmp_path)))

    def test_workbook_keeps_na_token(self, tmp_path):
        semesters, courses = self._frames()
        path = tmp_path / "transcript.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            semesters.to_excel(writer, sheet_name="semesters", index=False)
            courses.to_excel(writer, sheet_name="courses", index=False)
        self._check(load_transcript(str(path)))

    def test_blank_cells_still_missing(self, csv_dir):
        semesters = load_transcript(str(csv_dir))["semesters"]
        assert semesters[1]["sgpa"] is None
        assert semesters[0]["courses"][1]["code"] == ""
