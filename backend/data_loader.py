import os
import sys

import pandas as pd

from normalizer import safe_bool

_SEMESTER_COLUMNS = ["semester_num", "type", "sgpa"]
_COURSE_COLUMNS = [
    "semester_num",
    "code",
    "name",
    "credits",
    "grade",
    "type",
    "grade_points",
    "exclude_from_cgpa",
]

# Column names as exported by the web app's database.
_RENAMES = {
    "semesterNum": "semester_num",
    "gradePoints": "grade_points",
    "excludeFromCGPA": "exclude_from_cgpa",
}

# Only blank cells are missing; "N/A" is a real grade token.
_READ_OPTS = {"keep_default_na": False, "na_values": [""]}


def _safe_bool_col(df: pd.DataFrame, col: str) -> pd.DataFrame:
    """Normalize a boolean column regardless of Excel/CSV format. NaN -> False."""
    if col in df.columns:
        df[col] = df[col].apply(safe_bool)
    return df


def _read_sheets(data_path: str) -> tuple[pd.DataFrame, pd.DataFrame]:
    if os.path.isdir(data_path):
        sem_path = os.path.join(data_path, "semesters.csv")
        course_path = os.path.join(data_path, "courses.csv")
        for path in (sem_path, course_path):
            if not os.path.isfile(path):
                raise FileNotFoundError(path)
        return pd.read_csv(sem_path, **_READ_OPTS), pd.read_csv(course_path, **_READ_OPTS)

    if not os.path.isfile(data_path):
        raise FileNotFoundError(data_path)
    xl = pd.ExcelFile(data_path, engine="openpyxl")
    missing = [s for s in ("semesters", "courses") if s not in xl.sheet_names]
    if missing:
        raise ValueError(f"Workbook {data_path} is missing sheet(s): {missing}")
    return xl.parse("semesters", **_READ_OPTS), xl.parse("courses", **_READ_OPTS)


def _normalize_semesters_df(semesters_df: pd.DataFrame) -> pd.DataFrame:
    semesters_df = semesters_df.rename(columns=_RENAMES).copy()
    if "semester_num" not in semesters_df.columns:
        raise ValueError("semesters sheet needs a 'semester_num' column")
    if "type" not in semesters_df.columns:
        semesters_df["type"] = "REGULAR"
    if "sgpa" not in semesters_df.columns:
        semesters_df["sgpa"] = None

    semesters_df["semester_num"] = pd.to_numeric(semesters_df["semester_num"], errors="coerce")
    dropped = semesters_df["semester_num"].isna().sum()
    if dropped:
        print(f"[WARN] Dropping {dropped} semester row(s) without a numeric semester_num.", file=sys.stderr)
    semesters_df = semesters_df.dropna(subset=["semester_num"]).copy()
    semesters_df["semester_num"] = semesters_df["semester_num"].astype(int)
    semesters_df["type"] = semesters_df["type"].fillna("REGULAR").astype(str).str.strip().str.upper()
    semesters_df.loc[semesters_df["type"] != "SUMMER", "type"] = "REGULAR"
    semesters_df = semesters_df.drop_duplicates(subset=["semester_num"], keep="first")
    return semesters_df.sort_values("semester_num", kind="stable")[_SEMESTER_COLUMNS]


def _normalize_courses_df(courses_df: pd.DataFrame) -> pd.DataFrame:
    courses_df = courses_df.rename(columns=_RENAMES).copy()
    if "semester_num" not in courses_df.columns:
        raise ValueError("courses sheet needs a 'semester_num' column")
    for col in _COURSE_COLUMNS:
        if col not in courses_df.columns:
            courses_df[col] = None

    courses_df["semester_num"] = pd.to_numeric(courses_df["semester_num"], errors="coerce")
    courses_df["credits"] = pd.to_numeric(courses_df["credits"], errors="coerce").fillna(0)
    courses_df["grade_points"] = pd.to_numeric(courses_df["grade_points"], errors="coerce")
    for col in ("code", "name", "grade", "type"):
        courses_df[col] = courses_df[col].fillna("").astype(str).str.strip()
    courses_df = _safe_bool_col(courses_df, "exclude_from_cgpa")
    return courses_df[_COURSE_COLUMNS]


def _records(df: pd.DataFrame) -> list[dict]:
    # NaN -> None so downstream code sees "missing", not a float.
    return df.astype(object).where(pd.notna(df), None).to_dict(orient="records")


def load_transcript(data_path: str) -> dict:
    """
    Load a transcript snapshot from an .xlsx workbook or a directory of CSVs.

    Both need a `semesters` sheet (semester_num, type, sgpa) and a `courses`
    sheet (semester_num, code, name, credits, grade, type, grade_points,
    exclude_from_cgpa). Raises FileNotFoundError / ValueError on file or
    schema errors.

    Returns:
      {
        "semesters": [{"semester_num": 1, "type": "REGULAR", "sgpa": 8.5, "courses": [...]}, ...],
        "semesters_df": DataFrame,
        "courses_df": DataFrame,
      }
    """
    raw_semesters, raw_courses = _read_sheets(data_path)
    semesters_df = _normalize_semesters_df(raw_semesters)
    courses_df = _normalize_courses_df(raw_courses)

    known = set(semesters_df["semester_num"].tolist())
    orphaned = courses_df[~courses_df["semester_num"].isin(known)]
    if len(orphaned) > 0:
        print(
            f"[WARN] {len(orphaned)} course row(s) reference unknown semesters and were skipped: "
            f"{sorted(set(orphaned['semester_num'].dropna().tolist()))}",
            file=sys.stderr,
        )
        courses_df = courses_df[courses_df["semester_num"].isin(known)]

    semesters = []
    for sem in _records(semesters_df):
        rows = courses_df[courses_df["semester_num"] == sem["semester_num"]]
        course_rows = _records(rows.drop(columns=["semester_num"]))
        semesters.append({**sem, "courses": course_rows})

    print(f"[INFO] Loaded {len(courses_df)} courses across {len(semesters)} semesters from {data_path}")
    return {
        "semesters": semesters,
        "semesters_df": semesters_df,
        "courses_df": courses_df,
    }
