"""
Pure request-body helpers for the JSON endpoints.
No Flask imports.

Incoming records may use the snake_case field names or the camelCase names
the persistence layer emits (gradePoints, excludeFromCGPA, semesterNum).
"""

from typing import List, Optional, Tuple

from normalizer import safe_bool, safe_number

_COURSE_ALIASES = {
    "grade_points": ("grade_points", "gradePoints"),
    "exclude_from_cgpa": ("exclude_from_cgpa", "excludeFromCGPA"),
}
_SEMESTER_ALIASES = {
    "semester_num": ("semester_num", "semesterNum"),
    "type": ("type", "semesterType"),
    "sgpa": ("sgpa",),
    "courses": ("courses",),
}


def _pick(raw: dict, names: tuple):
    for name in names:
        if name in raw:
            return raw[name]
    return None


def coerce_course(raw: dict) -> dict:
    """Canonical course dict. Unknown keys are dropped."""
    return {
        "code": raw.get("code"),
        "name": raw.get("name"),
        "credits": raw.get("credits"),
        "grade": raw.get("grade"),
        "type": raw.get("type"),
        "grade_points": _pick(raw, _COURSE_ALIASES["grade_points"]),
        "exclude_from_cgpa": safe_bool(_pick(raw, _COURSE_ALIASES["exclude_from_cgpa"])),
    }


def coerce_semester(raw: dict, position: int) -> dict:
    """Canonical semester dict; semester_num defaults to the 1-based list position."""
    semester_num = _pick(raw, _SEMESTER_ALIASES["semester_num"])
    sem_type = str(_pick(raw, _SEMESTER_ALIASES["type"]) or "REGULAR").strip().upper()
    return {
        "semester_num": safe_number(semester_num, default=position),
        "type": "SUMMER" if sem_type == "SUMMER" else "REGULAR",
        "sgpa": _pick(raw, _SEMESTER_ALIASES["sgpa"]),
        "courses": [coerce_course(c) for c in raw.get("courses") or []],
    }


def _validate_course_list(courses, field: str) -> Tuple[Optional[str], Optional[str]]:
    if not isinstance(courses, list):
        return "INVALID_INPUT", f"'{field}' must be a list of course objects."
    for i, course in enumerate(courses):
        if not isinstance(course, dict):
            return "INVALID_INPUT", f"'{field}[{i}]' must be an object."
    return None, None


def validate_courses_body(body) -> Tuple[Optional[str], Optional[str]]:
    """Returns (error_code, message) on invalid input, (None, None) on success."""
    if not isinstance(body, dict):
        return "INVALID_INPUT", "Request body must be a JSON object."
    return _validate_course_list(body.get("courses"), "courses")


def validate_semesters_body(body, allow_courses: bool = False) -> Tuple[Optional[str], Optional[str]]:
    """
    Validate a body carrying `semesters` (or, when allow_courses, a flat
    `courses` list). Returns (error_code, message) or (None, None).
    """
    if not isinstance(body, dict):
        return "INVALID_INPUT", "Request body must be a JSON object."

    if allow_courses and "semesters" not in body:
        if "courses" not in body:
            return "INVALID_INPUT", "Provide 'semesters' or 'courses'."
        return _validate_course_list(body.get("courses"), "courses")

    semesters = body.get("semesters")
    if not isinstance(semesters, list):
        return "INVALID_INPUT", "'semesters' must be a list of semester objects."
    for i, sem in enumerate(semesters):
        if not isinstance(sem, dict):
            return "INVALID_INPUT", f"'semesters[{i}]' must be an object."
        err_code, err_msg = _validate_course_list(sem.get("courses") or [], f"semesters[{i}].courses")
        if err_code:
            return err_code, err_msg

    count = body.get("completed_semester_count")
    if count not in (None, ""):
        try:
            if int(count) < 0:
                raise ValueError
        except (TypeError, ValueError):
            return "INVALID_INPUT", "completed_semester_count must be a non-negative integer."
    return None, None


def coerce_semesters(raw_semesters) -> List[dict]:
    return [coerce_semester(s, i + 1) for i, s in enumerate(raw_semesters or [])]


def flatten_courses(semesters: List[dict]) -> List[dict]:
    return [c for sem in semesters for c in sem.get("courses") or []]
