from types import MappingProxyType

# Base points per grade token. Non-graded tokens carry 0 and are filtered
# out before averaging.
GRADE_POINTS = MappingProxyType({
    "A+": 10,
    "A": 10,
    "A-": 9,
    "B": 8,
    "B-": 7,
    "C": 6,
    "C-": 5,
    "D": 4,
    "F": 0,
    "S": 0,
    "X": 0,
    "W": 0,
    "I": 0,
    "N/A": 0,
})

# S (Satisfactory), X (Exempted), W (Withdrawn), I (Incomplete), N/A (unreleased).
NON_GRADED = frozenset({"S", "X", "W", "I", "N/A"})

# Grades that mean no credit was earned.
NOT_EARNED = frozenset({"F", "W", "I", "X", "N/A"})

FAIL_GRADE = "F"

# SGPA counts a failed course at 2 points; CGPA drops it entirely.
SGPA_FAIL_POINTS = 2


def normalize_grade(raw) -> str:
    """Upper-cased, trimmed grade token. None/NaN -> ''."""
    if raw is None:
        return ""
    if isinstance(raw, float) and raw != raw:
        return ""
    return str(raw).strip().upper()


def is_graded(grade: str, grade_point_map=GRADE_POINTS) -> bool:
    """True when the token contributes to a GPA denominator (F included)."""
    return grade in grade_point_map and grade not in NON_GRADED


def is_completed(course: dict) -> bool:
    """A course counts toward any credit total unless failed, withdrawn or pending."""
    grade = normalize_grade(course.get("grade"))
    return grade not in NOT_EARNED and "WITHDRAW" not in grade
