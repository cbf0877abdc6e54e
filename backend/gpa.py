"""
SGPA / CGPA computation.

SGPA and CGPA deliberately treat a failed course differently: SGPA counts an
F at 2 points, CGPA drops it from numerator and denominator until cleared.

CGPA also applies the worst-credit exclusion rule: once a student is at
least six semesters in and holds more graded credits than the baseline for
that point, up to MAX_EXCLUDED_CREDITS of their weakest credits may be
dropped. The subset to drop is found by exhaustive search over sub-10 courses
(see `_best_exclusion`).
"""

from grades import (
    FAIL_GRADE,
    GRADE_POINTS,
    NON_GRADED,
    SGPA_FAIL_POINTS,
    is_completed,
    is_graded,
    normalize_grade,
)
from normalizer import round_half_up, safe_bool, safe_credits, safe_number

# Graded-credit baseline by completed semester count (8 means 8 or more).
EXCLUSION_BASELINES = {
    6: 116,
    7: 136,
    8: 152,
}

# Hard ceiling on excludable credits. The optimizer's search is only
# tractable because of this cap; do not raise it without bounding the search.
MAX_EXCLUDED_CREDITS = 8

PERFECT_POINTS = 10

# Grades that don't add to the semester's completed-credit figure on the trend chart.
_TREND_UNEARNED = {"F", "W", "I", "X"}


def course_points(course: dict, grade_point_map=GRADE_POINTS) -> float:
    """Stored grade points, or the map value when none is stored."""
    grade = normalize_grade(course.get("grade"))
    fallback = grade_point_map.get(grade, 0)
    return safe_number(course.get("grade_points"), default=fallback)


def compute_sgpa(courses, grade_point_map=GRADE_POINTS) -> float:
    """
    Semester GPA: credit-weighted average of grade points, 2 decimals.

    Non-graded and unknown grade tokens are skipped. F always counts as
    SGPA_FAIL_POINTS whatever is stored. Returns 0 when nothing is graded.
    """
    total_points = 0.0
    total_credits = 0.0

    for course in courses or []:
        grade = normalize_grade(course.get("grade"))
        if not is_graded(grade, grade_point_map):
            continue

        points = course_points(course, grade_point_map)
        if grade == FAIL_GRADE:
            points = SGPA_FAIL_POINTS

        credits = safe_credits(course)
        total_points += credits * points
        total_credits += credits

    if total_credits == 0:
        return 0
    return round_half_up(total_points / total_credits)


def exclusion_baseline(completed_semester_count) -> int:
    """Baseline graded credits for the semester count; 0 means no exclusion."""
    count = int(safe_number(completed_semester_count))
    if count >= 8:
        return EXCLUSION_BASELINES[8]
    return EXCLUSION_BASELINES.get(count, 0)


def exclusion_allowance(total_credits: float, completed_semester_count) -> float:
    """Credits that may be dropped: min(total - baseline, MAX_EXCLUDED_CREDITS), or 0."""
    baseline = exclusion_baseline(completed_semester_count)
    if baseline <= 0 or total_credits <= baseline:
        return 0
    return min(total_credits - baseline, MAX_EXCLUDED_CREDITS)


def _cgpa_eligible(course: dict, grade_point_map) -> bool:
    grade = normalize_grade(course.get("grade"))
    if grade in NON_GRADED or grade not in grade_point_map:
        return False
    if grade == FAIL_GRADE:
        return False
    return not safe_bool(course.get("exclude_from_cgpa"))


def _best_exclusion(weighted: list, total_credits: float, total_points: float, allowance: float):
    """
    Find the removal set maximising (total_points - removed) / (total_credits - removed).

    `weighted` holds (credits, points) pairs. Candidates are limited to
    courses below PERFECT_POINTS with positive credits, and the removal set
    may hold at most `allowance` (<= MAX_EXCLUDED_CREDITS) credits; together
    these keep the enumeration small. The empty set is always a candidate.

    Returns (best_average, removed_credits).
    """
    candidates = sorted(
        (c for c in weighted if c[1] < PERFECT_POINTS and c[0] > 0),
        key=lambda c: c[1],
    )
    best_value = total_points / total_credits if total_credits > 0 else 0
    best_removed = 0

    def search(start: int, removed_credits: float, removed_points: float):
        nonlocal best_value, best_removed
        remaining = total_credits - removed_credits
        if remaining > 0:
            value = (total_points - removed_points) / remaining
            if value > best_value:
                best_value = value
                best_removed = removed_credits

        for i in range(start, len(candidates)):
            credits, points = candidates[i]
            if removed_credits + credits <= allowance:
                search(i + 1, removed_credits + credits, removed_points + credits * points)

    search(0, 0, 0)
    return best_value, best_removed


def compute_cgpa(semesters, completed_semester_count, grade_point_map=GRADE_POINTS) -> dict:
    """
    Cumulative GPA across all semesters with worst-credit exclusion.

    Returns:
      {
        "cgpa": 8.73,                     # 2 decimals
        "total_credits_considered": 120,  # graded credits before exclusion
        "earned_credits": 128,            # credits toward the degree (S included)
        "removed_credits": 4              # credits dropped by the optimizer
      }
    """
    earned_credits = 0.0
    weighted: list[tuple[float, float]] = []

    for semester in semesters or []:
        for course in semester.get("courses") or []:
            credits = safe_credits(course)
            if is_completed(course):
                earned_credits += credits
            if _cgpa_eligible(course, grade_point_map):
                weighted.append((credits, course_points(course, grade_point_map)))

    total_credits = sum(c for c, _ in weighted)
    total_points = sum(c * p for c, p in weighted)

    allowance = exclusion_allowance(total_credits, completed_semester_count)
    if allowance <= 0:
        cgpa = total_points / total_credits if total_credits > 0 else 0
        removed = 0
    else:
        cgpa, removed = _best_exclusion(weighted, total_credits, total_points, allowance)

    return {
        "cgpa": round_half_up(cgpa),
        "total_credits_considered": total_credits,
        "earned_credits": earned_credits,
        "removed_credits": removed,
    }


def _sorted_semesters(semesters) -> list:
    return sorted(semesters or [], key=lambda s: safe_number(s.get("semester_num")))


def _is_summer(semester: dict) -> bool:
    return str(semester.get("type") or "").strip().upper() == "SUMMER"


def semester_label(semester: dict, semesters) -> str:
    """
    Display label: "Sem N" counts regular semesters up to this one; summer
    terms are numbered by the regular semesters before them, two per year.
    """
    num = safe_number(semester.get("semester_num"))
    regular = [s for s in semesters or [] if not _is_summer(s)]
    if _is_summer(semester):
        before = sum(1 for s in regular if safe_number(s.get("semester_num")) < num)
        return f"Summer {before // 2 or 1}"
    upto = sum(1 for s in regular if safe_number(s.get("semester_num")) <= num)
    return f"Sem {upto}"


def semester_credits(semester: dict) -> float:
    return sum(
        safe_credits(c)
        for c in semester.get("courses") or []
        if normalize_grade(c.get("grade")) not in _TREND_UNEARNED
    )


def running_cgpa_series(semesters, grade_point_map=GRADE_POINTS) -> list[dict]:
    """
    One point per semester (ordered by semester_num) for the trend chart.

    The cumulative CGPA at each point is computed over that prefix of the
    history, with the prefix length as the completed semester count.
    """
    ordered = _sorted_semesters(semesters)
    series = []
    for idx, semester in enumerate(ordered):
        prefix = ordered[: idx + 1]
        cumulative = compute_cgpa(prefix, len(prefix), grade_point_map)
        cached = safe_number(semester.get("sgpa"))
        series.append({
            "semester_num": semester.get("semester_num"),
            "type": "SUMMER" if _is_summer(semester) else "REGULAR",
            "label": semester_label(semester, ordered),
            "sgpa": cached or compute_sgpa(semester.get("courses"), grade_point_map),
            "cgpa": cumulative["cgpa"],
            "credits": semester_credits(semester),
        })
    return series


def semester_summary(semesters, grade_point_map=GRADE_POINTS) -> dict:
    """Headline dashboard figures over the full history."""
    ordered = _sorted_semesters(semesters)
    result = compute_cgpa(ordered, len(ordered), grade_point_map)
    summer = sum(1 for s in ordered if _is_summer(s))
    return {
        **result,
        "semester_count": len(ordered),
        "regular_semesters": len(ordered) - summer,
        "summer_semesters": summer,
    }
