"""
Course classification predicates.

Every predicate is a pure function of the course record and never raises:
missing or malformed fields simply fail to match. Categories overlap, e.g.
an online CSE course is both `online` and a CSE elective.

Codes are resolved from `code`, or from a leading code in `name`
("CSE301-Course Name") when `code` is empty.
"""

from grades import is_completed
from normalizer import code_level, code_prefix, normalize_name, normalize_type, resolve_code, safe_credits
from requirements import CSE_PREFIXES, ELECTIVE_MIN_LEVEL

SSH_PREFIXES = {"SSH", "SOC", "ECO", "PSY", "PHI", "ENT", "COM"}
ONLINE_CODE_PREFIXES = ("CSE999", "CSE998")
INDEPENDENT_CODE_PREFIXES = ("IP", "IS", "UR", "BIP", "BIS", "BUR")
ELECTIVE_TYPES = {"department elective", "elective", "open elective", "oc", "online course"}

# Thesis fallback needs at least this many credits.
BTP_MIN_CREDITS = 3


def course_label(course: dict) -> str:
    """Code when resolvable, otherwise the raw type text."""
    return resolve_code(course) or str(course.get("type") or "")


def is_core_course(course: dict) -> bool:
    t = normalize_type(course)
    return (
        t == "core"
        or t == "mandatory (core)"
        or "mandatory" in t
        or ("core" in t and "elective" not in t)
    )


def is_ssh_course(course: dict) -> bool:
    if is_core_course(course):
        return False

    t = normalize_type(course).upper()
    if "SSH" in t or "SOCIAL SCIENCE" in t or "HUMANITIES" in t:
        return True

    code = resolve_code(course)
    return bool(code) and code_prefix(code) in SSH_PREFIXES


def is_discipline_elective(course: dict, prefixes=CSE_PREFIXES) -> bool:
    """Non-core, elective- or online-typed, 3xx+ course with one of `prefixes`."""
    if is_core_course(course):
        return False

    t = normalize_type(course)
    if not (t in ELECTIVE_TYPES or "elective" in t or "online" in t):
        return False

    code = resolve_code(course)
    if not code:
        return False
    if code_prefix(code) not in prefixes:
        return False
    return code_level(code) >= ELECTIVE_MIN_LEVEL


def is_cse_elective(course: dict) -> bool:
    return is_discipline_elective(course, CSE_PREFIXES)


def is_self_growth_course(course: dict) -> bool:
    if "self growth" in normalize_type(course) or normalize_type(course) == "sg":
        return True
    code = resolve_code(course)
    if code and code.startswith("SG"):
        return True
    return "self growth" in normalize_name(course)


def is_community_work_course(course: dict) -> bool:
    if "community work" in normalize_type(course) or normalize_type(course) == "cw":
        return True
    code = resolve_code(course)
    if code and code.startswith("CW"):
        return True
    # MSC491-Community Work carries no CW code.
    return "community work" in normalize_name(course)


def is_online_course(course: dict) -> bool:
    code = resolve_code(course)
    if code and code.startswith(ONLINE_CODE_PREFIXES):
        return True

    t = normalize_type(course)
    if t == "oc" or "online" in t:
        return True
    name = normalize_name(course)
    return "distance course" in name or "online" in name


def is_btp_course(course: dict) -> bool:
    code = resolve_code(course)
    if code and code.startswith("BTP"):
        return True

    name = normalize_name(course)
    # Community work is also project-like; keep it out of the thesis bucket.
    if (code and code.startswith("MSC")) or "community work" in name:
        return False
    if safe_credits(course) < BTP_MIN_CREDITS:
        return False

    t = normalize_type(course)
    if t in {"thesis", "btp"} or "b.tech project" in t:
        return True
    return "b.tech project" in name or "thesis" in name


def is_independent_work(course: dict) -> bool:
    """IP / IS / UR, including the B-prefixed variants (BIP398, BIS201, BUR301)."""
    t = normalize_type(course)
    if t == "ip/is/ur" or "independent" in t:
        return True

    name = normalize_name(course)
    if any(k in name for k in ("independent project", "independent study", "undergraduate research")):
        return True

    code = resolve_code(course)
    return bool(code) and code.startswith(INDEPENDENT_CODE_PREFIXES)


def classify_course(course: dict, policy=None) -> list[str]:
    """Sorted tag names a course matches. Elective tags use the policy's bucket ids."""
    checks = {
        "completed": is_completed,
        "core": is_core_course,
        "ssh": is_ssh_course,
        "self_growth": is_self_growth_course,
        "community_work": is_community_work_course,
        "online": is_online_course,
        "btp": is_btp_course,
        "independent_work": is_independent_work,
    }
    tags = [name for name, check in checks.items() if check(course)]

    if policy is None:
        if is_cse_elective(course):
            tags.append("cse_electives")
    else:
        for bucket in policy.elective_buckets:
            if is_discipline_elective(course, bucket.prefixes):
                tags.append(bucket.bucket_id)
    return sorted(tags)
