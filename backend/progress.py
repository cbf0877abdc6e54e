import math

from classifier import (
    course_label,
    is_btp_course,
    is_community_work_course,
    is_discipline_elective,
    is_independent_work,
    is_online_course,
    is_self_growth_course,
    is_ssh_course,
)
from grades import is_completed
from normalizer import code_prefix, resolve_code, safe_credits, safe_number
from requirements import BranchPolicy


def percentage(earned: float, required: float) -> int:
    """Display percentage, capped at 100 and rounded half up."""
    if required <= 0:
        return 100
    return int(math.floor(min(earned / required, 1) * 100 + 0.5))


def _sub_discipline_for(course: dict, bucket) -> str | None:
    prefix = code_prefix(resolve_code(course))
    for sub in bucket.sub_disciplines:
        if prefix in sub.prefixes:
            return sub.sub_id
    return None


def compute_progress(courses, cgpa, policy: BranchPolicy) -> dict:
    """
    Graduation-requirement progress for one student under `policy`.

    Only completed courses count. Online and independent-work credits are
    capped before they reach the total; their raw sums are reported so an
    over-cap load can be flagged. Online courses still count toward elective
    buckets.
    """
    completed = [c for c in courses or [] if is_completed(c)]
    cgpa = safe_number(cgpa)

    # Step 1: capped categories.
    raw_online = 0.0
    raw_independent = 0.0
    for course in completed:
        if is_online_course(course):
            raw_online += safe_credits(course)
        if is_independent_work(course):
            raw_independent += safe_credits(course)

    valid_online = min(raw_online, policy.max_online_credits)
    valid_independent = min(raw_independent, policy.max_independent_credits)

    # Step 2: single accumulation pass.
    electives: dict[str, dict] = {
        bucket.bucket_id: {
            "earned": 0.0,
            "courses": [],
            "sub_earned": {sub.sub_id: 0.0 for sub in bucket.sub_disciplines},
            "sub_courses": {sub.sub_id: [] for sub in bucket.sub_disciplines},
        }
        for bucket in policy.elective_buckets
    }

    def credit_electives(course: dict, credits: float):
        for bucket in policy.elective_buckets:
            if not is_discipline_elective(course, bucket.prefixes):
                continue
            label = course_label(course)
            acc = electives[bucket.bucket_id]
            acc["earned"] += credits
            acc["courses"].append(label)
            sub_id = _sub_discipline_for(course, bucket)
            if sub_id is not None:
                acc["sub_earned"][sub_id] += credits
                acc["sub_courses"][sub_id].append(label)

    base_total = 0.0
    ssh_credits = 0.0
    sg_credits = 0.0
    cw_credits = 0.0
    btp_credits = 0.0
    ssh_courses: list[str] = []

    for course in completed:
        credits = safe_credits(course)
        is_oc = is_online_course(course)

        if is_oc or is_independent_work(course):
            # Capped credits enter the total via valid_online / valid_independent.
            if is_oc:
                credit_electives(course, credits)
            continue

        base_total += credits
        credit_electives(course, credits)

        if is_ssh_course(course):
            ssh_credits += credits
            ssh_courses.append(course_label(course))
        if is_self_growth_course(course):
            sg_credits += credits
        if is_community_work_course(course):
            cw_credits += credits
        if is_btp_course(course):
            btp_credits += credits

    # Step 3: totals and honors.
    total = base_total + valid_online + valid_independent
    honors = policy.honors
    has_enough_credits = total >= honors.total_credits
    has_btp = btp_credits > 0
    has_cgpa = cgpa >= honors.min_cgpa

    # Step 4: report.
    discipline_electives: dict[str, dict] = {}
    for bucket in policy.elective_buckets:
        acc = electives[bucket.bucket_id]
        sub_buckets = {
            sub.sub_id: {
                "label": sub.label,
                "earned": acc["sub_earned"][sub.sub_id],
                "required": sub.min_credits,
                "percentage": percentage(acc["sub_earned"][sub.sub_id], sub.min_credits),
                "satisfied": acc["sub_earned"][sub.sub_id] >= sub.min_credits,
                "courses": acc["sub_courses"][sub.sub_id],
            }
            for sub in bucket.sub_disciplines
        }
        discipline_electives[bucket.bucket_id] = {
            "label": bucket.label,
            "earned": acc["earned"],
            "required": bucket.required_credits,
            "percentage": percentage(acc["earned"], bucket.required_credits),
            "satisfied": (
                acc["earned"] >= bucket.required_credits
                and all(s["satisfied"] for s in sub_buckets.values())
            ),
            "courses": acc["courses"],
            "sub_buckets": sub_buckets,
        }

    return {
        "branch": policy.branch,
        "total": {
            "earned": total,
            "required": policy.total_credits,
            "percentage": percentage(total, policy.total_credits),
        },
        "discipline_electives": discipline_electives,
        "ssh": {
            "earned": ssh_credits,
            "required": policy.ssh_credits,
            "percentage": percentage(ssh_credits, policy.ssh_credits),
            "courses": ssh_courses,
        },
        "self_growth": {
            "earned": sg_credits,
            "required": policy.sg_credits,
            "completed": sg_credits >= policy.sg_credits,
        },
        "community_work": {
            "earned": cw_credits,
            "required": policy.cw_credits,
            "completed": cw_credits >= policy.cw_credits,
        },
        "online": {
            "earned": raw_online,
            "counted": valid_online,
            "max": policy.max_online_credits,
            "within_limit": raw_online <= policy.max_online_credits,
        },
        "independent_work": {
            "earned": raw_independent,
            "counted": valid_independent,
            "max": policy.max_independent_credits,
            "within_limit": raw_independent <= policy.max_independent_credits,
        },
        "btp": {
            "earned": btp_credits,
            "has_btp": has_btp,
            "min": policy.btp.min_credits,
            "max": policy.btp.max_credits,
        },
        "honors": {
            "eligible": has_enough_credits and (has_btp or not honors.requires_btp) and has_cgpa,
            "has_enough_credits": has_enough_credits,
            "has_btp": has_btp,
            "has_cgpa": has_cgpa,
            "current_credits": total,
            "required_credits": honors.total_credits,
            "min_cgpa": honors.min_cgpa,
        },
    }
