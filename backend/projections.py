from normalizer import round_half_up, safe_number

MAX_GPA = 10

DISCLAIMER = (
    "Use graded credits only. Exclude non-graded credits (self growth, "
    "community work, S or X grades) since they do not affect CGPA."
)


def _numeric(*values) -> bool:
    return all(safe_number(v, default=None) is not None for v in values)


def required_sgpa(
    target_cgpa,
    current_cgpa,
    current_credits,
    total_credits_required,
) -> dict | None:
    """
    Average SGPA needed over the remaining credits to finish at target_cgpa.

    Args:
        target_cgpa: desired final CGPA, 0..10
        current_cgpa: CGPA so far
        current_credits: graded credits behind current_cgpa
        total_credits_required: graded credits at graduation

    Returns:
        {
          "required_sgpa": 8.4,
          "remaining_credits": 40,
          "achievable": True,
          "disclaimer": "..."
        }
        or None when the inputs are invalid or no credits remain.
    """
    if not _numeric(target_cgpa, current_cgpa, current_credits, total_credits_required):
        return None
    target = safe_number(target_cgpa)
    if target < 0 or target > MAX_GPA:
        return None

    total = safe_number(total_credits_required)
    credits = safe_number(current_credits)
    remaining = total - credits
    if remaining <= 0:
        return None

    needed = (target * total - safe_number(current_cgpa) * credits) / remaining
    return {
        "required_sgpa": round_half_up(needed),
        "remaining_credits": remaining,
        "achievable": needed <= MAX_GPA,
        "disclaimer": DISCLAIMER,
    }


def predict_cgpa(current_cgpa, current_credits, future_sgpa, future_credits) -> dict | None:
    """CGPA after one more semester at future_sgpa over future_credits, and the change."""
    if not _numeric(current_cgpa, current_credits, future_sgpa, future_credits):
        return None
    current = safe_number(current_cgpa)
    credits = safe_number(current_credits)
    f_credits = safe_number(future_credits)

    total_credits = credits + f_credits
    if total_credits <= 0:
        return None

    new_cgpa = (current * credits + safe_number(future_sgpa) * f_credits) / total_credits
    return {
        "cgpa": round_half_up(new_cgpa),
        "gain": round_half_up(new_cgpa - current),
        "disclaimer": DISCLAIMER,
    }
