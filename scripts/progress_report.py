"""
Print a CGPA summary, trend and graduation-requirements report for a
transcript snapshot.

Usage:
    python scripts/progress_report.py --path transcript.xlsx
    python scripts/progress_report.py --path exports/ --branch CSAM
    python scripts/progress_report.py --path transcript.xlsx --completed-semesters 7
"""

import argparse
import os
import sys

BACKEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend")
sys.path.insert(0, BACKEND_DIR)

from data_loader import load_transcript
from gpa import compute_cgpa, running_cgpa_series
from progress import compute_progress
from requirements import DEFAULT_BRANCH, get_policy
from validators import flatten_courses


def _fmt(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_report(cgpa_result: dict, trend: list, progress: dict) -> str:
    lines = [
        f"CGPA {cgpa_result['cgpa']:.2f}  "
        f"(earned {_fmt(cgpa_result['earned_credits'])} cr, "
        f"graded {_fmt(cgpa_result['total_credits_considered'])} cr, "
        f"excluded {_fmt(cgpa_result['removed_credits'])} cr)",
        "",
        "Trend:",
    ]
    for point in trend:
        lines.append(
            f"  {point['label']:<10} SGPA {point['sgpa']:>5}  CGPA {point['cgpa']:>5}  "
            f"{_fmt(point['credits'])} cr"
        )

    total = progress["total"]
    lines += [
        "",
        f"Requirements ({progress['branch']}):",
        f"  Total credits       {_fmt(total['earned'])}/{total['required']} ({total['percentage']}%)",
    ]
    for bucket in progress["discipline_electives"].values():
        lines.append(
            f"  {bucket['label']:<20}{_fmt(bucket['earned'])}/{bucket['required']} ({bucket['percentage']}%)"
        )
        for sub in bucket["sub_buckets"].values():
            mark = "ok" if sub["satisfied"] else "short"
            lines.append(f"    {sub['label']:<18}{_fmt(sub['earned'])}/{sub['required']} [{mark}]")

    ssh = progress["ssh"]
    lines.append(f"  SSH                 {_fmt(ssh['earned'])}/{ssh['required']} ({ssh['percentage']}%)")
    for key, label in (("self_growth", "Self Growth"), ("community_work", "Community Work")):
        item = progress[key]
        mark = "ok" if item["completed"] else "short"
        lines.append(f"  {label:<20}{_fmt(item['earned'])}/{item['required']} [{mark}]")
    for key, label in (("online", "Online (cap)"), ("independent_work", "IP/IS/UR (cap)")):
        item = progress[key]
        mark = "ok" if item["within_limit"] else "over cap"
        lines.append(f"  {label:<20}{_fmt(item['earned'])}/{item['max']} [{mark}]")

    honors = progress["honors"]
    lines.append(f"  BTP                 {_fmt(progress['btp']['earned'])} cr")
    lines.append(
        f"  Honors              {'eligible' if honors['eligible'] else 'not eligible'} "
        f"(credits {'ok' if honors['has_enough_credits'] else 'short'}, "
        f"BTP {'ok' if honors['has_btp'] else 'missing'}, "
        f"CGPA {'ok' if honors['has_cgpa'] else 'below ' + str(honors['min_cgpa'])})"
    )
    return "\n".join(lines)


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Report CGPA and graduation progress for a transcript snapshot.",
    )
    parser.add_argument("--path", type=str, required=True, help="Workbook (.xlsx) or CSV directory.")
    parser.add_argument("--branch", type=str, default=DEFAULT_BRANCH, help="Branch code (default CSE).")
    parser.add_argument(
        "--completed-semesters", type=int, default=None,
        help="Completed semester count for the exclusion rule (default: all loaded semesters).",
    )
    opts = parser.parse_args(args)

    try:
        data = load_transcript(opts.path)
    except (FileNotFoundError, ValueError) as exc:
        print(f"[FATAL] Failed to load transcript: {exc}", file=sys.stderr)
        return 1

    semesters = data["semesters"]
    count = opts.completed_semesters if opts.completed_semesters is not None else len(semesters)
    cgpa_result = compute_cgpa(semesters, count)
    trend = running_cgpa_series(semesters)
    progress = compute_progress(flatten_courses(semesters), cgpa_result["cgpa"], get_policy(opts.branch))

    print(format_report(cgpa_result, trend, progress))
    return 0


if __name__ == "__main__":
    sys.exit(main())
