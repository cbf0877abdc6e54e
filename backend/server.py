import os
import sys
import time
import threading
import hashlib
import json
from collections import OrderedDict
from dataclasses import asdict

# Ensure backend/ is on sys.path so sibling imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv

from gpa import compute_cgpa, compute_sgpa, running_cgpa_series, semester_summary
from progress import compute_progress
from projections import predict_cgpa, required_sgpa
from requirements import DEFAULT_BRANCH, POLICIES, get_policy, list_branches
from validators import (
    coerce_course,
    coerce_semesters,
    flatten_courses,
    validate_courses_body,
    validate_semesters_body,
)

load_dotenv()

app = Flask(__name__)

VERSION = "1.0.0"


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, float(raw))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


_SLOW_REQUEST_LOG_MS = _env_float("SLOW_REQUEST_LOG_MS", 750.0, minimum=0.0)
_REQUEST_CACHE_SIZE = _env_int("REQUEST_CACHE_SIZE", 128, minimum=1)


class _LruResponseCache:
    """Thread-safe bounded in-memory cache for JSON-serializable responses."""

    def __init__(self, max_size: int):
        self.max_size = max(1, int(max_size))
        self._lock = threading.Lock()
        self._items: OrderedDict[str, dict] = OrderedDict()

    def get(self, key: str):
        with self._lock:
            if key not in self._items:
                return None
            value = self._items.pop(key)
            self._items[key] = value
            return value

    def set(self, key: str, value: dict) -> None:
        with self._lock:
            if key in self._items:
                self._items.pop(key)
            self._items[key] = value
            while len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


_dashboard_response_cache = _LruResponseCache(_REQUEST_CACHE_SIZE)
_progress_response_cache = _LruResponseCache(_REQUEST_CACHE_SIZE)


def _cache_enabled() -> bool:
    return not app.config.get("TESTING", False)


def _stable_payload_hash(payload) -> str:
    normalized = payload if payload is not None else {}
    encoded = json.dumps(
        normalized,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    ).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def _request_cache_key(prefix: str, payload) -> str:
    return f"{prefix}:{VERSION}:{_stable_payload_hash(payload)}"


def _error(code: str, message: str, status: int = 400):
    return jsonify({
        "mode": "error",
        "error": {"error_code": code, "message": message},
    }), status


def _completed_semester_count(body: dict, semesters: list) -> int:
    raw = body.get("completed_semester_count")
    if raw in (None, ""):
        return len(semesters)
    return int(raw)


# ── Request hooks ──────────────────────────────────────────────────────────────
@app.before_request
def _start_request_timer():
    g._request_start_time = time.perf_counter()


@app.after_request
def _add_security_headers(response):
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "same-origin"

    started = getattr(g, "_request_start_time", None)
    if started is not None:
        duration_ms = (time.perf_counter() - started) * 1000.0
        if duration_ms >= _SLOW_REQUEST_LOG_MS:
            endpoint = request.endpoint or "unknown"
            print(
                f"[SLOW] {request.method} {request.path} "
                f"endpoint={endpoint} status={response.status_code} duration_ms={duration_ms:.1f}"
            )
    return response


# ── Error handlers ─────────────────────────────────────────────────────────────
@app.errorhandler(HTTPException)
def handle_http_error(e):
    code = "NOT_FOUND" if e.code == 404 else "HTTP_ERROR"
    return _error(code, e.description or e.name, e.code or 500)


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    print(f"[WARN] Unhandled error on {request.path}: {e!r}", file=sys.stderr)
    return _error("SERVER_ERROR", "An unexpected server error occurred.", 500)


# ── Routes ─────────────────────────────────────────────────────────────────────
@app.route("/health", methods=["GET"])
def health_endpoint():
    return jsonify({"status": "ok", "version": VERSION})


@app.route("/policies", methods=["GET"])
def list_policies():
    return jsonify({
        "branches": [
            {"branch": code, "label": POLICIES[code].label}
            for code in list_branches()
        ],
        "default_branch": DEFAULT_BRANCH,
    })


@app.route("/policies/<branch>", methods=["GET"])
def get_branch_policy(branch):
    policy = get_policy(branch)
    return jsonify({
        "requested": branch,
        "fallback": policy.branch != branch.strip().upper(),
        "policy": asdict(policy),
    })


@app.route("/sgpa", methods=["POST"])
def sgpa_endpoint():
    """SGPA for one semester's courses; called after every course add/remove."""
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_courses_body(body)
    if err_code:
        return _error(err_code, err_msg)

    courses = [coerce_course(c) for c in body["courses"]]
    return jsonify({"sgpa": compute_sgpa(courses)})


@app.route("/cgpa", methods=["POST"])
def cgpa_endpoint():
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_semesters_body(body)
    if err_code:
        return _error(err_code, err_msg)

    semesters = coerce_semesters(body["semesters"])
    return jsonify(compute_cgpa(semesters, _completed_semester_count(body, semesters)))


@app.route("/dashboard", methods=["POST"])
def dashboard_endpoint():
    """Headline CGPA figures plus the per-semester running CGPA series."""
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_semesters_body(body)
    if err_code:
        return _error(err_code, err_msg)

    cache_key = _request_cache_key("dashboard", body)
    if _cache_enabled():
        cached = _dashboard_response_cache.get(cache_key)
        if cached is not None:
            return jsonify(cached)

    semesters = coerce_semesters(body["semesters"])
    payload = {
        "summary": semester_summary(semesters),
        "trend": running_cgpa_series(semesters),
    }
    if _cache_enabled():
        _dashboard_response_cache.set(cache_key, payload)
    return jsonify(payload)


@app.route("/progress", methods=["POST"])
def progress_endpoint():
    """
    Graduation requirements progress.

    Accepts `semesters` (CGPA computed here unless `cgpa` is given) or a flat
    `courses` list with an explicit `cgpa`.
    """
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_semesters_body(body, allow_courses=True)
    if err_code:
        return _error(err_code, err_msg)

    cache_key = _request_cache_key("progress", body)
    if _cache_enabled():
        cached = _progress_response_cache.get(cache_key)
        if cached is not None:
            return jsonify(cached)

    if "semesters" in body:
        semesters = coerce_semesters(body["semesters"])
        courses = flatten_courses(semesters)
        if body.get("cgpa") in (None, ""):
            cgpa = compute_cgpa(semesters, _completed_semester_count(body, semesters))["cgpa"]
        else:
            cgpa = body.get("cgpa")
    else:
        courses = [coerce_course(c) for c in body["courses"]]
        cgpa = body.get("cgpa")

    payload = compute_progress(courses, cgpa, get_policy(body.get("branch")))
    payload["cgpa"] = cgpa
    if _cache_enabled():
        _progress_response_cache.set(cache_key, payload)
    return jsonify(payload)


@app.route("/projection", methods=["POST"])
def projection_endpoint():
    """Hypothetical calculator: mode=target (required SGPA) or mode=predict (next CGPA)."""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        return _error("INVALID_INPUT", "Request body must be a JSON object.")

    mode = str(body.get("mode") or "").strip().lower()
    if mode == "target":
        result = required_sgpa(
            body.get("target_cgpa"),
            body.get("current_cgpa"),
            body.get("current_credits"),
            body.get("total_credits_required", get_policy(body.get("branch")).total_credits),
        )
    elif mode == "predict":
        result = predict_cgpa(
            body.get("current_cgpa"),
            body.get("current_credits"),
            body.get("future_sgpa"),
            body.get("future_credits"),
        )
    else:
        return _error("INVALID_INPUT", "mode must be 'target' or 'predict'.")

    if result is None:
        return _error("INVALID_INPUT", "Projection inputs are missing, out of range, or leave no credits.")
    return jsonify({"mode": mode, **result})


if __name__ == "__main__":
    port = _env_int("PORT", 5000)
    print(f"[OK] Serving on port {port}")
    app.run(host="0.0.0.0", port=port, debug=False)
