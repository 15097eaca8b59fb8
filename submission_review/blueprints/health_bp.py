"""
Health check blueprint.

Endpoints:
    GET /health       — readiness, 200 whenever the process is serving
    GET /health/live  — database round-trip, schema presence and queue size
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from submission_review.models import REQUIRED_TABLES, db
from submission_review.models.submission import STATUS_PENDING
from submission_review.services.repository import SubmissionRepository

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


def _check_database() -> dict:
    t0 = time.perf_counter()
    db.session.execute(db.text("SELECT 1"))
    return {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}


def _check_schema() -> dict:
    present = set(sa_inspect(db.engine).get_table_names())
    missing = [name for name in REQUIRED_TABLES if name not in present]
    if missing:
        return {"status": "error", "missing_tables": missing}
    return {"status": "ok"}


def _check_review_queue() -> dict:
    pending = SubmissionRepository(db.session).count_submissions(status=STATUS_PENDING)
    return {"status": "ok", "pending_submissions": pending}


@health_bp.route("/live", methods=["GET"])
def live():
    """Run each dependency check; any failure turns the response into a 503."""
    checks = {}
    for name, check in (
        ("database", _check_database),
        ("schema", _check_schema),
        ("review_queue", _check_review_queue),
    ):
        try:
            checks[name] = check()
        except SQLAlchemyError as exc:
            db.session.rollback()
            checks[name] = {"status": "error"}
            logger.error("Health check %s failed: %s", name, exc)

    healthy = all(c["status"] == "ok" for c in checks.values())
    checks["app"] = {"name": "Submission Review API", "testing": current_app.testing}
    return jsonify({"status": "ok" if healthy else "degraded", "checks": checks}), 200 if healthy else 503
