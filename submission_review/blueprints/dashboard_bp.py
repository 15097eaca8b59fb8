"""
Dashboard Blueprint

Role-scoped aggregate counts for the calling user.
"""

from flask import Blueprint, jsonify

from submission_review.auth import current_identity, login_required
from submission_review.models import db
from submission_review.services.dashboard_service import DashboardAggregator
from submission_review.services.repository import SubmissionRepository

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats", methods=["GET"])
@login_required
def stats():
    """Submission counts (contributor) or review queue and decisions (reviewer)."""
    aggregator = DashboardAggregator(SubmissionRepository(db.session))
    return jsonify({"success": True, "stats": aggregator.get_stats(current_identity())}), 200
