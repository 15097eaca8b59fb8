"""
Submissions Blueprint.

Endpoints:
    POST   /api/submissions                  (contributor)
           Body: { "title", "description", "category", "content_ref" }
           Returns: 201 with the new pending submission.

    GET    /api/submissions                  (any authenticated)
           Query params: status, page (default 1), limit (default 20)
           Returns: 200 with the caller-visible page + pagination.

    GET    /api/submissions/<id>             (any authenticated, visibility-scoped)
           Returns: 200 with the submission and its latest rejection feedback.

    GET    /api/submissions/<id>/reviews     (any authenticated, visibility-scoped)
           Returns: 200 with the review ledger for the submission.

    POST   /api/submissions/<id>/resubmit    (contributor, owner)
           Body: any of { "title", "description", "category", "content_ref" }
           Returns: 201 with the new pending submission in the chain.

    PUT    /api/submissions/<id>/review      (reviewer)
           Body: { "decision": "approved|rejected", "feedback": "..." }
           Returns: 200 with the Review and the updated submission.

Layer contract:
    - Blueprint: parse input, resolve caller identity, call the workflow,
                 shape the JSON response.
    - NO session calls here — all reads/writes go through SubmissionWorkflow.
    - Errors propagate as platform exceptions; app-wide handlers render them.
"""

import logging

from flask import Blueprint, jsonify, request

from submission_review.auth import current_identity, login_required, require_role
from submission_review.identity import Role
from submission_review.models import db
from submission_review.services.repository import SubmissionRepository
from submission_review.services.submission_workflow import DEFAULT_LIMIT, DEFAULT_PAGE, SubmissionWorkflow
from submission_review.utils.helpers import json_body

logger = logging.getLogger(__name__)

submission_bp = Blueprint("submissions", __name__, url_prefix="/api/submissions")


# ── Helpers ────────────────────────────────────────────────────────────────────


def _workflow() -> SubmissionWorkflow:
    """Build a workflow around this request's session."""
    return SubmissionWorkflow(SubmissionRepository(db.session))


def _submission_fields(data: dict) -> dict:
    """Pick submission fields from a JSON body.

    ``contentRef`` and ``file_url`` are accepted as aliases of ``content_ref``.
    """
    return {
        "title": data.get("title"),
        "description": data.get("description"),
        "category": data.get("category"),
        "content_ref": data.get("content_ref") or data.get("contentRef") or data.get("file_url"),
    }


# ── Routes ─────────────────────────────────────────────────────────────────────


@submission_bp.route("", methods=["POST"])
@require_role(Role.CONTRIBUTOR)
def create_submission():
    """Create a new pending submission for the calling contributor."""
    data = json_body()
    submission = _workflow().create_submission(current_identity(), _submission_fields(data))
    return jsonify({
        "success": True,
        "message": "Submission created successfully",
        "submission": submission.to_dict(),
    }), 201


@submission_bp.route("", methods=["GET"])
@login_required
def list_submissions():
    """List submissions visible to the caller.

    Contributors only see their own; reviewers see all.
    """
    page = _workflow().get_submissions(
        current_identity(),
        status=request.args.get("status") or None,
        page=request.args.get("page", DEFAULT_PAGE, type=int),
        limit=request.args.get("limit", DEFAULT_LIMIT, type=int),
    )
    return jsonify({
        "success": True,
        "data": page.items,
        "pagination": page.pagination(),
    }), 200


@submission_bp.route("/<submission_id>", methods=["GET"])
@login_required
def get_submission(submission_id: str):
    """Return one submission plus the feedback of its latest rejection."""
    submission = _workflow().get_submission_by_id(current_identity(), submission_id)
    return jsonify({"success": True, "submission": submission}), 200


@submission_bp.route("/<submission_id>/reviews", methods=["GET"])
@login_required
def get_review_history(submission_id: str):
    """Return the review ledger for a submission, oldest first."""
    reviews = _workflow().get_review_history(current_identity(), submission_id)
    return jsonify({"success": True, "reviews": reviews, "total": len(reviews)}), 200


@submission_bp.route("/<submission_id>/resubmit", methods=["POST"])
@require_role(Role.CONTRIBUTOR)
def resubmit(submission_id: str):
    """Resubmit a rejected submission as a new pending record."""
    data = json_body()
    submission = _workflow().resubmit(current_identity(), submission_id, _submission_fields(data))
    return jsonify({
        "success": True,
        "message": "Resubmission successful",
        "submission": submission.to_dict(),
    }), 201


@submission_bp.route("/<submission_id>/review", methods=["PUT"])
@require_role(Role.REVIEWER)
def review_submission(submission_id: str):
    """Approve or reject a pending submission.

    ``status`` is accepted as an alias of ``decision``.
    """
    data = json_body()
    submission, review = _workflow().review_submission(
        current_identity(),
        submission_id,
        data.get("decision") or data.get("status"),
        data.get("feedback"),
    )
    return jsonify({
        "success": True,
        "message": "Submission reviewed successfully",
        "review": review.to_dict(),
        "submission": submission.to_dict(),
    }), 200
