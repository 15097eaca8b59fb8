"""
Auth Blueprint — account registration and JWT login.

Endpoints:
  POST /api/auth/register   — name, email, password, role → new user
  POST /api/auth/login      — email + password → access token
  GET  /api/auth/me         — current user profile
"""

from flask import Blueprint, jsonify

from submission_review.auth import current_identity, login_required
from submission_review.core.exceptions import AuthenticationError
from submission_review.models import db
from submission_review.services.jwt_service import token_response
from submission_review.services.repository import SubmissionRepository
from submission_review.services.user_service import authenticate_user, get_user_by_id, register_user
from submission_review.utils.helpers import json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/register
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/register", methods=["POST"])
def register():
    """
    Create a contributor or reviewer account.

    Body: { "name": "...", "email": "...", "password": "...",
            "role": "contributor|reviewer", "phone": "..." }
    """
    data = json_body()
    user = register_user(
        SubmissionRepository(db.session),
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
        role=data.get("role"),
        phone=data.get("phone"),
    )
    return jsonify({
        "success": True,
        "message": "User registered successfully",
        "user": user.to_dict(),
    }), 201


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with email + password, return an access token.

    Body: { "email": "...", "password": "..." }
    """
    data = json_body()
    user = authenticate_user(SubmissionRepository(db.session), data.get("email"), data.get("password"))
    return jsonify({
        "success": True,
        "message": "Login successful",
        **token_response(user),
        "user": user.to_dict(),
    }), 200


# ═══════════════════════════════════════════════════════════════
# GET /api/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    """Current user profile, resolved from the bearer token."""
    identity = current_identity()
    user = get_user_by_id(SubmissionRepository(db.session), identity.user_id)
    if user is None:
        # Token outlived its account
        raise AuthenticationError("Invalid token")
    return jsonify({"success": True, "user": user.to_dict(), "identity": identity.to_dict()}), 200
