"""
JWT Auth Middleware — parses the bearer token, sets g.identity.

Runs before every request.  It never rejects a request itself; it records
either a verified ``IdentityContext`` in ``g.identity`` or the reason one is
missing in ``g.auth_error``.  Routes opt in with ``@login_required`` /
``@require_role`` from ``submission_review.auth``, which turn a missing
identity into a 401.
"""

import jwt as pyjwt
from flask import g, request

from submission_review.services.jwt_service import identity_from_token

# Paths that skip JWT parsing entirely
JWT_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/health",
)

NO_TOKEN = "No token provided"
TOKEN_EXPIRED = "Token expired"
TOKEN_INVALID = "Invalid token"


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.identity = None
        g.auth_error = NO_TOKEN

        path = request.path
        if not path.startswith("/api/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return

        try:
            g.identity = identity_from_token(token.strip())
            g.auth_error = None
        except pyjwt.ExpiredSignatureError:
            g.auth_error = TOKEN_EXPIRED
        except pyjwt.InvalidTokenError:
            g.auth_error = TOKEN_INVALID
