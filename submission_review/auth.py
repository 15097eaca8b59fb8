"""
Route protection decorators.

Usage:
    @submission_bp.route("", methods=["POST"])
    @require_role(Role.CONTRIBUTOR)
    def create_submission():
        caller = current_identity()
        ...

    @dashboard_bp.route("/stats", methods=["GET"])
    @login_required
    def stats():
        ...

The identity itself is established by ``middleware.jwt_auth``; these
decorators only enforce it.  Failures raise the platform exceptions so the
app-wide error handlers render them.
"""

import functools
import logging

from flask import g

from submission_review.core.exceptions import AuthenticationError, AuthorizationError
from submission_review.identity import IdentityContext, Role

logger = logging.getLogger(__name__)


def current_identity() -> IdentityContext:
    """Return the verified caller, or raise AuthenticationError."""
    identity = getattr(g, "identity", None)
    if identity is None:
        raise AuthenticationError(getattr(g, "auth_error", None) or "User not authenticated")
    return identity


def login_required(f):
    """Decorator: require any authenticated caller."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        current_identity()
        return f(*args, **kwargs)

    return decorated


def require_role(*roles: Role):
    """Decorator: require an authenticated caller holding one of ``roles``."""

    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            identity = current_identity()
            if identity.role not in roles:
                logger.warning(
                    "User %s denied: role '%s' not in %s on %s",
                    identity.user_id, identity.role.value,
                    [r.value for r in roles], f.__name__,
                )
                raise AuthorizationError("Forbidden: Insufficient permissions")
            return f(*args, **kwargs)

        return decorated

    return decorator
