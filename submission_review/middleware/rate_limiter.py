"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in submission_review/__init__.py with no
default limits; this module applies granular limits per route category.

Usage:
    from submission_review.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

from flask import g, request as flask_request

logger = logging.getLogger(__name__)

AUTH_LIMIT = "10/minute"
WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"


def rate_limit_key():
    """Key authenticated callers by user id, anonymous ones by remote IP."""
    identity = getattr(g, "identity", None)
    if identity is not None:
        return f"user:{identity.user_id}"
    return flask_request.remote_addr or "unknown"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits:
        - Auth endpoints:        10/minute per IP  (credential stuffing)
        - Submission endpoints:  60/minute per user
        - Dashboard endpoints:   200/minute per user
        - Health check:          exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("auth")
    if bp:
        limiter.limit(AUTH_LIMIT)(bp)

    bp = app.blueprints.get("submissions")
    if bp:
        limiter.limit(WRITE_LIMIT, key_func=rate_limit_key)(bp)

    bp = app.blueprints.get("dashboard")
    if bp:
        limiter.limit(READ_LIMIT, key_func=rate_limit_key)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    logger.info(
        "Rate limiter configured — auth: %s, submissions: %s, dashboard: %s",
        AUTH_LIMIT, WRITE_LIMIT, READ_LIMIT,
    )
