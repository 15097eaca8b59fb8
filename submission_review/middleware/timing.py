"""
Request timing middleware.

Every response gets ``X-Request-ID`` and ``X-Request-Duration-Ms`` headers.
API requests are logged once on the way out with the caller identity and,
for submission routes, the submission id from the URL, so a single
submission's history can be grepped out of the JSON logs.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

# Probe endpoints hit by load balancers every few seconds
_QUIET_PREFIXES = ("/health",)

SLOW_THRESHOLD_MS = 1000


def _request_context(response, duration_ms: float) -> dict:
    identity = getattr(g, "identity", None)
    view_args = request.view_args or {}
    return {
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "remote_addr": request.remote_addr,
        "request_id": getattr(g, "request_id", ""),
        "user_id": identity.user_id if identity else None,
        "role": identity.role.value if identity else None,
        "submission_id": view_args.get("submission_id"),
    }


def _level_for(status_code: int, duration_ms: float) -> int:
    if status_code >= 500:
        return logging.ERROR
    if duration_ms > SLOW_THRESHOLD_MS:
        return logging.WARNING
    if status_code >= 400:
        return logging.INFO
    return logging.DEBUG


def init_request_timing(app: Flask):
    """Register before/after hooks for request timing."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    @app.after_request
    def _finish_timer(response):
        start = getattr(g, "request_start", None)
        if start is None:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"

        if request.path.startswith(_QUIET_PREFIXES):
            return response

        logger.log(
            _level_for(response.status_code, duration_ms),
            "%s %s -> %d (%.0fms)",
            request.method, request.path, response.status_code, duration_ms,
            extra=_request_context(response, duration_ms),
        )
        return response
