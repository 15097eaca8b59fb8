"""
Security headers middleware.

The service only returns JSON and a plain-text banner, so the policy is the
strict API variant: nothing may be framed, embedded or sniffed.

Usage:
    from submission_review.middleware.security_headers import init_security_headers
    init_security_headers(app)
"""

API_SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


def init_security_headers(app):
    """Register after_request handler that injects security headers."""

    @app.after_request
    def _add_security_headers(response):
        for name, value in API_SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)

        # Responses carry per-caller data behind a bearer token
        if response.mimetype == "application/json":
            response.headers.setdefault("Cache-Control", "no-store")

        response.headers.pop("Server", None)
        return response
