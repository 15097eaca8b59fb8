"""
Startup diagnostics — runs once when the Flask app starts.

Each check returns a short status string for the banner and may append a
human-readable issue.  Nothing here stops the app from starting.
"""

import logging
import sys

from flask import Flask
from sqlalchemy import inspect as sa_inspect

from submission_review.models import REQUIRED_TABLES, db
from submission_review.models.submission import MAX_RESUBMISSIONS

logger = logging.getLogger(__name__)

MIN_SECRET_BYTES = 32


def _check_database(app: Flask, issues: list[str]) -> str:
    uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    kind = "PostgreSQL" if uri.startswith("postgresql") else "SQLite" if uri.startswith("sqlite") else "unknown"
    try:
        db.session.execute(db.text("SELECT 1"))
    except Exception as exc:
        db.session.rollback()
        issues.append(f"Database unreachable: {exc}")
        return f"{kind} (FAILED)"
    return f"{kind} (ok)"


def _check_schema(app: Flask, issues: list[str]) -> str:
    try:
        present = set(sa_inspect(db.engine).get_table_names())
    except Exception:
        return "check failed"
    missing = [name for name in REQUIRED_TABLES if name not in present]
    if missing:
        issues.append("Tables missing — run 'flask db upgrade'")
        return f"missing {', '.join(missing)}"
    return f"ok ({len(REQUIRED_TABLES)} tables)"


def _check_jwt_secret(app: Flask, issues: list[str]) -> str:
    secret = app.config.get("JWT_SECRET_KEY") or app.config.get("SECRET_KEY") or ""
    if len(secret) < MIN_SECRET_BYTES:
        issues.append(f"JWT secret shorter than {MIN_SECRET_BYTES} bytes — set JWT_SECRET_KEY")
        return "WEAK"
    hours = int(app.config.get("JWT_ACCESS_EXPIRES", 0)) // 3600
    return f"ok (tokens valid {hours}h)"


def _check_limiter(app: Flask, issues: list[str]) -> str:
    if not app.config.get("RATELIMIT_ENABLED", True):
        return "disabled"
    storage = app.config.get("REDIS_URL", "memory://").split("://")[0]
    if storage == "memory" and not app.debug:
        issues.append("Rate limiter uses in-process memory — limits are per worker")
    return storage


_CHECKS = (
    ("Database", _check_database),
    ("Schema", _check_schema),
    ("JWT", _check_jwt_secret),
    ("Limiter", _check_limiter),
)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return

    issues: list[str] = []
    with app.app_context():
        rows = [("Python", ".".join(str(v) for v in sys.version_info[:3])), ("Debug", str(app.debug))]
        rows += [(label, check(app, issues)) for label, check in _CHECKS]
        rows.append(("Resubmits", f"max {MAX_RESUBMISSIONS} per submission"))

    width = 46
    lines = [f"║  {label:<11s} : {value:<{width}s}║" for label, value in rows]
    banner = "\n".join([
        "",
        "╔" + "═" * 62 + "╗",
        f"║  {'Submission Review API — Startup Diagnostics':<60s}║",
        "╠" + "═" * 62 + "╣",
        *lines,
        "╚" + "═" * 62 + "╝",
    ])
    logger.info(banner)

    if issues:
        logger.warning("Startup issues detected:")
        for issue in issues:
            logger.warning("  ⚠ %s", issue)
    else:
        logger.info("✅ All startup checks passed")
