"""
Submission Review Platform
Flask Application Factory.

Usage:
    from submission_review import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine, event as _sa_event

from submission_review.config import config
from submission_review.middleware.diagnostics import run_startup_diagnostics
from submission_review.middleware.jwt_auth import init_jwt_middleware
from submission_review.middleware.logging_config import configure_logging
from submission_review.middleware.rate_limiter import init_rate_limits
from submission_review.middleware.request_guards import init_request_guards
from submission_review.middleware.security_headers import init_security_headers
from submission_review.middleware.timing import init_request_timing
from submission_review.models import db
from submission_review.utils.errors import register_error_handlers

logger = logging.getLogger(__name__)


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def _load_config(app: Flask, config_name: str):
    config_cls = config[config_name]
    # ProductionConfig checks its required env vars when instantiated
    app.config.from_object(config_cls() if config_name == "production" else config_cls)


def _init_extensions(app: Flask):
    db.init_app(app)
    migrate.init_app(app, db)

    # Identity must be on g before the limiter computes its key
    init_request_timing(app)
    init_jwt_middleware(app)
    limiter.init_app(app)

    origins = app.config.get("CORS_ORIGINS", "*")
    if origins and origins != "*":
        CORS(app, origins=[o.strip() for o in origins.split(",") if o.strip()])
    else:
        CORS(app)


def _create_schema(app: Flask):
    """CREATE TABLE IF NOT EXISTS for every model; Alembic owns later changes."""
    from submission_review.models import auth, review, submission  # noqa: F401

    with app.app_context():
        try:
            db.create_all()
        except Exception as exc:
            app.logger.warning("db.create_all() failed: %s", exc)


def _register_cli(app: Flask):
    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        """Create the demo contributor and reviewer accounts."""
        from submission_review.services.repository import SubmissionRepository
        from submission_review.services.user_service import seed_demo_users

        created = seed_demo_users(SubmissionRepository(db.session))
        logger.info("Seeded %s demo user(s): %s", len(created), ", ".join(u.email for u in created) or "-")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to the APP_ENV env var, then "development".
    """
    config_name = config_name or os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    _load_config(app, config_name)
    os.makedirs(app.instance_path, exist_ok=True)

    configure_logging(app)
    _init_extensions(app)
    init_security_headers(app)
    init_request_guards(app)
    register_error_handlers(app)
    _create_schema(app)

    from submission_review.blueprints import ALL_BLUEPRINTS

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    @app.route("/")
    def index():
        return "Submission Review API is running. Access endpoints at /api/...", 200, {
            "Content-Type": "text/plain; charset=utf-8",
        }

    _register_cli(app)
    run_startup_diagnostics(app)
    # Blueprint limits can only be attached once the blueprints are registered
    init_rate_limits(app, limiter)

    return app
