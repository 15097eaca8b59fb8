"""
Shared Flask-SQLAlchemy handle.

Models import ``db`` from here.  Services never use it directly: the
request-scoped ``db.session`` is handed to ``SubmissionRepository``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Tables the service cannot run without (checked at startup and by /health/live)
REQUIRED_TABLES = ("users", "submissions", "reviews")
