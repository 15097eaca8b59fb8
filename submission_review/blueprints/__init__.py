"""
Submission Review Platform
Blueprint registry.
"""

from submission_review.blueprints.auth_bp import auth_bp
from submission_review.blueprints.dashboard_bp import dashboard_bp
from submission_review.blueprints.health_bp import health_bp
from submission_review.blueprints.submission_bp import submission_bp

ALL_BLUEPRINTS = (health_bp, auth_bp, submission_bp, dashboard_bp)
