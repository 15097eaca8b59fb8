"""
Shared pytest fixtures for the Submission Review test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - contributor / other_contributor / reviewer: pre-created User rows
    - *_identity: IdentityContext for each of those users
    - auth_headers: builds a Bearer header for a user
"""

import pytest

from submission_review import create_app
from submission_review.identity import IdentityContext, Role
from submission_review.models import db as _db
from submission_review.models.auth import User
from submission_review.services.repository import SubmissionRepository
from submission_review.services.submission_workflow import SubmissionWorkflow

# bcrypt is slow; fixture users never log in with a password.
_DUMMY_HASH = "not-a-bcrypt-hash"


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users ────────────────────────────────────────────────────────────────


def make_user(email: str, role: str, name: str = "Test User") -> User:
    user = User(name=name, email=email, role=role, password_hash=_DUMMY_HASH)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def contributor():
    return make_user("alice@example.com", "contributor", name="Alice")


@pytest.fixture()
def other_contributor():
    return make_user("bob@example.com", "contributor", name="Bob")


@pytest.fixture()
def reviewer():
    return make_user("rita@example.com", "reviewer", name="Rita")


@pytest.fixture()
def second_reviewer():
    return make_user("ray@example.com", "reviewer", name="Ray")


@pytest.fixture()
def contributor_identity(contributor):
    return IdentityContext(user_id=contributor.id, role=Role.CONTRIBUTOR)


@pytest.fixture()
def other_contributor_identity(other_contributor):
    return IdentityContext(user_id=other_contributor.id, role=Role.CONTRIBUTOR)


@pytest.fixture()
def reviewer_identity(reviewer):
    return IdentityContext(user_id=reviewer.id, role=Role.REVIEWER)


@pytest.fixture()
def second_reviewer_identity(second_reviewer):
    return IdentityContext(user_id=second_reviewer.id, role=Role.REVIEWER)


# ── Services ─────────────────────────────────────────────────────────────


@pytest.fixture()
def repository():
    return SubmissionRepository(_db.session)


@pytest.fixture()
def workflow(repository):
    return SubmissionWorkflow(repository)


@pytest.fixture()
def auth_headers():
    """Return a function that builds an Authorization header for a user."""
    from submission_review.services.jwt_service import generate_access_token

    def _headers(user):
        token = generate_access_token(user.id, user.role, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
