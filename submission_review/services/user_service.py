"""
User Service — registration and credential checks.
"""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError

from submission_review.core.exceptions import AuthenticationError, ConflictError, ValidationError
from submission_review.identity import Role
from submission_review.models.auth import User
from submission_review.services.repository import SubmissionRepository
from submission_review.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)


def _text(value, field: str) -> str:
    """Strip a string field; reject any other JSON type."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field}", details={field: "must be a string"})
    return value.strip()


def normalize_email(email: str | None) -> str:
    return _text(email, "email").lower()


def register_user(
    repository: SubmissionRepository,
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    role: str | None,
    phone: str | None = None,
) -> User:
    """Create a new account with a bcrypt password hash."""
    name = _text(name, "name")
    email = normalize_email(email)
    role_value = _text(role, "role").lower()
    phone = _text(phone, "phone")
    if password is not None and not isinstance(password, str):
        raise ValidationError("Invalid password", details={"password": "must be a string"})

    missing = {
        field: "required"
        for field, value in (("name", name), ("email", email), ("password", password), ("role", role_value))
        if not value
    }
    if missing:
        raise ValidationError("Missing required fields", details=missing)

    try:
        parsed_role = Role.parse(role_value)
    except ValueError:
        raise ValidationError(
            "Invalid role",
            details={"role": f"must be one of: {', '.join(r.value for r in Role)}"},
        )

    try:
        valid = validate_email(email, check_deliverability=False)
        email = valid.normalized.lower()
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"})

    if repository.get_user_by_email(email):
        raise ConflictError("User", "email", "Email already exists")

    try:
        with repository.unit_of_work():
            user = repository.add_user(
                User(
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                    role=parsed_role.value,
                    phone=phone or None,
                )
            )
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        raise ConflictError("User", "email", "Email already exists")

    logger.info("User registered", extra={"user_id": user.id, "event_type": "registered"})
    return user


def authenticate_user(repository: SubmissionRepository, email: str | None, password: str | None) -> User:
    """Return the user for valid credentials; raise AuthenticationError otherwise."""
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError("Missing credentials")
    if not isinstance(password, str):
        raise ValidationError("Invalid password", details={"password": "must be a string"})

    user = repository.get_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return user


def get_user_by_id(repository: SubmissionRepository, user_id: int) -> User | None:
    return repository.get_user(user_id)


# ═══════════════════════════════════════════════════════════════
# Demo data
# ═══════════════════════════════════════════════════════════════
DEMO_USERS = (
    {"name": "Demo Contributor", "email": "contributor@example.com", "role": "contributor"},
    {"name": "Demo Reviewer", "email": "reviewer@example.com", "role": "reviewer"},
)
DEMO_PASSWORD = "ChangeMe123!"


def seed_demo_users(repository: SubmissionRepository, password: str = DEMO_PASSWORD) -> list[User]:
    """Register the demo accounts that don't exist yet. Returns the new users."""
    created = []
    for account in DEMO_USERS:
        if repository.get_user_by_email(account["email"]):
            continue
        created.append(register_user(repository, password=password, **account))
    return created
