"""
Auth Models — user accounts.

A user's role is fixed at registration; role changes are not supported.
"""

from datetime import datetime, timezone

from submission_review.models import db

VALID_ROLES = frozenset({"contributor", "reviewer"})


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(200), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(
        db.String(20),
        nullable=False,
        comment="contributor | reviewer",
    )
    phone = db.Column(db.String(40))
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint("role IN ('contributor', 'reviewer')", name="ck_users_role"),
    )

    submissions = db.relationship("Submission", back_populates="contributor", lazy="dynamic")
    reviews = db.relationship("Review", back_populates="reviewer", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "phone": self.phone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self):
        """Compact form embedded in submission listings."""
        return {"id": self.id, "name": self.name, "email": self.email}

    def __repr__(self) -> str:
        return f"<User #{self.id} {self.email} ({self.role})>"
