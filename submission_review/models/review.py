"""
Review ledger — Review model.

Every successful review decision appends exactly one Review row in the same
transaction that moves the Submission out of ``pending``.  Rows are never
updated or deleted.
"""

from datetime import datetime, timezone

from submission_review.models import db
from submission_review.models.submission import STATUS_APPROVED, STATUS_REJECTED

DECISION_APPROVED = STATUS_APPROVED
DECISION_REJECTED = STATUS_REJECTED

VALID_DECISIONS = frozenset({DECISION_APPROVED, DECISION_REJECTED})


class Review(db.Model):
    """
    Immutable review decision.

    Business rules:
    - feedback is mandatory when decision = rejected (enforced in the workflow).
    - Exactly one row per successful decisioning call.
    """

    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(
        db.String(36),
        db.ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewer_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    decision = db.Column(
        db.String(20),
        nullable=False,
        comment="approved | rejected",
    )
    feedback = db.Column(db.Text, nullable=True)
    reviewed_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint("decision IN ('approved', 'rejected')", name="ck_reviews_decision"),
        db.Index("ix_reviews_reviewer_decision", "reviewer_id", "decision"),
        db.Index("ix_reviews_submission_reviewed", "submission_id", "reviewed_at"),
    )

    submission = db.relationship("Submission", back_populates="reviews")
    reviewer = db.relationship("User", back_populates="reviews")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "submission_id": self.submission_id,
            "reviewer_id": self.reviewer_id,
            "decision": self.decision,
            "feedback": self.feedback,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }

    def __repr__(self) -> str:
        return f"<Review #{self.id} {self.submission_id} {self.decision}>"
