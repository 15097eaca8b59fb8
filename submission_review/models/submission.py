"""
Submission model — one record per submitted (or resubmitted) work item.

State machine (per record):
    pending -> approved | rejected
    approved, rejected -> (terminal)

A rejected record is never reopened.  Resubmitting creates a NEW pending
record whose ``resubmission_count`` is one higher and whose
``original_submission_id`` / ``chain_root_id`` point at the first record of
the chain, so the chain is identified with a single column read.

``chain_root_id`` is populated on every record (a root points at itself);
``original_submission_id`` keeps the public contract: NULL on a root, the
root's id on every resubmission.
"""

import uuid
from datetime import datetime, timezone

from submission_review.models import db

# ── Constants ─────────────────────────────────────────────────────────────────

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

VALID_STATUSES = frozenset({STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED})

MAX_RESUBMISSIONS = 2


def new_submission_id() -> str:
    return str(uuid.uuid4())


class Submission(db.Model):
    __tablename__ = "submissions"

    id = db.Column(db.String(36), primary_key=True, default=new_submission_id)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(100), nullable=False)
    content_ref = db.Column(
        db.String(500),
        nullable=True,
        comment="Opaque reference to the submitted content (URL, storage key, ...)",
    )

    contributor_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = db.Column(
        db.String(20),
        nullable=False,
        default=STATUS_PENDING,
        comment="pending | approved | rejected",
    )
    resubmission_count = db.Column(db.Integer, nullable=False, default=0)

    original_submission_id = db.Column(
        db.String(36),
        db.ForeignKey("submissions.id", ondelete="SET NULL"),
        nullable=True,
        comment="Chain root id on resubmissions, NULL on the root itself",
    )
    chain_root_id = db.Column(
        db.String(36),
        nullable=False,
        index=True,
        comment="Always the first submission of the chain (own id on a root)",
    )

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_submissions_status"
        ),
        db.CheckConstraint(
            f"resubmission_count >= 0 AND resubmission_count <= {MAX_RESUBMISSIONS}",
            name="ck_submissions_resubmission_count",
        ),
        db.Index("ix_submissions_contributor_status", "contributor_id", "status"),
        db.Index("ix_submissions_status_created", "status", "created_at"),
    )

    contributor = db.relationship("User", back_populates="submissions")
    reviews = db.relationship(
        "Review",
        back_populates="submission",
        lazy="dynamic",
        order_by="Review.reviewed_at",
    )

    @property
    def resubmissions_remaining(self) -> int:
        return MAX_RESUBMISSIONS - (self.resubmission_count or 0)

    def to_dict(self, include_contributor: bool = False) -> dict:
        d = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "content_ref": self.content_ref,
            "contributor_id": self.contributor_id,
            "status": self.status,
            "resubmission_count": self.resubmission_count,
            "resubmissions_remaining": self.resubmissions_remaining,
            "original_submission_id": self.original_submission_id,
            "chain_root_id": self.chain_root_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_contributor:
            d["contributor"] = self.contributor.to_summary() if self.contributor else None
        return d

    def __repr__(self) -> str:
        return f"<Submission {self.id} {self.status} count={self.resubmission_count}>"
