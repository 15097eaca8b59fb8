"""
Submission repository — the only code that talks to the database.

Wraps an injected SQLAlchemy session (in the app: the request-scoped
``db.session``) and exposes the reads and writes the workflow, the review
ledger and the dashboard need.  No service holds a session of its own.

Transactions:
    Writes happen inside ``unit_of_work()``: commit when the block exits
    cleanly, rollback on any exception.  Methods here only ``flush()``.

Review race:
    ``transition_status()`` is a compare-and-set ``UPDATE ... WHERE status =
    :expected``.  Two concurrent reviewers both issue it; the database
    serialises the row update, so only one sees ``rowcount == 1``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from submission_review.models.auth import User
from submission_review.models.review import Review
from submission_review.models.submission import STATUS_REJECTED, Submission

logger = logging.getLogger(__name__)


class SubmissionRepository:
    """Persistence for User, Submission and Review records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ── Transactions ─────────────────────────────────────────────────────

    @contextmanager
    def unit_of_work(self):
        """Commit on success, roll back and re-raise on any failure."""
        try:
            yield self
            self.session.commit()
        except Exception as exc:
            self.session.rollback()
            logger.debug("Unit of work rolled back: %s", type(exc).__name__)
            raise

    # ── Users ────────────────────────────────────────────────────────────

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def add_user(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    # ── Submissions ──────────────────────────────────────────────────────

    def get_submission(self, submission_id: str, *, refresh: bool = False) -> Submission | None:
        """Fetch by id.  ``refresh=True`` bypasses the identity map."""
        if not submission_id:
            return None
        options = {"populate_existing": True} if refresh else {}
        return self.session.get(Submission, str(submission_id), **options)

    def add_submission(self, submission: Submission) -> Submission:
        self.session.add(submission)
        self.session.flush()
        return submission

    def transition_status(self, submission_id: str, expected: str, new_status: str) -> bool:
        """Atomically move a submission from ``expected`` to ``new_status``.

        Returns True when exactly one row changed, False when the row is
        missing or no longer in ``expected``.
        """
        result = self.session.execute(
            update(Submission)
            .where(Submission.id == str(submission_id), Submission.status == expected)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def list_submissions(
        self,
        *,
        contributor_id: int | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Submission], int]:
        """Return one page of submissions (newest first) plus the filtered total."""
        filters = []
        if contributor_id is not None:
            filters.append(Submission.contributor_id == contributor_id)
        if status is not None:
            filters.append(Submission.status == status)

        total = self.session.scalar(
            select(func.count(Submission.id)).where(*filters)
        ) or 0
        rows = self.session.scalars(
            select(Submission)
            .where(*filters)
            .options(selectinload(Submission.contributor))
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return list(rows), total

    def count_submissions_by_status(self, *, contributor_id: int | None = None) -> dict[str, int]:
        stmt = select(Submission.status, func.count(Submission.id)).group_by(Submission.status)
        if contributor_id is not None:
            stmt = stmt.where(Submission.contributor_id == contributor_id)
        return {status: count for status, count in self.session.execute(stmt).all()}

    def count_submissions(self, *, status: str | None = None) -> int:
        stmt = select(func.count(Submission.id))
        if status is not None:
            stmt = stmt.where(Submission.status == status)
        return self.session.scalar(stmt) or 0

    # ── Reviews ──────────────────────────────────────────────────────────

    def add_review(self, review: Review) -> Review:
        self.session.add(review)
        self.session.flush()
        return review

    def list_reviews(
        self,
        *,
        submission_id: str | None = None,
        reviewer_id: int | None = None,
    ) -> list[Review]:
        stmt = select(Review).order_by(Review.reviewed_at, Review.id)
        if submission_id is not None:
            stmt = stmt.where(Review.submission_id == str(submission_id))
        if reviewer_id is not None:
            stmt = stmt.where(Review.reviewer_id == reviewer_id)
        return list(self.session.scalars(stmt).all())

    def latest_rejection(self, submission_id: str) -> Review | None:
        """Most recent rejected Review for a submission, or None."""
        return self.session.scalars(
            select(Review)
            .where(
                Review.submission_id == str(submission_id),
                Review.decision == STATUS_REJECTED,
            )
            .order_by(Review.reviewed_at.desc(), Review.id.desc())
            .limit(1)
        ).first()

    def count_reviews_by_decision(self, reviewer_id: int) -> dict[str, int]:
        rows = self.session.execute(
            select(Review.decision, func.count(Review.id))
            .where(Review.reviewer_id == reviewer_id)
            .group_by(Review.decision)
        ).all()
        return {decision: count for decision, count in rows}
