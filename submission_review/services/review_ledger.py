"""
Review Ledger — append-only record of review decisions.

Design decisions:
    - Review rows are APPEND-ONLY.  There is no update or delete path.
    - ``append()`` is only called from inside SubmissionWorkflow's review
      unit of work; it flushes but never commits, so the Review row and the
      Submission status change land in the same transaction.
    - Read helpers exist for audit listings and dashboard aggregation.
      Workflow decisions never read the ledger.
"""

from __future__ import annotations

import logging

from submission_review.models.review import DECISION_APPROVED, DECISION_REJECTED, Review
from submission_review.services.repository import SubmissionRepository

logger = logging.getLogger(__name__)


class ReviewLedger:
    def __init__(self, repository: SubmissionRepository) -> None:
        self.repository = repository

    def append(
        self,
        *,
        submission_id: str,
        reviewer_id: int,
        decision: str,
        feedback: str | None,
    ) -> Review:
        """Add one Review row to the current unit of work."""
        review = self.repository.add_review(
            Review(
                submission_id=submission_id,
                reviewer_id=reviewer_id,
                decision=decision,
                feedback=feedback,
            )
        )
        logger.debug(
            "Review appended",
            extra={"submission_id": submission_id, "user_id": reviewer_id, "event_type": decision},
        )
        return review

    def list_for_submission(self, submission_id: str) -> list[Review]:
        """All decisions for a submission, oldest first."""
        return self.repository.list_reviews(submission_id=submission_id)

    def list_for_reviewer(self, reviewer_id: int) -> list[Review]:
        return self.repository.list_reviews(reviewer_id=reviewer_id)

    def count_by_decision(self, reviewer_id: int) -> dict[str, int]:
        """``{"approved": n, "rejected": m}`` for one reviewer (zeros included)."""
        counts = {DECISION_APPROVED: 0, DECISION_REJECTED: 0}
        counts.update(self.repository.count_reviews_by_decision(reviewer_id))
        return counts
