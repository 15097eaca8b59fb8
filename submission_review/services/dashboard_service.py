"""
Dashboard Stats Service

Read-only, role-scoped aggregate counts:
  - contributor: own submissions grouped by status
  - reviewer:    global pending queue + own decisions grouped by outcome

Any other role yields an empty stats object rather than an error.
"""

import logging

from submission_review.identity import IdentityContext, Role
from submission_review.models.submission import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED
from submission_review.services.repository import SubmissionRepository
from submission_review.services.review_ledger import ReviewLedger

logger = logging.getLogger(__name__)


class DashboardAggregator:
    def __init__(self, repository: SubmissionRepository, ledger: ReviewLedger | None = None):
        self.repository = repository
        self.ledger = ledger or ReviewLedger(repository)

    def get_stats(self, caller: IdentityContext) -> dict:
        if caller.role is Role.CONTRIBUTOR:
            return self.contributor_stats(caller.user_id)
        if caller.role is Role.REVIEWER:
            return self.reviewer_stats(caller.user_id)
        logger.warning("Dashboard stats requested for unrecognised role %r", caller.role)
        return {}

    def contributor_stats(self, contributor_id: int) -> dict:
        """Counts of the contributor's own submissions by status."""
        counts = {STATUS_PENDING: 0, STATUS_APPROVED: 0, STATUS_REJECTED: 0}
        counts.update(self.repository.count_submissions_by_status(contributor_id=contributor_id))
        return {
            "total_submissions": counts[STATUS_PENDING] + counts[STATUS_APPROVED] + counts[STATUS_REJECTED],
            "pending": counts[STATUS_PENDING],
            "approved": counts[STATUS_APPROVED],
            "rejected": counts[STATUS_REJECTED],
        }

    def reviewer_stats(self, reviewer_id: int) -> dict:
        """Global pending queue size plus the reviewer's own decisions."""
        decisions = self.ledger.count_by_decision(reviewer_id)
        return {
            "pending_reviews": self.repository.count_submissions(status=STATUS_PENDING),
            "total_reviewed": decisions[STATUS_APPROVED] + decisions[STATUS_REJECTED],
            "approved": decisions[STATUS_APPROVED],
            "rejected": decisions[STATUS_REJECTED],
        }
