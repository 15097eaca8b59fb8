"""
Submission Workflow Service — lifecycle state machine for submissions.

Manages:
  - Creation (contributors only)
  - Review decisioning (reviewers only): pending -> approved | rejected
  - Resubmission chaining after rejection, capped at MAX_RESUBMISSIONS
  - Role-scoped reads (contributors see their own, reviewers see all)

Design decisions:
    - Stateless between calls.  A workflow is built per request around an
      injected SubmissionRepository; nothing is cached across calls.
    - Approved and rejected records are terminal.  Resubmission creates a
      new pending record that points at the chain root; the old record is
      never touched.
    - The review status check and the Review append happen in one unit of
      work.  The check is a compare-and-set UPDATE, so of two concurrent
      reviewers exactly one wins and the other gets StateConflictError.

Usage:
    from submission_review.services.repository import SubmissionRepository
    from submission_review.services.submission_workflow import SubmissionWorkflow

    workflow = SubmissionWorkflow(SubmissionRepository(db.session))
    submission = workflow.create_submission(caller, {"title": ..., ...})
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from submission_review.core.exceptions import (
    AuthorizationError,
    LimitExceededError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from submission_review.identity import IdentityContext, Role, require_role
from submission_review.models.review import DECISION_REJECTED, VALID_DECISIONS, Review
from submission_review.models.submission import (
    MAX_RESUBMISSIONS,
    STATUS_PENDING,
    STATUS_REJECTED,
    VALID_STATUSES,
    Submission,
    new_submission_id,
)
from submission_review.services.repository import SubmissionRepository
from submission_review.services.review_ledger import ReviewLedger

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_REQUIRED_FIELDS = ("title", "description", "category")
_EDITABLE_FIELDS = ("title", "description", "category", "content_ref")


@dataclass(frozen=True)
class SubmissionPage:
    """One page of submissions plus pagination metadata."""

    items: list[dict]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
        }


# ── Private helpers ────────────────────────────────────────────────────────────


def _clean(value) -> str | None:
    """Strip strings; treat blank strings as absent."""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _owner_scope(caller: IdentityContext) -> int | None:
    """Contributor id to filter on, or None when the caller sees everything."""
    if caller.role is Role.CONTRIBUTOR:
        return caller.user_id
    if caller.role is Role.REVIEWER:
        return None
    raise AuthorizationError("Unrecognised role")


def _check_visible(caller: IdentityContext, submission: Submission) -> None:
    owner = _owner_scope(caller)
    if owner is not None and submission.contributor_id != owner:
        raise AuthorizationError("Access denied")


# ── Public API ─────────────────────────────────────────────────────────────────


class SubmissionWorkflow:
    def __init__(
        self,
        repository: SubmissionRepository,
        ledger: ReviewLedger | None = None,
    ) -> None:
        self.repository = repository
        self.ledger = ledger or ReviewLedger(repository)

    # ── Writes ───────────────────────────────────────────────────────────

    def create_submission(self, caller: IdentityContext, data: dict) -> Submission:
        """Create a new pending submission owned by the calling contributor.

        Raises:
            AuthorizationError: caller is not a contributor.
            ValidationError: title, description or category missing/blank.
        """
        require_role(caller, Role.CONTRIBUTOR, "create submissions")

        fields = {name: _clean(data.get(name)) for name in _EDITABLE_FIELDS}
        missing = {name: "required" for name in _REQUIRED_FIELDS if not fields[name]}
        if missing:
            raise ValidationError("Missing required fields", details=missing)

        submission_id = new_submission_id()
        with self.repository.unit_of_work():
            submission = self.repository.add_submission(
                Submission(
                    id=submission_id,
                    contributor_id=caller.user_id,
                    status=STATUS_PENDING,
                    resubmission_count=0,
                    original_submission_id=None,
                    chain_root_id=submission_id,
                    **fields,
                )
            )

        logger.info(
            "Submission created",
            extra={"submission_id": submission_id, "user_id": caller.user_id, "event_type": "created"},
        )
        return submission

    def review_submission(
        self,
        caller: IdentityContext,
        submission_id: str,
        decision: str | None,
        feedback: str | None = None,
    ) -> tuple[Submission, Review]:
        """Approve or reject a pending submission and append its Review.

        The status change and the Review row commit together or not at all.

        Raises:
            AuthorizationError: caller is not a reviewer.
            ValidationError: invalid decision, or rejection without feedback.
            NotFoundError: no such submission.
            StateConflictError: submission is no longer pending.
        """
        require_role(caller, Role.REVIEWER, "review submissions")

        decision = _clean(decision)
        decision = decision.lower() if decision else None
        if decision not in VALID_DECISIONS:
            raise ValidationError(
                "Invalid status",
                details={"decision": f"must be one of: {', '.join(sorted(VALID_DECISIONS))}"},
            )

        feedback = _clean(feedback)
        if decision == DECISION_REJECTED and not feedback:
            raise ValidationError(
                "Feedback is required for rejection",
                details={"feedback": "required when decision is rejected"},
            )

        with self.repository.unit_of_work():
            if not self.repository.transition_status(submission_id, STATUS_PENDING, decision):
                current = self.repository.get_submission(submission_id, refresh=True)
                if current is None:
                    raise NotFoundError("Submission", submission_id)
                raise StateConflictError(
                    f"Submission is already {current.status}",
                    current_status=current.status,
                )
            review = self.ledger.append(
                submission_id=submission_id,
                reviewer_id=caller.user_id,
                decision=decision,
                feedback=feedback,
            )

        submission = self.repository.get_submission(submission_id, refresh=True)
        logger.info(
            "Submission reviewed",
            extra={"submission_id": submission_id, "user_id": caller.user_id, "event_type": decision},
        )
        return submission, review

    def resubmit(self, caller: IdentityContext, submission_id: str, data: dict | None = None) -> Submission:
        """Create the next pending record in a rejected submission's chain.

        Omitted or blank fields are copied from the referenced submission.
        The new record points at the chain root, never at an intermediate link.

        Raises:
            AuthorizationError: caller is not a contributor, or not the owner.
            NotFoundError: no such submission.
            StateConflictError: the referenced submission is not rejected.
            LimitExceededError: the referenced submission already used
                MAX_RESUBMISSIONS resubmissions.
        """
        require_role(caller, Role.CONTRIBUTOR, "resubmit submissions")
        data = data or {}

        original = self.repository.get_submission(submission_id)
        if original is None:
            raise NotFoundError("Submission", submission_id)
        if original.contributor_id != caller.user_id:
            raise AuthorizationError("Access denied")
        if original.status != STATUS_REJECTED:
            raise StateConflictError(
                "Only rejected submissions can be resubmitted",
                current_status=original.status,
            )
        if original.resubmission_count >= MAX_RESUBMISSIONS:
            raise LimitExceededError(
                f"Maximum resubmission limit reached ({MAX_RESUBMISSIONS} attempts used)",
                limit=MAX_RESUBMISSIONS,
            )

        fields = {
            name: _clean(data.get(name)) or getattr(original, name)
            for name in _EDITABLE_FIELDS
        }
        with self.repository.unit_of_work():
            resubmission = self.repository.add_submission(
                Submission(
                    id=new_submission_id(),
                    contributor_id=caller.user_id,
                    status=STATUS_PENDING,
                    resubmission_count=original.resubmission_count + 1,
                    original_submission_id=original.chain_root_id,
                    chain_root_id=original.chain_root_id,
                    **fields,
                )
            )

        logger.info(
            "Submission resubmitted",
            extra={
                "submission_id": resubmission.id,
                "user_id": caller.user_id,
                "event_type": "resubmitted",
            },
        )
        return resubmission

    # ── Reads ────────────────────────────────────────────────────────────

    def get_submissions(
        self,
        caller: IdentityContext,
        status: str | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> SubmissionPage:
        """List submissions visible to the caller, newest first."""
        status = _clean(status)
        if status is not None and status not in VALID_STATUSES:
            raise ValidationError(
                "Invalid status filter",
                details={"status": f"must be one of: {', '.join(sorted(VALID_STATUSES))}"},
            )
        if page is None:
            page = DEFAULT_PAGE
        if limit is None:
            limit = DEFAULT_LIMIT
        if page < 1:
            raise ValidationError("page must be >= 1", details={"page": page})
        if not 1 <= limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}", details={"limit": limit})

        rows, total = self.repository.list_submissions(
            contributor_id=_owner_scope(caller),
            status=status,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return SubmissionPage(
            items=[s.to_dict(include_contributor=True) for s in rows],
            total=total,
            page=page,
            limit=limit,
        )

    def get_submission_by_id(self, caller: IdentityContext, submission_id: str) -> dict:
        """Return one submission with its latest rejection feedback.

        Raises:
            NotFoundError: no such submission.
            AuthorizationError: a contributor asked for someone else's submission.
        """
        submission = self.repository.get_submission(submission_id)
        if submission is None:
            raise NotFoundError("Submission", submission_id)
        _check_visible(caller, submission)

        rejection = self.repository.latest_rejection(submission.id)
        result = submission.to_dict(include_contributor=True)
        result["feedback"] = rejection.feedback if rejection else None
        return result

    def get_review_history(self, caller: IdentityContext, submission_id: str) -> list[dict]:
        """Ledger entries for a submission, oldest first (audit only)."""
        submission = self.repository.get_submission(submission_id)
        if submission is None:
            raise NotFoundError("Submission", submission_id)
        _check_visible(caller, submission)
        return [r.to_dict() for r in self.ledger.list_for_submission(submission.id)]
