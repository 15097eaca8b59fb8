"""
Tests: DashboardAggregator — role-scoped stats.
"""

from submission_review.identity import IdentityContext
from submission_review.services.dashboard_service import DashboardAggregator


def _create(workflow, caller, title="Item"):
    return workflow.create_submission(
        caller, {"title": title, "description": "Body", "category": "general"}
    )


def test_contributor_stats_empty(repository, contributor_identity):
    stats = DashboardAggregator(repository).get_stats(contributor_identity)
    assert stats == {"total_submissions": 0, "pending": 0, "approved": 0, "rejected": 0}


def test_contributor_stats_counts_own_only(
    repository, workflow, contributor_identity, other_contributor_identity, reviewer_identity
):
    """3 pending, 1 approved, 2 rejected -> total 6."""
    subs = [_create(workflow, contributor_identity, f"s{i}") for i in range(6)]
    workflow.review_submission(reviewer_identity, subs[0].id, "approved")
    workflow.review_submission(reviewer_identity, subs[1].id, "rejected", "no")
    workflow.review_submission(reviewer_identity, subs[2].id, "rejected", "no")
    _create(workflow, other_contributor_identity, "someone else")

    stats = DashboardAggregator(repository).get_stats(contributor_identity)

    assert stats == {"total_submissions": 6, "pending": 3, "approved": 1, "rejected": 2}


def test_reviewer_stats(
    repository, workflow, contributor_identity, other_contributor_identity,
    reviewer_identity, second_reviewer_identity,
):
    a = [_create(workflow, contributor_identity, f"a{i}") for i in range(3)]
    b = [_create(workflow, other_contributor_identity, f"b{i}") for i in range(2)]
    workflow.review_submission(reviewer_identity, a[0].id, "approved")
    workflow.review_submission(reviewer_identity, a[1].id, "rejected", "no")
    workflow.review_submission(second_reviewer_identity, b[0].id, "approved")

    stats = DashboardAggregator(repository).get_stats(reviewer_identity)

    # pending queue is global; decisions are the caller's own
    assert stats == {"pending_reviews": 2, "total_reviewed": 2, "approved": 1, "rejected": 1}


def test_reviewer_stats_empty(repository, reviewer_identity):
    stats = DashboardAggregator(repository).get_stats(reviewer_identity)
    assert stats == {"pending_reviews": 0, "total_reviewed": 0, "approved": 0, "rejected": 0}


def test_unrecognised_role_yields_empty_stats(repository, contributor):
    caller = IdentityContext(user_id=contributor.id, role="auditor")
    assert DashboardAggregator(repository).get_stats(caller) == {}


def test_resubmission_counts_as_new_submission(
    repository, workflow, contributor_identity, reviewer_identity
):
    s1 = _create(workflow, contributor_identity)
    workflow.review_submission(reviewer_identity, s1.id, "rejected", "again")
    workflow.resubmit(contributor_identity, s1.id, {})

    stats = DashboardAggregator(repository).get_stats(contributor_identity)

    assert stats == {"total_submissions": 2, "pending": 1, "approved": 0, "rejected": 1}
