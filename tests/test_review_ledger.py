"""
Tests: ReviewLedger — append-only review decisions.

Covers:
  - exactly one Review row per successful decision
  - status change and Review row commit together or not at all
  - the compare-and-set guard that lets only one of two reviewers win, also across
    two sessions racing on separate threads
  - audit history and per-reviewer decision counts
"""

import threading

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from submission_review.core.exceptions import AuthorizationError, StateConflictError
from submission_review.identity import IdentityContext, Role
from submission_review.models import db
from submission_review.models.auth import User
from submission_review.models.review import Review
from submission_review.models.submission import Submission
from submission_review.services.repository import SubmissionRepository
from submission_review.services.review_ledger import ReviewLedger
from submission_review.services.submission_workflow import SubmissionWorkflow


def _create(workflow, caller, title="Design doc"):
    return workflow.create_submission(
        caller, {"title": title, "description": "Draft", "category": "docs"}
    )


class _ExplodingLedger(ReviewLedger):
    def append(self, **kwargs):
        raise RuntimeError("ledger unavailable")


class TestAppend:
    def test_one_row_per_decision(self, workflow, contributor_identity, reviewer_identity):
        sub = _create(workflow, contributor_identity)

        workflow.review_submission(reviewer_identity, sub.id, "rejected", "needs detail")

        rows = Review.query.filter_by(submission_id=sub.id).all()
        assert len(rows) == 1
        assert rows[0].decision == "rejected"
        assert rows[0].feedback == "needs detail"
        assert rows[0].reviewed_at is not None

    def test_failed_append_rolls_back_status(
        self, repository, workflow, contributor_identity, reviewer_identity
    ):
        sub = _create(workflow, contributor_identity)
        broken = SubmissionWorkflow(repository, ledger=_ExplodingLedger(repository))

        with pytest.raises(RuntimeError):
            broken.review_submission(reviewer_identity, sub.id, "approved")

        assert repository.get_submission(sub.id, refresh=True).status == "pending"
        assert Review.query.count() == 0

    def test_append_does_not_commit(self, repository, workflow, contributor_identity, reviewer):
        sub = _create(workflow, contributor_identity)
        ledger = ReviewLedger(repository)

        ledger.append(submission_id=sub.id, reviewer_id=reviewer.id, decision="approved", feedback=None)
        db.session.rollback()

        assert Review.query.count() == 0


class TestReviewRace:
    def test_second_reviewer_gets_conflict(
        self, workflow, contributor_identity, reviewer_identity, second_reviewer_identity
    ):
        sub = _create(workflow, contributor_identity)

        workflow.review_submission(reviewer_identity, sub.id, "approved")
        with pytest.raises(StateConflictError, match="already approved"):
            workflow.review_submission(second_reviewer_identity, sub.id, "rejected", "too late")

        assert Review.query.filter_by(submission_id=sub.id).count() == 1
        assert db.session.get(Submission, sub.id).status == "approved"

    def test_stale_read_does_not_overwrite(self, repository, workflow, contributor_identity):
        sub = _create(workflow, contributor_identity)

        # Both reviewers "saw" pending; only the first UPDATE matches.
        assert repository.transition_status(sub.id, "pending", "approved") is True
        assert repository.transition_status(sub.id, "pending", "rejected") is False
        db.session.commit()

        assert repository.get_submission(sub.id, refresh=True).status == "approved"

    def test_concurrent_reviewers_one_wins(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'race.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        db.metadata.create_all(engine)

        with Session(engine) as setup:
            owner = User(name="Alice", email="alice@example.com", role="contributor", password_hash="x")
            first = User(name="Rita", email="rita@example.com", role="reviewer", password_hash="x")
            second = User(name="Ray", email="ray@example.com", role="reviewer", password_hash="x")
            setup.add_all([owner, first, second])
            setup.commit()
            sub = _create(
                SubmissionWorkflow(SubmissionRepository(setup)),
                IdentityContext(user_id=owner.id, role=Role.CONTRIBUTOR),
            )
            sub_id = sub.id
            callers = [
                (IdentityContext(user_id=first.id, role=Role.REVIEWER), "approved", None),
                (IdentityContext(user_id=second.id, role=Role.REVIEWER), "rejected", "too late"),
            ]

        barrier = threading.Barrier(len(callers))
        results = []

        def _review(caller, decision, feedback):
            with Session(engine) as own:
                reviewers_workflow = SubmissionWorkflow(SubmissionRepository(own))
                barrier.wait()
                try:
                    reviewers_workflow.review_submission(caller, sub_id, decision, feedback)
                    results.append("ok")
                except StateConflictError:
                    results.append("conflict")

        threads = [threading.Thread(target=_review, args=args) for args in callers]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sorted(results) == ["conflict", "ok"]
        with Session(engine) as check:
            assert check.scalar(select(func.count()).select_from(Review)) == 1
            status = check.get(Submission, sub_id).status
            decision = check.scalars(select(Review.decision)).one()
        assert status == decision
        engine.dispose()

    def test_transition_unknown_id(self, repository):
        assert repository.transition_status("missing", "pending", "approved") is False


class TestHistory:
    def test_history_scoped_to_submission(
        self, workflow, contributor_identity, reviewer_identity, second_reviewer_identity
    ):
        s1 = _create(workflow, contributor_identity, "one")
        s2 = _create(workflow, contributor_identity, "two")
        workflow.review_submission(reviewer_identity, s1.id, "rejected", "first")
        workflow.review_submission(second_reviewer_identity, s2.id, "approved")

        history = workflow.get_review_history(contributor_identity, s1.id)

        assert [r["decision"] for r in history] == ["rejected"]
        assert history[0]["reviewer_id"] == reviewer_identity.user_id

    def test_history_visibility(
        self, workflow, contributor_identity, other_contributor_identity
    ):
        sub = _create(workflow, contributor_identity)

        with pytest.raises(AuthorizationError):
            workflow.get_review_history(other_contributor_identity, sub.id)

    def test_count_by_decision_fills_zeros(self, repository, reviewer):
        assert ReviewLedger(repository).count_by_decision(reviewer.id) == {"approved": 0, "rejected": 0}

    def test_count_by_decision(
        self, repository, workflow, contributor_identity, reviewer_identity, second_reviewer_identity
    ):
        subs = [_create(workflow, contributor_identity, f"s{i}") for i in range(4)]
        workflow.review_submission(reviewer_identity, subs[0].id, "approved")
        workflow.review_submission(reviewer_identity, subs[1].id, "rejected", "no")
        workflow.review_submission(reviewer_identity, subs[2].id, "rejected", "no")
        workflow.review_submission(second_reviewer_identity, subs[3].id, "approved")

        ledger = ReviewLedger(repository)
        assert ledger.count_by_decision(reviewer_identity.user_id) == {"approved": 1, "rejected": 2}
        assert len(ledger.list_for_reviewer(second_reviewer_identity.user_id)) == 1
