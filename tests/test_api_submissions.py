"""
Tests: Submissions & Dashboard API — HTTP contract.

Covers status codes and the response envelopes for every submission route,
the dashboard route, the error taxonomy mapping and the request guards.
"""

from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest


def _create(client, headers, **overrides):
    body = {"title": "Landing page copy", "description": "v1 draft", "category": "marketing"}
    body.update(overrides)
    return client.post("/api/submissions", json=body, headers=headers)


def _review(client, headers, submission_id, decision, feedback=None):
    body = {"decision": decision}
    if feedback is not None:
        body["feedback"] = feedback
    return client.put(f"/api/submissions/{submission_id}/review", json=body, headers=headers)


# ═══════════════════════════════════════════════════════════════
# BLOCK 1: Authentication boundary
# ═══════════════════════════════════════════════════════════════

class TestAuthBoundary:
    def test_no_token(self, client):
        res = client.get("/api/submissions")
        assert res.status_code == 401
        body = res.get_json()
        assert body == {"success": False, "error": "No token provided", "code": "ERR_UNAUTHENTICATED"}

    def test_garbage_token(self, client):
        res = client.get("/api/submissions", headers={"Authorization": "Bearer not.a.jwt"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid token"

    def test_non_bearer_scheme(self, client):
        res = client.get("/api/dashboard/stats", headers={"Authorization": "Basic abc"})
        assert res.status_code == 401

    def test_expired_token(self, app, client, contributor):
        payload = {
            "sub": str(contributor.id), "role": "contributor", "type": "access",
            "iat": datetime.now(timezone.utc) - timedelta(hours=2),
            "exp": datetime.now(timezone.utc) - timedelta(hours=1),
        }
        token = pyjwt.encode(payload, app.config["SECRET_KEY"], algorithm="HS256")

        res = client.get("/api/submissions", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401
        assert res.get_json()["error"] == "Token expired"

    def test_unknown_role_claim_rejected(self, app, client, contributor):
        payload = {
            "sub": str(contributor.id), "role": "admin", "type": "access",
            "iat": datetime.now(timezone.utc),
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }
        token = pyjwt.encode(payload, app.config["SECRET_KEY"], algorithm="HS256")

        res = client.get("/api/dashboard/stats", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid token"

    def test_wrong_secret(self, client, contributor):
        payload = {
            "sub": str(contributor.id), "role": "contributor", "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }
        token = pyjwt.encode(payload, "another-secret-that-is-long-enough-123", algorithm="HS256")

        res = client.get("/api/submissions", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401


# ═══════════════════════════════════════════════════════════════
# BLOCK 2: Create
# ═══════════════════════════════════════════════════════════════

class TestCreate:
    def test_create_201(self, client, contributor, auth_headers):
        res = _create(client, auth_headers(contributor), contentRef="https://cdn.example.com/a.pdf")

        assert res.status_code == 201
        body = res.get_json()
        assert body["success"] is True
        assert body["message"] == "Submission created successfully"
        sub = body["submission"]
        assert sub["status"] == "pending"
        assert sub["resubmission_count"] == 0
        assert sub["original_submission_id"] is None
        assert sub["chain_root_id"] == sub["id"]
        assert sub["content_ref"] == "https://cdn.example.com/a.pdf"
        assert sub["contributor_id"] == contributor.id

    def test_file_url_alias(self, client, contributor, auth_headers):
        res = _create(client, auth_headers(contributor), file_url="https://cdn.example.com/b.pdf")
        assert res.get_json()["submission"]["content_ref"] == "https://cdn.example.com/b.pdf"

    def test_missing_fields_400(self, client, contributor, auth_headers):
        res = client.post("/api/submissions", json={"title": "x"}, headers=auth_headers(contributor))

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION"
        assert set(body["details"]) == {"description", "category"}

    def test_reviewer_forbidden(self, client, reviewer, auth_headers):
        res = _create(client, auth_headers(reviewer))
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_FORBIDDEN"

    def test_array_body_400(self, client, contributor, auth_headers):
        res = client.post("/api/submissions", json=["x"], headers=auth_headers(contributor))

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION"
        assert body["error"] == "Request body must be a JSON object"

    def test_non_json_body_415(self, client, contributor, auth_headers):
        res = client.post(
            "/api/submissions",
            data="title=x",
            content_type="text/plain",
            headers=auth_headers(contributor),
        )
        assert res.status_code == 415
        assert res.get_json()["success"] is False


# ═══════════════════════════════════════════════════════════════
# BLOCK 3: List & detail
# ═══════════════════════════════════════════════════════════════

class TestRead:
    def test_list_scoped_to_contributor(
        self, client, contributor, other_contributor, reviewer, auth_headers
    ):
        _create(client, auth_headers(contributor), title="mine")
        _create(client, auth_headers(other_contributor), title="theirs")

        mine = client.get("/api/submissions", headers=auth_headers(contributor)).get_json()
        everyone = client.get("/api/submissions", headers=auth_headers(reviewer)).get_json()

        assert [s["title"] for s in mine["data"]] == ["mine"]
        assert mine["pagination"]["total"] == 1
        assert everyone["pagination"]["total"] == 2
        assert mine["data"][0]["contributor"] == {
            "id": contributor.id, "name": "Alice", "email": "alice@example.com",
        }

    def test_list_pagination_and_filter(self, client, contributor, reviewer, auth_headers):
        for i in range(3):
            _create(client, auth_headers(contributor), title=f"t{i}")

        res = client.get("/api/submissions?page=2&limit=2&status=pending", headers=auth_headers(reviewer))

        assert res.status_code == 200
        body = res.get_json()
        assert len(body["data"]) == 1
        assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "total_pages": 2}

    @pytest.mark.parametrize("query", ["status=archived", "limit=500", "page=0"])
    def test_list_bad_query_400(self, client, reviewer, auth_headers, query):
        res = client.get(f"/api/submissions?{query}", headers=auth_headers(reviewer))
        assert res.status_code == 400

    def test_detail_with_feedback(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        _review(client, auth_headers(reviewer), sub_id, "rejected", "needs detail")

        res = client.get(f"/api/submissions/{sub_id}", headers=auth_headers(contributor))

        assert res.status_code == 200
        sub = res.get_json()["submission"]
        assert sub["feedback"] == "needs detail"
        assert sub["resubmissions_remaining"] == 2

    def test_detail_foreign_403(self, client, contributor, other_contributor, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = client.get(f"/api/submissions/{sub_id}", headers=auth_headers(other_contributor))
        assert res.status_code == 403

    def test_detail_unknown_404(self, client, reviewer, auth_headers):
        res = client.get("/api/submissions/no-such-id", headers=auth_headers(reviewer))
        assert res.status_code == 404
        assert res.get_json() == {
            "success": False, "error": "Submission not found", "code": "ERR_NOT_FOUND",
        }

    def test_review_history(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        _review(client, auth_headers(reviewer), sub_id, "approved")

        res = client.get(f"/api/submissions/{sub_id}/reviews", headers=auth_headers(contributor))

        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 1
        assert body["reviews"][0]["decision"] == "approved"


# ═══════════════════════════════════════════════════════════════
# BLOCK 4: Review
# ═══════════════════════════════════════════════════════════════

class TestReview:
    def test_approve_200(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]

        res = _review(client, auth_headers(reviewer), sub_id, "approved")

        assert res.status_code == 200
        body = res.get_json()
        assert body["review"]["decision"] == "approved"
        assert body["review"]["reviewer_id"] == reviewer.id
        assert body["submission"]["status"] == "approved"

    def test_status_alias(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = client.put(
            f"/api/submissions/{sub_id}/review",
            json={"status": "rejected", "feedback": "nope"},
            headers=auth_headers(reviewer),
        )
        assert res.get_json()["submission"]["status"] == "rejected"

    def test_reject_without_feedback_400(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]

        res = _review(client, auth_headers(reviewer), sub_id, "rejected")

        assert res.status_code == 400
        assert res.get_json()["error"] == "Feedback is required for rejection"

    def test_invalid_decision_400(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = _review(client, auth_headers(reviewer), sub_id, "maybe")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Invalid status"

    def test_contributor_forbidden(self, client, contributor, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = _review(client, auth_headers(contributor), sub_id, "approved")
        assert res.status_code == 403
        assert res.get_json()["error"] == "Forbidden: Insufficient permissions"

    def test_unknown_404(self, client, reviewer, auth_headers):
        res = _review(client, auth_headers(reviewer), "missing", "approved")
        assert res.status_code == 404

    def test_scalar_body_400(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = client.put(f"/api/submissions/{sub_id}/review", json="approved", headers=auth_headers(reviewer))
        assert res.status_code == 400
        assert res.get_json()["error"] == "Request body must be a JSON object"

    def test_second_review_409(self, client, contributor, reviewer, second_reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        assert _review(client, auth_headers(reviewer), sub_id, "approved").status_code == 200

        res = _review(client, auth_headers(second_reviewer), sub_id, "rejected", "late")

        assert res.status_code == 409
        body = res.get_json()
        assert body["code"] == "ERR_CONFLICT_STATE"
        assert body["error"] == "Submission is already approved"


# ═══════════════════════════════════════════════════════════════
# BLOCK 5: Resubmit
# ═══════════════════════════════════════════════════════════════

class TestResubmit:
    def _rejected_id(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        _review(client, auth_headers(reviewer), sub_id, "rejected", "needs detail")
        return sub_id

    def test_full_chain(self, client, contributor, reviewer, auth_headers):
        root = self._rejected_id(client, contributor, reviewer, auth_headers)

        res = client.post(
            f"/api/submissions/{root}/resubmit",
            json={"description": "v2 draft"},
            headers=auth_headers(contributor),
        )
        assert res.status_code == 201
        s2 = res.get_json()["submission"]
        assert res.get_json()["message"] == "Resubmission successful"
        assert s2["resubmission_count"] == 1
        assert s2["original_submission_id"] == root
        assert s2["description"] == "v2 draft"
        assert s2["title"] == "Landing page copy"

        _review(client, auth_headers(reviewer), s2["id"], "rejected", "still thin")
        s3 = client.post(
            f"/api/submissions/{s2['id']}/resubmit", json={}, headers=auth_headers(contributor),
        ).get_json()["submission"]
        assert s3["resubmission_count"] == 2
        assert s3["original_submission_id"] == root
        assert s3["resubmissions_remaining"] == 0

        _review(client, auth_headers(reviewer), s3["id"], "rejected", "no")
        res = client.post(
            f"/api/submissions/{s3['id']}/resubmit", json={}, headers=auth_headers(contributor),
        )
        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_LIMIT_EXCEEDED"
        assert "Maximum resubmission limit reached" in body["error"]

    def test_pending_409(self, client, contributor, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        res = client.post(f"/api/submissions/{sub_id}/resubmit", json={}, headers=auth_headers(contributor))
        assert res.status_code == 409

    def test_not_owner_403(self, client, contributor, other_contributor, reviewer, auth_headers):
        root = self._rejected_id(client, contributor, reviewer, auth_headers)
        res = client.post(
            f"/api/submissions/{root}/resubmit", json={}, headers=auth_headers(other_contributor),
        )
        assert res.status_code == 403

    def test_unknown_404(self, client, contributor, auth_headers):
        res = client.post("/api/submissions/missing/resubmit", json={}, headers=auth_headers(contributor))
        assert res.status_code == 404

    def test_without_body(self, client, contributor, reviewer, auth_headers):
        root = self._rejected_id(client, contributor, reviewer, auth_headers)
        res = client.post(f"/api/submissions/{root}/resubmit", headers=auth_headers(contributor))
        assert res.status_code == 201


# ═══════════════════════════════════════════════════════════════
# BLOCK 6: Dashboard, health & misc
# ═══════════════════════════════════════════════════════════════

class TestDashboardAPI:
    def test_contributor_stats(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        _create(client, auth_headers(contributor))
        _review(client, auth_headers(reviewer), sub_id, "approved")

        res = client.get("/api/dashboard/stats", headers=auth_headers(contributor))

        assert res.status_code == 200
        assert res.get_json() == {
            "success": True,
            "stats": {"total_submissions": 2, "pending": 1, "approved": 1, "rejected": 0},
        }

    def test_reviewer_stats(self, client, contributor, reviewer, auth_headers):
        sub_id = _create(client, auth_headers(contributor)).get_json()["submission"]["id"]
        _create(client, auth_headers(contributor))
        _review(client, auth_headers(reviewer), sub_id, "rejected", "no")

        stats = client.get("/api/dashboard/stats", headers=auth_headers(reviewer)).get_json()["stats"]

        assert stats == {"pending_reviews": 1, "total_reviewed": 1, "approved": 0, "rejected": 1}

    def test_requires_auth(self, client):
        assert client.get("/api/dashboard/stats").status_code == 401


class TestMisc:
    def test_health(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok"}

    def test_health_live(self, client, contributor, auth_headers):
        _create(client, auth_headers(contributor))

        res = client.get("/health/live")

        assert res.status_code == 200
        checks = res.get_json()["checks"]
        assert checks["database"]["status"] == "ok"
        assert checks["schema"] == {"status": "ok"}
        assert checks["review_queue"]["pending_submissions"] == 1

    def test_root_banner(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert b"Submission Review API is running" in res.data

    def test_unknown_api_route_404_envelope(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_HTTP"

    def test_security_and_trace_headers(self, client):
        res = client.get("/health")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "DENY"
        assert "X-Request-ID" in res.headers
