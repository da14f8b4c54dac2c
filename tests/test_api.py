import json

from redis.exceptions import ConnectionError as RedisConnectionError

from recruit.extensions import db, tenant_lock
from recruit.jobs import shortlist as shortlist_job
from recruit.models import ShortlistOutcome
from conftest import verdict

ANALYZE = "/candidates/analyze-and-shortlist"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json()["status"] == "ok"


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Route not found"}


def test_analyze_requires_token(client, fake_llm):
    r = client.post(ANALYZE, json={})
    assert r.status_code == 401
    assert r.get_json() == {"error": "Authentication required"}

    r = client.post(ANALYZE, json={}, headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_missing_api_key_fails_before_reading_candidates(client, auth_headers, monkeypatch):
    def must_not_run(*args, **kwargs):
        raise AssertionError("candidates were read")

    monkeypatch.setattr(shortlist_job, "aggregate_candidates", must_not_run)
    r = client.post(ANALYZE, json={}, headers=auth_headers)
    assert r.status_code == 500
    assert r.get_json() == {"error": "OpenAI API key not configured"}


def test_analyze_scenario(client, auth_headers, fake_llm, make_job, make_candidate):
    job = make_job("Backend Engineer")
    other_job = make_job("Data Analyst")
    a = make_candidate(job, "a@example.com", name="Candidate A", ats=90, mcq=85, technical=75, interview=88)
    b = make_candidate(job, "b@example.com", name="Candidate B", technical=None)
    c = make_candidate(other_job, "c@example.com", name="Candidate C")

    r = client.post(ANALYZE, json={"job_id": job.id}, headers=auth_headers)

    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "Analyzed 1 candidates"
    assert body["analyzed"] == 1
    assert body["skipped"] == 1
    assert "errors" not in body
    assert body["candidates"] == [{
        "candidate_id": a.id,
        "name": "Candidate A",
        "status": "shortlisted",
        "total_score": 85,
        "recommendation": "shortlist",
    }]
    assert db.session.get(ShortlistOutcome, b.id) is None
    assert db.session.get(ShortlistOutcome, c.id) is None
    assert len(fake_llm.calls) == 1


def test_rerun_overwrites_single_row(client, auth_headers, fake_llm, make_job, make_candidate):
    job = make_job()
    a = make_candidate(job, "a@example.com")

    client.post(ANALYZE, json={"candidate_ids": [a.id]}, headers=auth_headers)
    first = db.session.get(ShortlistOutcome, a.id)
    created, updated = first.created_at, first.updated_at

    fake_llm.handler = lambda *args: json.dumps(verdict("reject"))
    r = client.post(ANALYZE, json={"candidate_ids": [a.id]}, headers=auth_headers)
    assert r.status_code == 200

    db.session.expire_all()
    assert ShortlistOutcome.query.filter_by(id=a.id).count() == 1
    row = db.session.get(ShortlistOutcome, a.id)
    assert row.status == "rejected"
    assert row.created_at == created
    assert row.updated_at > updated


def test_no_candidates(client, auth_headers, fake_llm):
    r = client.post(ANALYZE, json={}, headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json() == {"message": "No candidates found", "analyzed": 0, "skipped": 0, "candidates": []}


def test_failures_are_reported_per_candidate(client, auth_headers, fake_llm, make_job, make_candidate):
    job = make_job()
    a = make_candidate(job, "a@example.com")
    fake_llm.handler = lambda *args: "no json at all"

    body = client.post(ANALYZE, json={}, headers=auth_headers).get_json()
    assert body["analyzed"] == 0
    assert body["message"] == "Analyzed 0 candidates"
    assert body["errors"][0]["candidate_id"] == a.id


def test_invalid_body_is_rejected(client, auth_headers, fake_llm):
    r = client.post(ANALYZE, json={"job_id": "abc"}, headers=auth_headers)
    assert r.status_code == 400
    body = r.get_json()
    assert body["error"] == "Validation error"
    assert body["details"][0].startswith("job_id:")

    r = client.post(ANALYZE, json={"candidate_ids": ["x"]}, headers=auth_headers)
    assert r.status_code == 400


def test_concurrent_batch_for_same_tenant_conflicts(client, auth_headers, fake_llm, org_user):
    with tenant_lock.hold(org_user.org_id):
        r = client.post(ANALYZE, json={}, headers=auth_headers)
    assert r.status_code == 409
    assert "already running" in r.get_json()["error"]

    assert client.post(ANALYZE, json={}, headers=auth_headers).status_code == 200


class _UnreachableRedis:
    def lock(self, name, timeout=None, blocking=None):
        return self

    def acquire(self):
        raise RedisConnectionError("Connection refused")


def test_redis_outage_falls_back_to_process_lock(client, auth_headers, fake_llm, org_user, make_job,
                                                 make_candidate, monkeypatch):
    a = make_candidate(make_job(), "a@example.com")
    monkeypatch.setattr(tenant_lock, "redis", _UnreachableRedis())

    r = client.post(ANALYZE, json={}, headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json()["candidates"][0]["candidate_id"] == a.id

    # the fallback lock still rejects a concurrent batch
    with tenant_lock.hold(org_user.org_id):
        assert client.post(ANALYZE, json={}, headers=auth_headers).status_code == 409


def _shortlist_one(client, auth_headers, make_job, make_candidate):
    job = make_job("Backend Engineer")
    a = make_candidate(job, "a@example.com", name="Candidate A")
    client.post(ANALYZE, json={}, headers=auth_headers)
    return a


def test_list_shortlisted(client, auth_headers, fake_llm, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    body = client.get("/candidates/status/shortlisted", headers=auth_headers).get_json()
    assert [c["id"] for c in body["candidates"]] == [a.id]
    assert body["candidates"][0]["job_title"] == "Backend Engineer"
    assert body["candidates"][0]["analysis"]["recommendation"] == "shortlist"

    body = client.get("/candidates/status/shortlisted?status=rejected", headers=auth_headers).get_json()
    assert body["candidates"] == []


def test_full_details(client, auth_headers, fake_llm, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    r = client.get(f"/candidates/shortlisted/{a.id}/full-details", headers=auth_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["candidate"]["email"] == "a@example.com"
    assert body["shortlisted"]["status"] == "shortlisted"
    assert body["mcq_test"]["status"] == "completed"
    assert body["technical_test"]["overall_score"] == 60
    assert body["interview_record"]["ai_score"] == 90
    assert body["job"]["title"] == "Backend Engineer"

    r = client.get("/candidates/shortlisted/9999/full-details", headers=auth_headers)
    assert r.status_code == 404
    assert r.get_json() == {"error": "Candidate not found"}


def test_update_shortlisted_applies_only_known_fields(client, auth_headers, fake_llm, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    r = client.patch(f"/candidates/shortlisted/{a.id}", headers=auth_headers,
                     json={"interview_status": "scheduled", "notes": "Call on Monday",
                           "total_score": 100, "org_id": 999})
    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "Shortlisted candidate updated successfully"
    assert body["candidate"]["interview_status"] == "scheduled"
    assert body["candidate"]["notes"] == "Call on Monday"
    assert body["candidate"]["total_score"] == 75

    row = db.session.get(ShortlistOutcome, a.id)
    assert row.org_id != 999
    assert row.name == "Candidate A"


def test_update_shortlisted_validates(client, auth_headers, fake_llm, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    r = client.patch(f"/candidates/shortlisted/{a.id}", headers=auth_headers, json={"ai_score": 150})
    assert r.status_code == 400
    r = client.patch(f"/candidates/shortlisted/{a.id}", headers=auth_headers, json={"interview_status": "lost"})
    assert r.status_code == 400
    r = client.patch("/candidates/shortlisted/9999", headers=auth_headers, json={"notes": "x"})
    assert r.status_code == 404


def test_delete_shortlisted(client, auth_headers, fake_llm, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    r = client.delete(f"/candidates/shortlisted/{a.id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json() == {"message": "Shortlisted candidate deleted successfully"}
    assert client.delete(f"/candidates/shortlisted/{a.id}", headers=auth_headers).status_code == 404


def test_outcomes_are_tenant_scoped(client, fake_llm, auth_headers, make_job, make_candidate):
    a = _shortlist_one(client, auth_headers, make_job, make_candidate)

    r = client.post("/auth/signup", json={"org_name": "Other Co", "email": "boss@example.org",
                                           "password": "password123"})
    other = {"Authorization": f"Bearer {r.get_json()['access_token']}"}

    assert client.get("/candidates/status/shortlisted", headers=other).get_json() == {"candidates": []}
    assert client.get(f"/candidates/shortlisted/{a.id}/full-details", headers=other).status_code == 404


def test_signup_and_token(client):
    r = client.post("/auth/signup", json={"org_name": "Acme", "email": "Owner@Example.com", "password": "password123"})
    assert r.status_code == 201
    assert r.get_json()["token_type"] == "bearer"

    r = client.post("/auth/signup", json={"org_name": "Acme 2", "email": "owner@example.com", "password": "password123"})
    assert r.status_code == 409

    r = client.post("/auth/token", json={"email": "owner@example.com", "password": "password123"})
    assert r.status_code == 200
    token = r.get_json()["access_token"]
    assert client.get("/candidates/status/shortlisted",
                      headers={"Authorization": f"Bearer {token}"}).status_code == 200

    r = client.post("/auth/token", json={"email": "owner@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.get_json() == {"error": "Invalid credentials"}


def test_signup_validation(client):
    r = client.post("/auth/signup", json={"org_name": "Acme", "email": "not-an-email", "password": "short"})
    assert r.status_code == 400
    details = r.get_json()["details"]
    assert any(d.startswith("email:") for d in details)
    assert any(d.startswith("password:") for d in details)
