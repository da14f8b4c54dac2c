import json

import pytest

from recruit.errors import ConfigurationError
from recruit.extensions import db
from recruit.jobs.shortlist import BatchSummary, CandidateState, ShortlistBatch
from recruit.models import ActivityLog, ShortlistOutcome
from conftest import FakeCompletionClient, verdict


def _batch(client, **kwargs):
    return ShortlistBatch(db.session, client, models=["m1"], fallback_model="mf", **kwargs)


def test_missing_client_is_a_configuration_error(app):
    with pytest.raises(ConfigurationError, match="OpenAI API key not configured"):
        _batch(None)


def test_one_failing_candidate_does_not_stop_the_batch(app, org_user, make_job, make_candidate):
    job = make_job()
    good = make_candidate(job, "good@example.com", name="Good")
    bad = make_candidate(job, "bad@example.com", name="Bad")
    later = make_candidate(job, "later@example.com", name="Later")
    skipped = make_candidate(job, "skip@example.com", interview=None)

    def handler(messages, model, json_mode):
        if "bad@example.com" in messages[1]["content"]:
            return "this is not json"
        return json.dumps(verdict())

    summary = _batch(FakeCompletionClient(handler)).run(org_user.org_id, user_id=org_user.id)

    assert [a["candidate_id"] for a in summary.analyzed] == [good.id, later.id]
    assert summary.skipped == 1
    assert len(summary.errors) == 1
    assert summary.errors[0]["candidate_id"] == bad.id
    assert summary.errors[0]["error"].startswith("Failed to get AI analysis")
    assert summary.states == {
        good.id: CandidateState.PERSISTED,
        bad.id: CandidateState.FAILED,
        later.id: CandidateState.PERSISTED,
        skipped.id: CandidateState.SKIPPED,
    }
    assert {r.id for r in ShortlistOutcome.query.all()} == {good.id, later.id}

    logged = ActivityLog.query.filter_by(action_type="candidate_analyzed").all()
    assert sorted(a.entity_id for a in logged) == sorted([good.id, later.id])
    assert all(a.user_id == org_user.id for a in logged)


def test_analyzed_entry_shape(app, org_user, make_job, make_candidate):
    job = make_job()
    c = make_candidate(job, "ada@example.com", name="Ada", ats=90, mcq=85, technical=75, interview=88)

    summary = _batch(FakeCompletionClient(lambda *a: json.dumps(verdict("reject")))).run(org_user.org_id)

    assert summary.analyzed == [{
        "candidate_id": c.id,
        "name": "Ada",
        "status": "rejected",
        "total_score": 85,
        "recommendation": "reject",
    }]


def test_bounded_pool_keeps_candidate_order(app, org_user, make_job, make_candidate):
    job = make_job()
    ids = [make_candidate(job, f"c{i}@example.com").id for i in range(4)]
    client = FakeCompletionClient()

    summary = _batch(client, max_workers=3).run(org_user.org_id)

    assert [a["candidate_id"] for a in summary.analyzed] == ids
    assert len(client.calls) == 4
    assert ShortlistOutcome.query.count() == 4


def test_activity_failure_is_not_fatal(app, org_user, make_job, make_candidate):
    job = make_job()
    make_candidate(job, "ada@example.com")
    seen = []

    def activity(session, org_id, action_type, description, **kwargs):
        seen.append(action_type)
        return False

    summary = _batch(FakeCompletionClient(), activity=activity).run(org_user.org_id)
    assert len(summary.analyzed) == 1
    assert seen == ["candidate_analyzed"]


def test_raising_activity_hook_does_not_stop_the_batch(app, org_user, make_job, make_candidate):
    job = make_job()
    first = make_candidate(job, "first@example.com")
    second = make_candidate(job, "second@example.com")

    def activity(session, org_id, action_type, description, **kwargs):
        raise RuntimeError("audit service down")

    summary = _batch(FakeCompletionClient(), activity=activity).run(org_user.org_id)

    assert [a["candidate_id"] for a in summary.analyzed] == [first.id, second.id]
    assert summary.errors == []
    assert summary.states[second.id] == CandidateState.PERSISTED


def test_empty_summary_response():
    assert BatchSummary().to_response() == {
        "message": "No candidates found", "analyzed": 0, "skipped": 0, "candidates": [],
    }


def test_summary_response_omits_empty_errors():
    summary = BatchSummary(total=2, skipped=1, analyzed=[{"candidate_id": 1}])
    body = summary.to_response()
    assert body["message"] == "Analyzed 1 candidates"
    assert "errors" not in body
    summary.fail(2, "boom")
    assert summary.to_response()["errors"] == [{"candidate_id": 2, "error": "boom"}]
