import json
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from recruit import create_app
from recruit.extensions import db
from recruit.models import (
    Candidate, InterviewRecord, Job, McqTestResult, Organization, TechnicalTestResult, User,
)
from recruit.services.openai_wrap import CompletionError
from recruit.utils.tokens import issue_token


class TestConfig:
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    REDIS_URL = None
    OPENAI_API_KEY = None
    TOKEN_MAX_AGE = 3600
    SHORTLIST_MODELS = ["gpt-4o", "gpt-4-turbo"]
    SHORTLIST_FALLBACK_MODEL = "gpt-4o"
    SHORTLIST_TEMPERATURE = 0.3
    SHORTLIST_MAX_WORKERS = 1
    SHORTLIST_LOCK_TIMEOUT = 60
    LOG_LEVEL = "WARNING"


def verdict(recommendation="shortlist", **extra):
    body = {
        "recommendation": recommendation,
        "confidence": 80,
        "total_score": 0,
        "strengths": ["clear communication"],
        "weaknesses": ["limited cloud experience"],
        "detailed_analysis": "Solid across all stages.",
        "hire_readiness": "ready" if recommendation == "shortlist" else "not_ready",
        "priority": "high" if recommendation == "shortlist" else "low",
    }
    body.update(extra)
    return body


class FakeCompletionClient:
    """Stands in for the completion service. `handler(messages, model, json_mode)` returns text."""

    def __init__(self, handler=None):
        self.calls = []
        self.handler = handler or (lambda messages, model, json_mode: json.dumps(verdict()))

    def complete(self, messages, model, temperature=0.3, json_mode=False):
        self.calls.append({"messages": messages, "model": model, "json_mode": json_mode})
        return self.handler(messages, model, json_mode)


def failing(message="boom"):
    def handler(messages, model, json_mode):
        raise CompletionError(message, status=500)
    return handler


@pytest.fixture
def app():
    app = create_app(TestConfig)

    # the fixture's app context is shared by every test-client request, so
    # drop flask-login's per-request user cache as a real request would
    @app.teardown_request
    def _reset_login_user(exc=None):
        from flask import g
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_llm(app):
    fake = FakeCompletionClient()
    app.extensions["completion_client"] = fake
    return fake


@pytest.fixture
def org_user(app):
    org = Organization(name="Acme")
    db.session.add(org)
    db.session.flush()
    user = User(org_id=org.id, email="recruiter@example.com", role="admin")
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(org_user):
    return {"Authorization": f"Bearer {issue_token(org_user)}"}


@pytest.fixture
def make_job(org_user):
    def _make(title="Backend Engineer", org_id=None):
        job = Job(
            org_id=org_id or org_user.org_id,
            title=title,
            description="Build APIs",
            required_skills=["Python", "SQL"],
            preferred_skills=["Flask"],
            experience_required=3,
        )
        db.session.add(job)
        db.session.commit()
        return job
    return _make


@pytest.fixture
def make_candidate(org_user):
    """Create a candidate plus whichever assessment stages are given.

    Pass None for a stage to leave it out; mcq/technical status defaults to completed.
    """
    def _make(job, email, ats=80, mcq=70, technical=60, interview=90, transcript="Q: ... A: ...",
              mcq_status="completed", technical_status="completed", name=None, org_id=None):
        org_id = org_id or org_user.org_id
        c = Candidate(org_id=org_id, job_id=job.id, email=email, full_name=name or email.split("@")[0],
                      skills=["Python"], experience_years=4, ats_score=ats,
                      ats_breakdown={"skills": ats})
        db.session.add(c)
        db.session.flush()
        if mcq is not None:
            db.session.add(McqTestResult(org_id=org_id, candidate_id=c.id, job_id=job.id, status=mcq_status,
                                         percentage=mcq, total_questions=30, attempted_questions=30,
                                         correct_answers=21, passed=True))
        if technical is not None:
            db.session.add(TechnicalTestResult(org_id=org_id, candidate_id=c.id, job_id=job.id,
                                               status=technical_status, overall_score=technical,
                                               code_quality_score=technical, correctness_score=technical))
        if interview is not None:
            db.session.add(InterviewRecord(org_id=org_id, job_id=job.id, email=email,
                                           transcript=transcript, ai_score=interview))
        db.session.commit()
        return c
    return _make
