"""Gather a tenant's candidates with their four assessment stages attached.

A candidate is eligible for holistic evaluation only when it has a non-zero
ATS score, a completed MCQ test, a completed technical test and an interview
with a transcript. Everyone else is skipped for this batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..errors import EligibilityError
from ..models import Candidate, Job, McqTestResult, TechnicalTestResult, InterviewRecord
from ..models.assessment import COMPLETED

logger = logging.getLogger(__name__)


def _num(value) -> float:
    if value is None:
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


@dataclass
class CandidateBundle:
    candidate: Candidate
    job: Optional[Job]
    mcq: McqTestResult
    technical: TechnicalTestResult
    interview: InterviewRecord

    @property
    def ats_score(self) -> float:
        return _num(self.candidate.ats_score)

    @property
    def mcq_score(self) -> float:
        return _num(self.mcq.percentage) or _num(self.mcq.score)

    @property
    def technical_score(self) -> float:
        return _num(self.technical.overall_score)

    @property
    def interview_score(self) -> float:
        return _num(self.interview.ai_score) or _num(self.interview.score)

    def scores(self) -> List[float]:
        return [self.ats_score, self.mcq_score, self.technical_score, self.interview_score]


@dataclass
class AggregationResult:
    eligible: List[CandidateBundle] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)
    failed: List[Tuple[int, str]] = field(default_factory=list)
    total: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def latest_attempt(session, model, candidate_id, job_id, status=None):
    """Most recent attempt for (candidate, job), optionally restricted to one status."""
    query = session.query(model).filter(model.candidate_id == candidate_id, model.job_id == job_id)
    if status:
        query = query.filter(model.status == status)
    return (
        query
        .order_by(model.created_at.desc(), model.id.desc())
        .first()
    )


def find_interview(session, email, job_id):
    return (
        session.query(InterviewRecord)
        .filter(InterviewRecord.email == email, InterviewRecord.job_id == job_id)
        .order_by(InterviewRecord.created_at.desc(), InterviewRecord.id.desc())
        .first()
    )


def check_eligibility(candidate, mcq, technical, interview):
    if not _num(candidate.ats_score):
        raise EligibilityError("No ATS score", candidate_id=candidate.id)
    if mcq is None or mcq.status != COMPLETED:
        raise EligibilityError("MCQ test not completed", candidate_id=candidate.id)
    if technical is None or technical.status != COMPLETED:
        raise EligibilityError("Technical test not completed", candidate_id=candidate.id)
    if interview is None or not (interview.transcript or "").strip():
        raise EligibilityError("Interview not completed", candidate_id=candidate.id)


def aggregate_candidates(session, org_id: int, job_id: Optional[int] = None,
                         candidate_ids: Optional[List[int]] = None) -> AggregationResult:
    query = session.query(Candidate).filter(Candidate.org_id == org_id)
    if job_id:
        query = query.filter(Candidate.job_id == job_id)
    if candidate_ids:
        query = query.filter(Candidate.id.in_(candidate_ids))
    candidates = query.order_by(Candidate.created_at.asc(), Candidate.id.asc()).all()

    result = AggregationResult(total=len(candidates))
    pending = []
    for c in candidates:
        try:
            mcq = latest_attempt(session, McqTestResult, c.id, c.job_id, status=COMPLETED)
            technical = latest_attempt(session, TechnicalTestResult, c.id, c.job_id, status=COMPLETED)
            interview = find_interview(session, c.email, c.job_id)
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Loading assessments for candidate %s failed", c.id)
            result.failed.append((c.id, f"Loading assessments failed: {e.__class__.__name__}"))
            continue
        try:
            check_eligibility(c, mcq, technical, interview)
        except EligibilityError as e:
            logger.info("Skipping candidate %s: %s", c.id, e.message)
            result.skipped.append((c.id, e.message))
            continue
        pending.append((c, mcq, technical, interview))

    job_ids = {c.job_id for c, *_ in pending if c.job_id}
    jobs: Dict[int, Any] = {}
    if job_ids:
        jobs = {j.id: j for j in session.query(Job).filter(Job.id.in_(job_ids)).all()}

    for c, mcq, technical, interview in pending:
        result.eligible.append(CandidateBundle(c, jobs.get(c.job_id), mcq, technical, interview))
    return result
