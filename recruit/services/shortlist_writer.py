import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import PersistenceError
from ..models import ShortlistOutcome

logger = logging.getLogger(__name__)


def verdict_status(recommendation) -> str:
    if isinstance(recommendation, str) and recommendation.strip().lower() == "shortlist":
        return "shortlisted"
    return "rejected"


def _as_float(value):
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _next_stamp(row, now):
    if row.updated_at and now <= row.updated_at:
        return row.updated_at + timedelta(microseconds=1)
    return now


def _fill(row, bundle, verdict, total_score, updated_at):
    c = bundle.candidate
    row.org_id = c.org_id
    row.job_id = c.job_id
    row.name = c.display_name
    row.email = c.email
    row.phone = c.phone
    row.cv_file_url = c.cv_file_url
    row.interview_status = c.interview_status
    row.status = verdict_status(verdict.get("recommendation"))
    row.recommendation = verdict.get("recommendation")
    row.confidence = _as_float(verdict.get("confidence"))
    row.hire_readiness = verdict.get("hire_readiness")
    row.priority = verdict.get("priority")
    row.notes = verdict.get("detailed_analysis")
    row.analysis = verdict
    row.ai_score = total_score
    row.total_score = total_score
    row.ats_score = bundle.ats_score
    row.mcq_score = bundle.mcq_score
    row.technical_score = bundle.technical_score
    row.interview_score = bundle.interview_score
    row.updated_at = updated_at


def upsert_outcome(session, bundle, verdict: dict, total_score: int, now=None) -> ShortlistOutcome:
    """Insert or overwrite the candidate's verdict row, keyed by candidate id.

    created_at is kept from the first write; updated_at always moves forward.
    If another writer inserts the row between our read and our insert, its
    row is overwritten (last write wins).
    """
    c = bundle.candidate
    cid = c.id
    now = now or datetime.utcnow()
    try:
        row = session.get(ShortlistOutcome, cid)
        if row is None:
            row = ShortlistOutcome(id=cid, org_id=c.org_id, created_at=now)
            _fill(row, bundle, verdict, total_score, now)
            session.add(row)
            try:
                session.commit()
                return row
            except IntegrityError:
                session.rollback()
                logger.info("Verdict row for candidate %s was inserted concurrently, overwriting it", cid)
                row = session.query(ShortlistOutcome).filter(ShortlistOutcome.id == cid).one()
        _fill(row, bundle, verdict, total_score, _next_stamp(row, now))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Saving verdict failed: {e.__class__.__name__}: {e}", candidate_id=cid)
    return row
