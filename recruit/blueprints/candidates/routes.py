from datetime import datetime

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from . import bp
from .forms import AnalyzeForm, ShortlistUpdateForm
from ...errors import ValidationFailed
from ...extensions import db, tenant_lock
from ...jobs.shortlist import ShortlistBatch
from ...models import Candidate, Job, McqTestResult, ShortlistOutcome, TechnicalTestResult
from ...services.aggregator import find_interview, latest_attempt


def _outcome_or_none(outcome_id):
    return ShortlistOutcome.query.filter_by(id=outcome_id, org_id=current_user.org_id).first()


@bp.post("/analyze-and-shortlist")
@login_required
def analyze_and_shortlist():
    """Evaluate every fully assessed candidate and write a shortlist verdict for each.

    Body: {"job_id"?: int, "candidate_ids"?: [int]}. Candidates missing a
    completed stage are skipped; per-candidate failures come back in "errors".
    """
    # fails with ConfigurationError before any candidate data is read
    batch = ShortlistBatch.from_app(current_app, db.session)

    form = AnalyzeForm()
    if not form.validate_on_submit():
        raise ValidationFailed(form.errors)

    org_id = current_user.org_id
    with tenant_lock.hold(org_id):
        summary = batch.run(
            org_id,
            job_id=form.job_id.data,
            candidate_ids=form.candidate_ids.data or None,
            user_id=current_user.id,
        )
    return jsonify(summary.to_response())


@bp.get("/status/shortlisted")
@login_required
def list_shortlisted():
    query = ShortlistOutcome.query.filter_by(org_id=current_user.org_id)
    status = request.args.get("status")
    if status:
        query = query.filter(ShortlistOutcome.status == status)
    job_id = request.args.get("job_id", type=int)
    if job_id:
        query = query.filter(ShortlistOutcome.job_id == job_id)
    rows = query.order_by(ShortlistOutcome.created_at.desc(), ShortlistOutcome.id.desc()).all()
    return jsonify({"candidates": [r.to_dict() for r in rows]})


@bp.get("/shortlisted/<int:outcome_id>/full-details")
@login_required
def shortlisted_full_details(outcome_id):
    row = _outcome_or_none(outcome_id)
    if not row:
        return jsonify({"error": "Candidate not found"}), 404

    session = db.session
    candidate = session.get(Candidate, row.id)
    mcq = latest_attempt(session, McqTestResult, row.id, row.job_id)
    technical = latest_attempt(session, TechnicalTestResult, row.id, row.job_id)
    interview = find_interview(session, row.email, row.job_id)
    job = session.get(Job, row.job_id) if row.job_id else None

    def _d(obj):
        return obj.to_dict() if obj is not None else None

    return jsonify({
        "candidate": _d(candidate) or row.to_dict(),
        "shortlisted": row.to_dict(),
        "mcq_test": _d(mcq),
        "technical_test": _d(technical),
        "interview_record": _d(interview),
        "job": _d(job),
    })


@bp.patch("/shortlisted/<int:outcome_id>")
@login_required
def update_shortlisted(outcome_id):
    row = _outcome_or_none(outcome_id)
    if not row:
        return jsonify({"error": "Candidate not found"}), 404

    form = ShortlistUpdateForm()
    if not form.validate_on_submit():
        raise ValidationFailed(form.errors)
    changed = form.apply_to(row)
    if changed:
        row.updated_at = datetime.utcnow()
        db.session.commit()
        current_app.logger.info("Shortlist outcome %s updated: %s", row.id, ", ".join(changed))
    return jsonify({"candidate": row.to_dict(), "message": "Shortlisted candidate updated successfully"})


@bp.delete("/shortlisted/<int:outcome_id>")
@login_required
def delete_shortlisted(outcome_id):
    row = _outcome_or_none(outcome_id)
    if not row:
        return jsonify({"error": "Candidate not found"}), 404
    db.session.delete(row)
    db.session.commit()
    return jsonify({"message": "Shortlisted candidate deleted successfully"})
