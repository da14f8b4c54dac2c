from ..extensions import db
from .base import OrgScopedMixin, SerializeMixin, TimestampMixin

class InterviewRecord(db.Model, OrgScopedMixin, TimestampMixin, SerializeMixin):
    """AI video interview, keyed by (email, job_id)."""
    __tablename__ = "interview_records"

    id = db.Column(db.Integer, primary_key=True)
    # OrgScopedMixin: org_id
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), index=True)
    email = db.Column(db.String(254), nullable=False, index=True)
    name = db.Column(db.String(240))
    transcript = db.Column(db.Text)
    analysis = db.Column(db.Text)
    ai_score = db.Column(db.Numeric(5, 2))
    score = db.Column(db.Numeric(5, 2))
    recording_url = db.Column(db.String(512))
    interview_status = db.Column(db.String(20))  # scheduled/done/no_show/canceled

    def __repr__(self) -> str:
        return f"<InterviewRecord id={self.id} email={self.email!r} job_id={self.job_id}>"
