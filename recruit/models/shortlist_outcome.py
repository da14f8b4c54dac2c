from ..extensions import db
from .base import OrgScopedMixin

class ShortlistOutcome(db.Model, OrgScopedMixin):
    __tablename__ = "shortlist_outcomes"

    # same id as the candidate: one verdict per candidate, upserted
    id = db.Column(db.Integer, db.ForeignKey("candidates.id"), primary_key=True, autoincrement=False)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), index=True)
    name = db.Column(db.String(240))
    email = db.Column(db.String(254))
    phone = db.Column(db.String(50))
    cv_file_url = db.Column(db.String(512))
    interview_status = db.Column(db.String(30))

    # verdict
    status = db.Column(db.String(20), index=True)  # shortlisted/rejected
    recommendation = db.Column(db.String(20))
    confidence = db.Column(db.Float)
    hire_readiness = db.Column(db.String(20))
    priority = db.Column(db.String(10))
    notes = db.Column(db.Text)
    analysis = db.Column(db.JSON)

    # scores
    ai_score = db.Column(db.Float)
    ats_score = db.Column(db.Float)
    mcq_score = db.Column(db.Float)
    technical_score = db.Column(db.Float)
    interview_score = db.Column(db.Float)
    total_score = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    job = db.relationship("Job", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "job_id": self.job_id,
            "job_title": self.job.title if self.job else None,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "cv_file_url": self.cv_file_url,
            "interview_status": self.interview_status,
            "status": self.status,
            "recommendation": self.recommendation,
            "confidence": self.confidence,
            "hire_readiness": self.hire_readiness,
            "priority": self.priority,
            "notes": self.notes,
            "analysis": self.analysis,
            "ai_score": self.ai_score,
            "ats_score": self.ats_score,
            "mcq_score": self.mcq_score,
            "technical_score": self.technical_score,
            "interview_score": self.interview_score,
            "total_score": self.total_score,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<ShortlistOutcome id={self.id} status={self.status}>"
