from ..extensions import db
from .base import OrgScopedMixin, SerializeMixin, TimestampMixin

class Candidate(db.Model, OrgScopedMixin, TimestampMixin, SerializeMixin):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    # OrgScopedMixin: org_id
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), index=True)
    first_name = db.Column(db.String(120))
    last_name = db.Column(db.String(120))
    full_name = db.Column(db.String(240))
    email = db.Column(db.String(254), nullable=False, index=True)
    phone = db.Column(db.String(50))

    # profile
    skills = db.Column(db.JSON)          # ["Python","Flask","SQL"]
    experience_years = db.Column(db.Integer, default=0)
    summary = db.Column(db.Text)
    education = db.Column(db.Text)
    cv_file_url = db.Column(db.String(512))

    # pipeline
    status = db.Column(db.String(30), default="new", index=True)
    interview_status = db.Column(db.String(30))

    # resume screening, computed upstream (0-100)
    ats_score = db.Column(db.Float)
    ats_breakdown = db.Column(db.JSON)

    @property
    def display_name(self):
        if self.full_name:
            return self.full_name
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email

    def __repr__(self) -> str:
        return f"<Candidate id={self.id} email={self.email!r}>"
