from ..extensions import db
from .base import OrgScopedMixin, SerializeMixin, TimestampMixin

class Job(db.Model, OrgScopedMixin, TimestampMixin, SerializeMixin):
    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    required_skills = db.Column(db.JSON)   # ["Python","SQL"]
    preferred_skills = db.Column(db.JSON)
    experience_required = db.Column(db.Integer, default=0)  # years
    status = db.Column(db.String(20), default="open")

    def __repr__(self) -> str:
        return f"<Job id={self.id} title={self.title!r}>"
