from ..extensions import db
from .base import OrgScopedMixin, SerializeMixin, TimestampMixin

# status: scheduled -> in_progress -> completed
COMPLETED = "completed"


class McqTestResult(db.Model, OrgScopedMixin, TimestampMixin, SerializeMixin):
    __tablename__ = "mcq_test_results"

    id = db.Column(db.Integer, primary_key=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"), nullable=False, index=True)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), index=True)
    status = db.Column(db.String(20), default="scheduled")
    score = db.Column(db.Float)
    percentage = db.Column(db.Float)
    total_questions = db.Column(db.Integer, default=0)
    attempted_questions = db.Column(db.Integer, default=0)
    correct_answers = db.Column(db.Integer, default=0)
    passed = db.Column(db.Boolean, default=False)

    def __repr__(self) -> str:
        return f"<McqTestResult id={self.id} candidate_id={self.candidate_id} status={self.status}>"


class TechnicalTestResult(db.Model, OrgScopedMixin, TimestampMixin, SerializeMixin):
    __tablename__ = "technical_test_results"

    id = db.Column(db.Integer, primary_key=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"), nullable=False, index=True)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), index=True)
    status = db.Column(db.String(20), default="scheduled")
    overall_score = db.Column(db.Float)
    code_quality_score = db.Column(db.Float)
    correctness_score = db.Column(db.Float)
    approach_score = db.Column(db.Float)
    communication_score = db.Column(db.Float)
    feedback = db.Column(db.Text)
    code_review = db.Column(db.Text)

    def __repr__(self) -> str:
        return f"<TechnicalTestResult id={self.id} candidate_id={self.candidate_id} status={self.status}>"
