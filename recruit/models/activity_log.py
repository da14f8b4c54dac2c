from ..extensions import db
from .base import OrgScopedMixin

class ActivityLog(db.Model, OrgScopedMixin):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    action_type = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(50))
    entity_id = db.Column(db.Integer)
    entity_name = db.Column(db.String(240))
    description = db.Column(db.Text)
    category = db.Column(db.String(50))
    severity = db.Column(db.String(20), default="info")
    # "metadata" is reserved on declarative models
    details = db.Column("metadata", db.JSON)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
