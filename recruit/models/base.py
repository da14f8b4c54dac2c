from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import inspect

from ..extensions import db

class OrgScopedMixin:
    org_id = db.Column(db.Integer, nullable=False, index=True)

class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

class SerializeMixin:
    def to_dict(self):
        out = {}
        for attr in inspect(self).mapper.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = float(value)
            out[attr.key] = value
        return out
