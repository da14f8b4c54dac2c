import logging

from sqlalchemy.exc import SQLAlchemyError

from ..models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(session, org_id, action_type, description, user_id=None, entity_type=None,
                 entity_id=None, entity_name=None, category=None, severity="info", details=None):
    """Record an activity row. Never raises: activity logging must not break the caller."""
    try:
        session.add(ActivityLog(
            org_id=org_id,
            user_id=user_id,
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
            category=category,
            severity=severity,
            details=details,
        ))
        session.commit()
        return True
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error logging activity %s", action_type)
        return False
