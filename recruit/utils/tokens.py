from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

TOKEN_SALT = "recruit-access-token"


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(user) -> str:
    return _serializer().dumps({"uid": user.id, "org": user.org_id})


def load_user_from_token(token):
    """Return the User for a bearer token, or None if it is invalid or expired."""
    from ..extensions import db
    from ..models.user import User
    max_age = current_app.config.get("TOKEN_MAX_AGE", 86400)
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info("Rejected expired access token")
        return None
    except BadSignature:
        return None
    if not isinstance(payload, dict) or payload.get("uid") is None:
        return None
    user = db.session.get(User, payload["uid"])
    # tokens are bound to the tenant the user belonged to when issued
    if user is None or user.org_id != payload.get("org"):
        return None
    return user


def bearer_token(request):
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
