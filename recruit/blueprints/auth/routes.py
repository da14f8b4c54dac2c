from flask import current_app, jsonify
from . import bp
from ...extensions import db
from ...errors import ValidationFailed
from .forms import SignupForm, TokenForm
from ...models.organization import Organization
from ...models.user import User
from ...utils.tokens import issue_token


@bp.post("/signup")
def signup():
    """Create a company account and its first admin recruiter."""
    form = SignupForm()
    if not form.validate_on_submit():
        raise ValidationFailed(form.errors)

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return jsonify({"error": "A user with this email already exists"}), 409

    org = Organization.query.filter_by(name=form.org_name.data).first()
    if org:
        # joining an existing company goes through its admin, not signup
        return jsonify({"error": "Organization already exists"}), 409
    org = Organization(name=form.org_name.data)
    db.session.add(org)
    db.session.flush()
    user = User(org_id=org.id, email=email, role="admin")
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Created organization %s with admin user %s", org.id, user.id)
    return jsonify({"user_id": user.id, "org_id": org.id, "access_token": issue_token(user), "token_type": "bearer"}), 201


@bp.post("/token")
def token():
    form = TokenForm()
    if not form.validate_on_submit():
        raise ValidationFailed(form.errors)
    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if not user or not user.check_password(form.password.data):
        return jsonify({"error": "Invalid credentials"}), 401
    return jsonify({"access_token": issue_token(user), "token_type": "bearer"})
