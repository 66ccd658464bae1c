import logging

from flask import jsonify
from flask_login import current_user, login_required, login_user, logout_user

from pickem import db, limiter, login_manager
from pickem.forms.auth import LoginForm
from pickem.models import User
from pickem.routes.auth import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = LoginForm.from_json()
    if not form.validate():
        return jsonify({"error": "Username and password are required", "errors": form.errors}), 400

    user = User.query.filter_by(username=form.username.data).first()

    if not user or not user.check_password(form.password.data):
        logger.info(f"Failed login for username {form.username.data!r}")
        return jsonify({"error": "Invalid username or password"}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated"}), 403

    login_user(user, remember=form.remember_me.data)
    user.update_last_login()

    return jsonify({"success": True, "user": user.to_dict()})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
