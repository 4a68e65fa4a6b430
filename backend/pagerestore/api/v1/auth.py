from flask import request, jsonify, g
from flask_jwt_extended import (
    create_access_token,
    set_access_cookies,
    unset_jwt_cookies
)
from pagerestore.application.restore.sweep_after_login import sweep_after_login
from pagerestore.models.user import User
from . import v1_bp


def issue_session(response, user):
    """Start (or extend) the editing session cookie for ``user``."""
    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"tenant_id": user.tenant_id, "role": user.role}
    )
    set_access_cookies(response, access_token)
    return access_token


@v1_bp.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form.to_dict()
    if not data:
        return jsonify({"error": "Invalid request body"}), 400

    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    tenant = g.current_tenant

    user = User.query.filter_by(
        email=email,
        tenant_id=tenant.id
    ).first()

    if not user or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "User account disabled"}), 403

    g.current_user = user
    g.edit_context.user = user

    pending = []
    if tenant.enable_edit_restore:
        pending = sweep_after_login(ctx=g.edit_context, user=user)

    response = jsonify({
        "user_id": user.id,
        "pending_restores": pending
    })
    issue_session(response, user)
    return response, 200


@v1_bp.route("/auth/logout", methods=["POST"])
def logout():
    response = jsonify({"message": "Logged out"})
    unset_jwt_cookies(response)
    return response, 200
