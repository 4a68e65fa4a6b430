from functools import wraps
from flask import g, jsonify
from pagerestore.models.user import EDITOR_ROLES


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if g.get("current_user") is None:
            return jsonify({"error": "Authentication required"}), 401
        return fn(*args, **kwargs)
    return wrapper


def roles_required(*allowed_roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = g.get("current_user")
            if user is None:
                return jsonify({"error": "Authentication required"}), 401

            if user.role not in allowed_roles:
                return jsonify({"error": "Insufficient permissions"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator


editor_required = roles_required(*EDITOR_ROLES)


def feature_enabled(feature_name):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            tenant = g.current_tenant

            if not hasattr(tenant, feature_name):
                return jsonify({"error": "Feature not recognized"}), 400

            if not getattr(tenant, feature_name):
                return jsonify({
                    "error": f"Feature '{feature_name}' is disabled for this tenant"
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
