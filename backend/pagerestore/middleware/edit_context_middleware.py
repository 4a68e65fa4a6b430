from flask import request, g, jsonify, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from pagerestore.extensions import db
from pagerestore.models.tenant import Tenant
from pagerestore.models.user import User
from pagerestore.restore.context import RequestContext, RestoreSettings

# Endpoints reachable without a site
PUBLIC_ENDPOINTS = {"static", "openapi_restore"}
PUBLIC_PREFIXES = ("swagger_ui",)


def resolve_tenant():
    tenant_id = request.headers.get('X-Tenant-ID')
    query = Tenant.query.filter_by(is_active=True)
    if tenant_id:
        if not tenant_id.isdigit():
            return None
        return query.filter_by(id=int(tenant_id)).first()
    return query.filter_by(domain=request.host.split(":")[0]).first()


def resolve_user(tenant):
    """The authenticated user, or None when the session is missing or expired."""
    try:
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError):
        return None
    if identity is None or not str(identity).isdigit():
        return None
    user = db.session.get(User, int(identity))
    if user is None or not user.is_active or user.tenant_id != tenant.id:
        return None
    return user


def edit_context_middleware(app):
    @app.before_request
    def load_edit_context():
        endpoint = request.endpoint or ""
        if endpoint in PUBLIC_ENDPOINTS or endpoint.startswith(PUBLIC_PREFIXES):
            return None

        tenant = resolve_tenant()
        if not tenant:
            return jsonify({"error": "Invalid tenant"}), 404

        # Attach site, user and restore context to the request globals
        g.current_tenant = tenant
        g.current_user = resolve_user(tenant)
        g.edit_context = RequestContext(
            site=tenant,
            host=request.host,
            settings=RestoreSettings.from_config(current_app.config),
            user=g.current_user,
            cookies=request.cookies,
        )
        return None

    @app.after_request
    def write_restore_cookies(response):
        ctx = g.get("edit_context")
        if ctx is None:
            return response
        for cookie in ctx.outgoing_cookies:
            response.set_cookie(
                cookie.name,
                cookie.value,
                max_age=cookie.max_age,
                path="/",
                httponly=True,
                samesite="Lax",
                secure=current_app.config.get("JWT_COOKIE_SECURE", False),
            )
        return response
