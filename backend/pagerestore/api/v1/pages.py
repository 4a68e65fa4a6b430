import json

from flask import g, request, jsonify, session, url_for, make_response
from markupsafe import escape
from pagerestore.application.pages.update_page import update_page
from pagerestore.application.restore.apply_restore_action import apply_restore_action
from pagerestore.application.restore.prepare_edit_form import prepare_edit_form
from pagerestore.application.restore.stage_anonymous_submission import stage_anonymous_submission
from pagerestore.domain.lifecycle import restore as lifecycle
from pagerestore.models.page import Page
from pagerestore.normalizers.page import normalize_edit_form, normalize_restore_result
from pagerestore.restore.ping import AUTH_MARKER, login_fragment, ping_settings
from pagerestore.restore.services import build_restore_services
from pagerestore.utils.decorators import editor_required, login_required, feature_enabled
from .auth import issue_session
from . import v1_bp


def _editable_page(page_id):
    """The page if the current user may edit it, else an error response."""
    page = Page.query.filter_by(
        id=page_id,
        tenant_id=g.current_tenant.id
    ).first()
    if page is None:
        return None, (jsonify({"error": "Page not found"}), 404)
    if not g.current_user.can_edit(page):
        return None, (jsonify({"error": "You do not have permission to edit this page"}), 403)
    return page, None


# ------------------------
# Editor
# ------------------------

@v1_bp.route("/pages/<int:page_id>/edit", methods=["GET"])
@editor_required
@feature_enabled("enable_cms")
def edit_page(page_id):
    page, error = _editable_page(page_id)
    if error:
        return error

    if not g.current_tenant.enable_edit_restore:
        return jsonify(normalize_edit_form(page))

    payload = prepare_edit_form(
        ctx=g.edit_context,
        page=page,
        ping_url=url_for("v1.ping", id=page.id)
    )
    return jsonify(normalize_edit_form(page, payload))


@v1_bp.route("/pages/<page_id>/edit", methods=["POST"])
@feature_enabled("enable_cms")
def submit_page(page_id):
    # Editor fields are single-valued; repeated keys keep their first value
    data = request.form.to_dict(flat=True) or request.get_json(silent=True) or {}

    if g.current_user is None:
        # Session lost: keep the submission, tell the client nothing else
        if g.current_tenant.enable_edit_restore:
            stage_anonymous_submission(ctx=g.edit_context, page_id=page_id, form=data)
        return jsonify({
            "error": "Authentication required",
            "login": url_for("v1.login")
        }), 401

    if not page_id.isdigit():
        return jsonify({"error": "Page not found"}), 404

    page, error = _editable_page(int(page_id))
    if error:
        return error

    if "slug" in data and page.slug_taken(data["slug"]):
        return jsonify({"error": "Slug already exists"}), 409

    values = {
        field: data[field]
        for field in Page.FORM_FIELDS
        if isinstance(data.get(field), str)
    }
    changed = update_page(page=page, values=values)

    return jsonify({
        "message": "Page updated successfully",
        "changes": changed
    }), 200


# ------------------------
# Restore
# ------------------------

@v1_bp.route("/pages/<int:page_id>/restore", methods=["POST"])
@editor_required
@feature_enabled("enable_edit_restore")
def restore_page(page_id):
    page, error = _editable_page(page_id)
    if error:
        return error

    data = request.get_json(silent=True) or request.form.to_dict()
    action = data.get("action")
    if action not in lifecycle.ACTIONS:
        return jsonify({
            "error": f"Action must be one of: {', '.join(lifecycle.ACTIONS)}"
        }), 400

    result = apply_restore_action(ctx=g.edit_context, page=page, action=action)
    if result is None:
        return jsonify({"error": "No draft found"}), 404

    data = normalize_restore_result(result)
    data["ping"] = ping_settings(
        g.edit_context,
        ping_url=url_for("v1.ping", id=page.id),
        changes=result.changes
    )
    return jsonify(data), 200


@v1_bp.route("/pages/restore-preview", methods=["GET"])
@login_required
@feature_enabled("enable_edit_restore")
def restore_preview():
    page_id = request.args.get("id", type=int)
    if not page_id:
        return jsonify({"error": "Page not found"}), 404

    page, error = _editable_page(page_id)
    if error:
        return error

    services = build_restore_services(g.edit_context)
    draft = services.store.load(page.id, g.current_user.id)
    if draft is None:
        return jsonify({"error": "No draft found"}), 404

    body = "<pre>" + str(escape(json.dumps(draft, indent=2, sort_keys=True))) + "</pre>"
    response = make_response(body, 200)
    response.mimetype = "text/html"
    return response


# ------------------------
# Heartbeat
# ------------------------

@v1_bp.route("/pages/ping", methods=["GET"])
def ping():
    user = g.current_user
    if user is None:
        response = make_response(login_fragment(url_for("v1.login")), 200)
        response.mimetype = "text/html"
        return response

    count = session.get("restore_ping", 0) + 1
    session["restore_ping"] = count

    response = jsonify({"ping": count, "ui": AUTH_MARKER})
    issue_session(response, user)
    return response
