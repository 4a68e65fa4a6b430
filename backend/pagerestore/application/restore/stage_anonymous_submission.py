import json

from pagerestore.restore.context import RequestContext
from pagerestore.restore.services import build_restore_services
from pagerestore.restore.staging import INFO_KEY
from pagerestore.utils.restore_log import note


def stage_anonymous_submission(
    *,
    ctx: RequestContext,
    page_id,
    form: dict,
) -> bool:
    """
    Post-submit hook for an edit form posted without a valid session.

    Never raises for bad input: the caller answers the anonymous client
    the same way whatever the outcome.
    """
    raw_info = form.get(INFO_KEY)
    try:
        info = json.loads(raw_info) if raw_info else None
    except ValueError:
        info = None
    if not isinstance(info, dict):
        note(ctx.settings.log_enabled, "draft refused: missing identity info", page_id=page_id)
        return False

    services = build_restore_services(ctx)
    return services.store.save(page_id, info.get("uid"), form, info)
