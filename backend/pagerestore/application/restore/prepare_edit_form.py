import json
import time

from pagerestore.models.page import Page
from pagerestore.restore.context import RequestContext
from pagerestore.restore.ping import ping_settings
from pagerestore.restore.services import build_restore_services
from pagerestore.restore.staging import INFO_KEY
from pagerestore.restore.workflow import RestoreWorkflow
from pagerestore.domain.lifecycle import restore as lifecycle


def prepare_edit_form(
    *,
    ctx: RequestContext,
    page: Page,
    ping_url: str,
) -> dict:
    """
    Pre-render hook for the page editor.

    Responsibilities:
    - Embed the identity block the anonymous save path will check
    - Refresh the user trust cookie
    - Offer restore actions when a valid draft is waiting
    """
    services = build_restore_services(ctx)
    user = ctx.user

    identity = {
        "id": page.id,
        "uid": user.id,
        "time": int(time.time()),
        "token": services.tokens.token(page, user),
    }

    # Check the draft against the cookie the browser sent before the
    # shadow value can be rotated below.
    offer = None
    workflow = RestoreWorkflow(services.store, page.id, user.id)
    info = workflow.begin()

    if ctx.settings.validate_user_cookie:
        services.trust.set_user_cookie(user.id)

    if info is not None:
        offer = {
            "time": info.get("time"),
            "state": workflow.state,
            "actions": list(lifecycle.ACTIONS),
        }

    return {
        "fields": page.form_values(),
        "identity_field": INFO_KEY,
        "identity": json.dumps(identity),
        "ping": ping_settings(ctx, ping_url=ping_url),
        "draft": offer,
    }
