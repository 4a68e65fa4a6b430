from pagerestore.models.page import Page
from pagerestore.restore.context import RequestContext
from pagerestore.restore.services import build_restore_services
from pagerestore.restore.workflow import RestoreWorkflow, RestoreResult
from pagerestore.domain.lifecycle import restore as lifecycle
from pagerestore.restore.exceptions import RestoreConflict
from pagerestore.utils.audit import log_action
from pagerestore.utils.restore_log import note
from pagerestore.utils.transaction import transactional


def apply_restore_action(
    *,
    ctx: RequestContext,
    page: Page,
    action: str,
) -> RestoreResult | None:
    """
    Run one restore decision for the current editor.

    Returns None when no valid draft is pending.

    Responsibilities:
    - restore: write differing draft fields to the page, delete the draft
      only after the page is committed
    - test: report the same differences without touching anything
    - delete: drop the draft
    - ignore: leave the draft for the next visit
    - Audit logging
    """
    services = build_restore_services(ctx)
    user = ctx.user

    workflow = RestoreWorkflow(
        services.store, page.id, user.id, allowed_fields=set(Page.FORM_FIELDS)
    )
    if workflow.begin() is None:
        return None

    def persist(values):
        if "slug" in values and page.slug_taken(values["slug"]):
            raise RestoreConflict("Slug already exists", fields=["slug"])
        with transactional():
            changed = page.apply_form_values(values)
            log_action(
                action="page.restore",
                entity_type="page",
                entity_id=page.id,
                payload={"fields": changed}
            )

    live = page.form_values()
    result = workflow.decide(action, live, persist=persist)

    if action == lifecycle.DELETE:
        with transactional():
            log_action(
                action="page.restore_delete",
                entity_type="page",
                entity_id=page.id,
                payload={}
            )

    if action in (lifecycle.RESTORE, lifecycle.DELETE):
        services.trust.clear_post_cookie(page.id)

    note(
        ctx.settings.log_enabled,
        f"restore action {action}",
        page_id=page.id,
        user_id=user.id,
        changes=",".join(result.changes) or "-",
    )
    return result
