from pagerestore.models.page import Page
from pagerestore.utils.audit import log_action
from pagerestore.utils.transaction import transactional


def update_page(
    *,
    page: Page,
    values: dict,
) -> list:
    """
    Save submitted editor fields onto a page.

    Returns the names of the fields that changed.
    """
    with transactional():
        changed = page.apply_form_values(values)

        if changed:
            log_action(
                action="page.update",
                entity_type="page",
                entity_id=page.id,
                payload={"fields": changed}
            )

    return changed
