from pagerestore.restore.context import RequestContext
from pagerestore.restore.services import build_restore_services


def sweep_after_login(
    *,
    ctx: RequestContext,
    user,
) -> list:
    """
    Post-login hook: expire old staging files, then report which pages
    still have a draft waiting for this user.
    """
    services = build_restore_services(ctx)
    services.store.sweep()
    return services.store.pending_for(user.id)
