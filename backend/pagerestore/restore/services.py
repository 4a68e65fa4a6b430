from dataclasses import dataclass

from .context import RequestContext
from .cookies import CookieTrustStore
from .staging import DraftStagingStore
from .tokens import IdentityTokenGenerator


@dataclass
class RestoreServices:
    tokens: IdentityTokenGenerator
    trust: CookieTrustStore
    store: DraftStagingStore


def build_restore_services(ctx: RequestContext, *, find_page=None, find_user=None) -> RestoreServices:
    settings = ctx.settings
    tokens = IdentityTokenGenerator(
        site=ctx.site,
        host=ctx.host,
        salt=settings.salt,
        find_page=find_page,
        find_user=find_user,
    )
    trust = CookieTrustStore(ctx, settings.staging_dir)
    store = DraftStagingStore(
        settings.staging_dir,
        tokens=tokens,
        trust=trust,
        validate_user_cookie=settings.validate_user_cookie,
        validate_post_cookie=settings.validate_post_cookie,
        log_enabled=settings.log_enabled,
        debug=settings.debug,
    )
    return RestoreServices(tokens=tokens, trust=trust, store=store)
