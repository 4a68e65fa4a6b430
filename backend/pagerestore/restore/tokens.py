import hashlib
from datetime import datetime, timezone

# Returned when the page or user cannot be resolved; never verifies.
NULL_TOKEN = ""

TOKEN_DELIMITER = "|"


def epoch(value) -> int:
    """Integer epoch seconds; naive datetimes are taken as UTC."""
    if value is None:
        return 0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return int(value)


def _default_find_page(site, page_id):
    from pagerestore.models.page import Page

    return Page.query.filter_by(id=page_id, tenant_id=site.id).first()


def _default_find_user(site, user_id):
    from pagerestore.models.user import User

    return User.query.filter_by(id=user_id, tenant_id=site.id).first()


class IdentityTokenGenerator:
    """
    Derives the token binding a (page, user) pair to the current site.

    The token covers both ids, both creation times, the site install time,
    the HTTP host and the site salt, so it only changes when one of those
    does (in practice, when the salt is rotated).
    """

    def __init__(self, *, site, host, salt, find_page=None, find_user=None):
        self.site = site
        self.host = host
        self.salt = salt
        self._find_page = find_page or _default_find_page
        self._find_user = find_user or _default_find_user

    def token(self, page, user) -> str:
        if page is None or user is None or not page.id or not user.id:
            return NULL_TOKEN
        parts = [
            page.id,
            epoch(page.created_at),
            user.id,
            epoch(user.created_at),
            epoch(getattr(self.site, "created_at", None)),
            self.host,
            self.salt,
        ]
        joined = TOKEN_DELIMITER.join(str(part) for part in parts)
        return hashlib.sha256(joined.encode("utf-8")).hexdigest()

    def token_for(self, page_id, user_id) -> str:
        if not page_id or not user_id:
            return NULL_TOKEN
        page = self._find_page(self.site, page_id)
        user = self._find_user(self.site, user_id)
        return self.token(page, user)

    def verify(self, page_id, user_id, token) -> bool:
        expected = self.token_for(page_id, user_id)
        if expected == NULL_TOKEN or not isinstance(token, str):
            return False
        # Plain comparison, not constant time. Known weakness, see DESIGN.md.
        return token == expected
