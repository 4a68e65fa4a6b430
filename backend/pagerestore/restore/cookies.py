import os
import secrets
import string
import time

from .context import RequestContext

USER_COOKIE_NAME = "pw_restore_user"
POST_COOKIE_PREFIX = "pw_restore_post"

USER_COOKIE_LENGTH = 60
POST_COOKIE_LENGTH = 40

DAY = 86400
USER_COOKIE_MAX_AGE = 7 * DAY
USER_COOKIE_REUSE_AGE = DAY
POST_COOKIE_MAX_AGE = DAY

USER_SHADOW_SUFFIX = ".cookie"

_ALPHABET = string.ascii_letters + string.digits


def random_token(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def post_cookie_name(page_id) -> str:
    return f"{POST_COOKIE_PREFIX}{int(page_id)}"


def user_shadow_filename(user_id) -> str:
    return f"user-{int(user_id)}{USER_SHADOW_SUFFIX}"


class CookieTrustStore:
    """
    Two short-lived random cookies that tie requests to one browser.

    The user cookie says "this browser was recently an authenticated editor"
    and is shadowed by a file in the staging directory. The post cookie is set
    on an anonymous submission and must come back with the later restore.
    """

    def __init__(self, ctx: RequestContext, directory: str):
        self.ctx = ctx
        self.directory = directory

    def _shadow_path(self, user_id) -> str:
        return os.path.join(self.directory, user_shadow_filename(user_id))

    def _read_shadow(self, user_id):
        path = self._shadow_path(user_id)
        try:
            with open(path, encoding="utf-8") as fh:
                return fh.read().strip(), os.path.getmtime(path)
        except FileNotFoundError:
            return None, None

    def set_user_cookie(self, user_id) -> str:
        value, mtime = self._read_shadow(user_id)
        if not value or mtime is None or time.time() - mtime >= USER_COOKIE_REUSE_AGE:
            value = random_token(USER_COOKIE_LENGTH)
            os.makedirs(self.directory, exist_ok=True)
            with open(self._shadow_path(user_id), "w", encoding="utf-8") as fh:
                fh.write(value)
        self.ctx.queue_cookie(USER_COOKIE_NAME, value, USER_COOKIE_MAX_AGE)
        return value

    def has_valid_user_cookie(self, user_id) -> bool:
        if not user_id:
            return False
        expected, _ = self._read_shadow(user_id)
        if not expected:
            return False
        return self.ctx.cookies.get(USER_COOKIE_NAME) == expected

    def issue_post_cookie(self, page_id) -> str:
        value = random_token(POST_COOKIE_LENGTH)
        self.ctx.queue_cookie(post_cookie_name(page_id), value, POST_COOKIE_MAX_AGE)
        return value

    def validate_post_cookie(self, page_id, expected_value) -> bool:
        if not expected_value:
            return False
        return self.ctx.cookies.get(post_cookie_name(page_id)) == expected_value

    def clear_post_cookie(self, page_id) -> None:
        self.ctx.queue_cookie(post_cookie_name(page_id), "", 0)
