import json
import os
import re
import time

from pagerestore.utils.restore_log import note
from .cookies import CookieTrustStore, USER_COOKIE_MAX_AGE, USER_SHADOW_SUFFIX, DAY
from .exceptions import DraftValidationError
from .tokens import IdentityTokenGenerator

# Form field holding the JSON identity block, also the key it is stored under
INFO_KEY = "_edit_restore"

INTERNAL_KEYS = frozenset({INFO_KEY, "csrf_token", "submit_save", "submit_publish", "restore_action"})
INTERNAL_PREFIXES = ("_", "submit_")

DRAFT_MAX_AGE = DAY
REQUIRED_INFO_KEYS = ("token", "id", "uid")

_DRAFT_FILE = re.compile(r"^page-(\d+)-user-(\d+)\.json$")


def draft_filename(page_id, user_id) -> str:
    return f"page-{int(page_id)}-user-{int(user_id)}.json"


def is_internal_key(key: str) -> bool:
    return key in INTERNAL_KEYS or key.startswith(INTERNAL_PREFIXES)


def _positive_int(value):
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class DraftStagingStore:
    """
    One JSON file per (page, user) holding a submission made after the
    editing session expired.

    Nothing read back from disk is trusted: ``load`` re-derives the identity
    token and re-checks the trust cookies on every call, and removes the file
    when any check fails.
    """

    def __init__(
        self,
        directory: str,
        *,
        tokens: IdentityTokenGenerator,
        trust: CookieTrustStore,
        validate_user_cookie: bool = True,
        validate_post_cookie: bool = True,
        log_enabled: bool = False,
        debug: bool = False,
    ):
        self.directory = directory
        self.tokens = tokens
        self.trust = trust
        self.validate_user_cookie = validate_user_cookie
        self.validate_post_cookie = validate_post_cookie
        self.log_enabled = log_enabled
        self.debug = debug

    def path_for(self, page_id, user_id) -> str:
        return os.path.join(self.directory, draft_filename(page_id, user_id))

    # ------------------------
    # Write side
    # ------------------------

    def save(self, page_id, user_id, form_fields: dict, identity_info) -> bool:
        page_id = _positive_int(page_id)
        user_id = _positive_int(user_id)
        if page_id is None or user_id is None:
            return self._refuse("invalid page or user id")

        if not isinstance(identity_info, dict):
            return self._refuse("missing identity info", page_id=page_id)
        if any(key not in identity_info for key in REQUIRED_INFO_KEYS):
            return self._refuse("incomplete identity info", page_id=page_id)
        if _positive_int(identity_info["id"]) != page_id:
            return self._refuse("page id mismatch", page_id=page_id)
        if _positive_int(identity_info["uid"]) != user_id:
            return self._refuse("user id mismatch", page_id=page_id)

        if not self.tokens.verify(page_id, user_id, identity_info["token"]):
            return self._refuse("identity token mismatch", page_id=page_id, user_id=user_id)

        if self.validate_user_cookie and not self.trust.has_valid_user_cookie(user_id):
            return self._refuse("user cookie mismatch", page_id=page_id, user_id=user_id)

        info = {
            "id": page_id,
            "uid": user_id,
            "time": identity_info.get("time") or int(time.time()),
            "token": identity_info["token"],
        }
        if self.validate_post_cookie:
            info["postCookieValue"] = self.trust.issue_post_cookie(page_id)

        data = {
            key: value
            for key, value in (form_fields or {}).items()
            if isinstance(key, str) and isinstance(value, str) and key != INFO_KEY
        }
        data[INFO_KEY] = json.dumps(info)

        os.makedirs(self.directory, exist_ok=True)
        with open(self.path_for(page_id, user_id), "w", encoding="utf-8") as fh:
            json.dump(data, fh)

        note(self.log_enabled, "draft staged", page_id=page_id, user_id=user_id, fields=len(data) - 1)
        return True

    def _refuse(self, reason, **details) -> bool:
        note(self.log_enabled, f"draft refused: {reason}", **details)
        return False

    # ------------------------
    # Read side
    # ------------------------

    def exists(self, page_id, user_id) -> bool:
        return os.path.isfile(self.path_for(page_id, user_id))

    def load(self, page_id, user_id, info_only: bool = False):
        """
        Return the validated draft fields (or only its identity info), or
        ``None`` when there is no valid draft.
        """
        page_id = _positive_int(page_id)
        user_id = _positive_int(user_id)
        if page_id is None or user_id is None:
            return None

        path = self.path_for(page_id, user_id)
        if not os.path.isfile(path):
            return None

        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return self._discard(path, "unreadable draft file", page_id, user_id)
        if not isinstance(data, dict):
            return self._discard(path, "draft is not an object", page_id, user_id)

        try:
            info = json.loads(data.get(INFO_KEY))
        except (TypeError, ValueError):
            return self._discard(path, "missing identity info", page_id, user_id)
        if not isinstance(info, dict):
            return self._discard(path, "missing identity info", page_id, user_id)

        if _positive_int(info.get("id")) != page_id or _positive_int(info.get("uid")) != user_id:
            return self._discard(path, "identity info does not match file", page_id, user_id)
        if not self.tokens.verify(page_id, user_id, info.get("token")):
            return self._discard(path, "identity token mismatch", page_id, user_id)
        if self.validate_user_cookie and not self.trust.has_valid_user_cookie(user_id):
            return self._discard(path, "user cookie mismatch", page_id, user_id)
        if self.validate_post_cookie and not self.trust.validate_post_cookie(
            page_id, info.get("postCookieValue")
        ):
            return self._discard(path, "post cookie mismatch", page_id, user_id)

        if info_only:
            return info
        return {
            key: value
            for key, value in data.items()
            if not is_internal_key(key) and isinstance(value, str)
        }

    def _discard(self, path, reason, page_id, user_id):
        note(self.log_enabled, f"draft invalid: {reason}", page_id=page_id, user_id=user_id)
        if self.debug:
            raise DraftValidationError(reason, page_id=page_id, user_id=user_id)
        self._remove(path)
        return None

    def pending_for(self, user_id) -> list:
        """Page ids that have a draft file for ``user_id`` (not validated)."""
        user_id = _positive_int(user_id)
        if user_id is None or not os.path.isdir(self.directory):
            return []
        pages = []
        for name in os.listdir(self.directory):
            match = _DRAFT_FILE.match(name)
            if match and int(match.group(2)) == user_id:
                pages.append(int(match.group(1)))
        return sorted(pages)

    # ------------------------
    # Removal
    # ------------------------

    def delete(self, page_id, user_id) -> None:
        page_id = _positive_int(page_id)
        user_id = _positive_int(user_id)
        if page_id is None or user_id is None:
            return
        if self._remove(self.path_for(page_id, user_id)):
            note(self.log_enabled, "draft deleted", page_id=page_id, user_id=user_id)

    def sweep(self) -> int:
        """Remove drafts older than a day and user shadow files older than a week."""
        if not os.path.isdir(self.directory):
            return 0
        now = time.time()
        removed = 0
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                if _DRAFT_FILE.match(entry.name):
                    max_age = DRAFT_MAX_AGE
                elif entry.name.endswith(USER_SHADOW_SUFFIX):
                    max_age = USER_COOKIE_MAX_AGE
                else:
                    continue
                try:
                    age = now - entry.stat().st_mtime
                except FileNotFoundError:
                    continue
                if age > max_age and self._remove(entry.path):
                    removed += 1
        if removed:
            note(self.log_enabled, "sweep removed expired files", count=removed)
        return removed

    @staticmethod
    def _remove(path) -> bool:
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        return True
