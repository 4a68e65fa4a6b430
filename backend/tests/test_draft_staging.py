from __future__ import annotations

import json
import os
import time

import pytest

from pagerestore.restore.exceptions import DraftValidationError
from pagerestore.restore.staging import INFO_KEY, draft_filename


def identity(browser, page_id=5, user_id=9, **extra):
    token = browser.services().tokens.token_for(page_id, user_id)
    return {"id": page_id, "uid": user_id, "time": 1700000000, "token": token, **extra}


def editor_visit(browser, user_id=9):
    """An authenticated page load: the user trust cookie gets set."""
    services = browser.services()
    services.trust.set_user_cookie(user_id)
    browser.keep_cookies(services)


def stage(browser, fields, page_id=5, user_id=9, info=None):
    services = browser.services()
    saved = services.store.save(page_id, user_id, fields, info or identity(browser, page_id, user_id))
    browser.keep_cookies(services)
    return saved


def test_save_then_load_returns_submitted_fields(browser):
    editor_visit(browser)
    fields = {
        "title": "Hello",
        "body": "Draft body",
        "csrf_token": "abc",
        "submit_save": "Save",
        "_internal": "x",
    }
    assert stage(browser, dict(fields, **{INFO_KEY: "ignored"})) is True

    loaded = browser.services().store.load(5, 9)
    assert loaded == {"title": "Hello", "body": "Draft body"}


def test_load_info_only_returns_identity_block(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"})

    info = browser.services().store.load(5, 9, info_only=True)
    assert info["id"] == 5
    assert info["uid"] == 9
    assert info["time"] == 1700000000
    assert len(info["postCookieValue"]) == 40


def test_draft_file_layout(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"})

    with open(os.path.join(browser.directory, draft_filename(5, 9))) as fh:
        data = json.load(fh)
    assert data["title"] == "Hello"
    assert set(json.loads(data[INFO_KEY])) == {"id", "uid", "time", "token", "postCookieValue"}


@pytest.mark.parametrize("page_id, info_update", [
    ("abc", {}),
    (0, {"id": 0}),
    (5, {"id": 6}),
    (5, {"uid": 10}),
    (5, {"token": "forged"}),
])
def test_save_refuses_bad_identity(browser, page_id, info_update):
    editor_visit(browser)
    info = identity(browser)
    info.update(info_update)
    assert stage(browser, {"title": "Hello"}, page_id=page_id, info=info) is False
    assert os.listdir(browser.directory) == ["user-9.cookie"]


def test_save_refuses_missing_identity_keys(browser):
    editor_visit(browser)
    info = identity(browser)
    del info["token"]
    assert stage(browser, {"title": "Hello"}, info=info) is False
    assert browser.services().store.save(5, 9, {"title": "x"}, "not a dict") is False


def test_save_requires_user_cookie_when_enabled(browser):
    assert stage(browser, {"title": "Hello"}) is False
    assert not browser.services().store.exists(5, 9)


def test_save_without_user_cookie_when_disabled(tmp_path):
    from conftest import Browser

    b = Browser(tmp_path, validate_user_cookie=False)
    assert stage(b, {"title": "Hello"}) is True


def test_non_string_values_are_not_staged(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello", "count": 3, "tags": ["a"]})
    assert browser.services().store.load(5, 9) == {"title": "Hello"}


def test_tampered_token_removes_draft(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"})
    path = os.path.join(browser.directory, draft_filename(5, 9))

    with open(path) as fh:
        data = json.load(fh)
    info = json.loads(data[INFO_KEY])
    info["token"] = ("0" if info["token"][0] != "0" else "1") + info["token"][1:]
    data[INFO_KEY] = json.dumps(info)
    with open(path, "w") as fh:
        json.dump(data, fh)

    assert browser.services().store.load(5, 9) is None
    assert not os.path.exists(path)


def test_corrupt_file_removed(browser):
    os.makedirs(browser.directory, exist_ok=True)
    path = os.path.join(browser.directory, draft_filename(5, 9))
    with open(path, "w") as fh:
        fh.write("{not json")

    assert browser.services().store.load(5, 9) is None
    assert not os.path.exists(path)


def test_debug_mode_surfaces_reason_and_keeps_file(tmp_path):
    from conftest import Browser

    b = Browser(tmp_path, debug=True)
    editor_visit(b)
    stage(b, {"title": "Hello"})
    b.cookies.clear()

    with pytest.raises(DraftValidationError) as err:
        b.services().store.load(5, 9)
    assert err.value.reason == "user cookie mismatch"
    assert b.services().store.exists(5, 9)


def test_missing_post_cookie_invalidates_draft(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"})
    browser.cookies = {k: v for k, v in browser.cookies.items() if not k.startswith("pw_restore_post")}

    assert browser.services().store.load(5, 9) is None
    assert not browser.services().store.exists(5, 9)


def test_disabled_post_cookie_validation_loads_without_cookie(tmp_path):
    from conftest import Browser

    b = Browser(tmp_path, validate_post_cookie=False)
    editor_visit(b)
    stage(b, {"title": "Hello"})

    assert not any(name.startswith("pw_restore_post") for name in b.cookies)
    assert b.services().store.load(5, 9) == {"title": "Hello"}


def test_delete_then_load_is_not_found(browser):
    store = browser.services().store
    store.delete(5, 9)
    assert store.load(5, 9) is None

    editor_visit(browser)
    stage(browser, {"title": "Hello"})
    store = browser.services().store
    store.delete(5, 9)
    store.delete(5, 9)
    assert store.load(5, 9) is None


def test_sweep_removes_expired_files(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"})
    stage(browser, {"title": "Other"}, page_id=6)
    draft_old = os.path.join(browser.directory, draft_filename(5, 9))
    draft_new = os.path.join(browser.directory, draft_filename(6, 9))
    shadow = os.path.join(browser.directory, "user-9.cookie")

    now = time.time()
    os.utime(draft_old, (now - 25 * 3600, now - 25 * 3600))
    os.utime(shadow, (now - 6 * 86400, now - 6 * 86400))

    assert browser.services().store.sweep() == 1
    assert not os.path.exists(draft_old)
    assert os.path.exists(draft_new)
    assert os.path.exists(shadow)

    os.utime(shadow, (now - 8 * 86400, now - 8 * 86400))
    assert browser.services().store.sweep() == 1
    assert not os.path.exists(shadow)


def test_pending_for_lists_pages_with_drafts(browser):
    editor_visit(browser)
    stage(browser, {"title": "Hello"}, page_id=6)
    stage(browser, {"title": "Hello"}, page_id=5)
    store = browser.services().store
    assert store.pending_for(9) == [5, 6]
    assert store.pending_for(10) == []
