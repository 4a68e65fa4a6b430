from __future__ import annotations

from datetime import datetime, timezone

from conftest import SITE, make_record
from pagerestore.restore.tokens import IdentityTokenGenerator, NULL_TOKEN, epoch


def generator(pages=None, users=None, host="example.test", salt="s1"):
    pages = pages or {5: make_record(5), 6: make_record(6)}
    users = users or {9: make_record(9), 10: make_record(10)}
    return IdentityTokenGenerator(
        site=SITE,
        host=host,
        salt=salt,
        find_page=lambda site, page_id: pages.get(page_id),
        find_user=lambda site, user_id: users.get(user_id),
    )


def test_token_is_deterministic():
    assert generator().token_for(5, 9) == generator().token_for(5, 9)
    assert len(generator().token_for(5, 9)) == 64


def test_distinct_pairs_give_distinct_tokens():
    tokens = {generator().token_for(p, u) for p in (5, 6) for u in (9, 10)}
    assert len(tokens) == 4


def test_token_depends_on_salt_and_host():
    base = generator().token_for(5, 9)
    assert generator(salt="rotated").token_for(5, 9) != base
    assert generator(host="other.test").token_for(5, 9) != base


def test_token_depends_on_creation_times():
    later = {5: make_record(5, datetime(2025, 1, 1, tzinfo=timezone.utc))}
    assert generator(pages=later).token_for(5, 9) != generator().token_for(5, 9)


def test_missing_page_or_user_never_verifies():
    gen = generator()
    assert gen.token_for(99, 9) == NULL_TOKEN
    assert gen.token_for(5, 99) == NULL_TOKEN
    assert gen.verify(99, 9, NULL_TOKEN) is False
    assert gen.verify(5, 9, None) is False


def test_verify_accepts_only_the_derived_token():
    gen = generator()
    token = gen.token_for(5, 9)
    assert gen.verify(5, 9, token) is True
    assert gen.verify(5, 10, token) is False
    assert gen.verify(5, 9, token[:-1] + ("0" if token[-1] != "0" else "1")) is False


def test_epoch_treats_naive_datetimes_as_utc():
    aware = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert epoch(aware) == epoch(aware.replace(tzinfo=None)) == 1704067200
    assert epoch(None) == 0
