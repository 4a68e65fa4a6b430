from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from pagerestore import create_app
from pagerestore.extensions import db
from pagerestore.models.page import Page
from pagerestore.models.tenant import Tenant
from pagerestore.models.user import User
from pagerestore.restore.context import RequestContext, RestoreSettings
from pagerestore.restore.services import build_restore_services

PASSWORD = "correct horse"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", {
        "RESTORE_STAGING_DIR": str(tmp_path / "staging"),
        "RESTORE_SALT": "test-salt",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def site(app):
    tenant = Tenant(name="Example", slug="example", domain="localhost")
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture
def editor(site):
    user = User(id=9, email="editor@example.test", role="editor", tenant_id=site.id)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def page(site):
    page = Page(id=5, title="Old", slug="old", body="", tenant_id=site.id)
    db.session.add(page)
    db.session.commit()
    return page


def login(client, user, password=PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": user.email, "password": password})


# ------------------------
# Framework-free helpers for the restore components
# ------------------------

SITE = SimpleNamespace(id=1, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))


def make_record(record_id, created=datetime(2024, 2, 1, tzinfo=timezone.utc)):
    return SimpleNamespace(id=record_id, created_at=created)


class Browser:
    """Cookie jar standing in for one browser across requests."""

    def __init__(self, directory, **settings):
        self.directory = str(directory)
        self.settings = RestoreSettings(staging_dir=self.directory, salt="unit-salt", **settings)
        self.cookies = {}
        self.pages = {5: make_record(5), 6: make_record(6)}
        self.users = {9: make_record(9), 10: make_record(10)}

    def services(self, host="example.test"):
        ctx = RequestContext(
            site=SITE,
            host=host,
            settings=self.settings,
            cookies=dict(self.cookies),
        )
        services = build_restore_services(
            ctx,
            find_page=lambda site, page_id: self.pages.get(int(page_id)),
            find_user=lambda site, user_id: self.users.get(int(user_id)),
        )
        services.ctx = ctx
        return services

    def keep_cookies(self, services):
        for cookie in services.ctx.outgoing_cookies:
            if cookie.max_age:
                self.cookies[cookie.name] = cookie.value
            else:
                self.cookies.pop(cookie.name, None)


@pytest.fixture
def browser(tmp_path):
    return Browser(tmp_path / "staging")
