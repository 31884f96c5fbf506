"""Shared fixtures: an app on in-memory SQLite, a seeded user, HTTP clients."""

import pytest
from fastapi.testclient import TestClient

from helpdesk.core.config import Settings
from helpdesk.core.security import hash_password
from helpdesk.main import create_app
from helpdesk.models.user import User

USERNAME = "admin"
PASSWORD = "changeme"
TEST_ROUNDS = 1000


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir):
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        session_secret="test-session-secret",
        upload_dir=str(upload_dir),
        password_hash_rounds=TEST_ROUNDS,
        login_rate_limit="5 per minute",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    db = application.state.session_factory()
    try:
        db.add(User(username=USERNAME, password_hash=hash_password(PASSWORD, TEST_ROUNDS)))
        db.commit()
    finally:
        db.close()
    return application


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    res = client.post("/auth/login", json={"username": USERNAME, "password": PASSWORD})
    assert res.status_code == 200, res.text
    return client


@pytest.fixture
def make_ticket(auth_client):
    def _make(**fields):
        body = {"accountName": "Acme", "city": "Springfield"}
        body.update(fields)
        res = auth_client.post("/tickets", json=body)
        assert res.status_code == 200, res.text
        return res.json()

    return _make
