from fastapi.testclient import TestClient

from helpdesk.core.config import Settings
from helpdesk.core.security import hash_password
from helpdesk.core.sessions import SessionManager, sign, unsign
from helpdesk.main import create_app
from helpdesk.models.session import session_model
from helpdesk.models.user import User

from conftest import PASSWORD, TEST_ROUNDS, USERNAME

COOKIE = "helpdesk.sid"
UserSession = session_model()


def _login(client, username=USERNAME, password=PASSWORD, **kwargs):
    return client.post("/auth/login", json={"username": username, "password": password}, **kwargs)


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_me_anonymous(client):
    res = client.get("/auth/me")
    assert res.status_code == 200
    assert res.json() == {"authenticated": False}


def test_login_sets_cookie_and_me_reports_user(client):
    res = _login(client)
    assert res.status_code == 200
    assert res.json() == {"message": "Logged in"}

    set_cookie = res.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE}=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=14400" in set_cookie
    assert "samesite=lax" in set_cookie.lower()
    assert "secure" not in set_cookie.lower()

    me = client.get("/auth/me").json()
    assert me["authenticated"] is True
    assert me["user"]["username"] == USERNAME
    assert set(me["user"]) == {"id", "username"}


def test_unknown_user_and_wrong_password_look_identical(client):
    unknown = _login(client, username="nobody", password="whatever")
    wrong = _login(client, password="not-the-password")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"message": "Invalid credentials"}
    assert "set-cookie" not in unknown.headers
    assert "set-cookie" not in wrong.headers


def test_username_match_is_exact(client):
    assert _login(client, username=USERNAME.upper()).status_code == 401


def test_login_missing_fields_is_400(client):
    res = client.post("/auth/login", json={"username": USERNAME})
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation error"
    assert {"path": "body.password", "message": "Field required"} in body["errors"]


def test_login_rotates_session_token(client, app, settings):
    first = _login(client).cookies[COOKIE]
    second = _login(client).cookies[COOKIE]

    assert first != second

    db = app.state.session_factory()
    try:
        sessions = SessionManager(db, settings)
        assert sessions.lookup(unsign(first, settings.session_secret)) is None
        assert sessions.lookup(unsign(second, settings.session_secret)) is not None
    finally:
        db.close()


def test_planted_anonymous_session_is_discarded_on_login(app, settings, db):
    planted = SessionManager(db, settings).create(None)
    planted_cookie = sign(planted, settings.session_secret)

    with TestClient(app, cookies={COOKIE: planted_cookie}) as c:
        # An anonymous session never opens a protected route
        assert c.get("/tickets").status_code == 401

        res = _login(c)
        assert res.status_code == 200
        issued = unsign(res.cookies[COOKIE], settings.session_secret)

    assert issued is not None
    assert issued != planted
    db.expire_all()
    assert db.get(UserSession, planted) is None


def test_logout_destroys_session(auth_client, db):
    assert auth_client.get("/tickets").status_code == 200

    res = auth_client.post("/auth/logout")
    assert res.status_code == 200
    assert res.json() == {"message": "Logged out"}
    assert res.headers["set-cookie"].startswith(f"{COOKIE}=")

    assert db.query(UserSession).count() == 0
    assert auth_client.get("/tickets").status_code == 401
    assert auth_client.get("/auth/me").json() == {"authenticated": False}


def test_logout_without_session_is_harmless(client):
    res = client.post("/auth/logout")
    assert res.status_code == 200


def test_forged_cookie_is_rejected(client):
    client.cookies.set(COOKIE, "made-up-token.bad-signature")
    assert client.get("/tickets").status_code == 401


def test_login_is_rate_limited(client):
    for _ in range(5):
        assert _login(client, password="wrong").status_code == 401

    res = _login(client)
    assert res.status_code == 429
    assert res.json() == {"message": "Too many login attempts, please try again later"}


def test_cross_origin_mode(upload_dir):
    settings = Settings(
        _env_file=None,
        database_url="sqlite://",
        session_secret="x",
        upload_dir=str(upload_dir),
        password_hash_rounds=TEST_ROUNDS,
        cors_enabled=True,
        cors_origin="http://frontend.test",
    )
    app = create_app(settings)
    db = app.state.session_factory()
    db.add(User(username=USERNAME, password_hash=hash_password(PASSWORD, TEST_ROUNDS)))
    db.commit()
    db.close()

    with TestClient(app) as c:
        preflight = c.options(
            "/auth/login",
            headers={
                "Origin": "http://frontend.test",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert preflight.headers["access-control-allow-origin"] == "http://frontend.test"
        assert preflight.headers["access-control-allow-credentials"] == "true"

        res = _login(c, headers={"Origin": "http://frontend.test"})
        assert res.status_code == 200
        set_cookie = res.headers["set-cookie"].lower()
        assert "samesite=none" in set_cookie
        assert "secure" in set_cookie
