from fastapi.testclient import TestClient

from helpdesk.main import create_app


def test_unhandled_error_is_generic_500(settings):
    app = create_app(settings)

    @app.get("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.get("/boom")

    assert res.status_code == 500
    assert res.json() == {"message": "Internal server error"}
    assert "hunter2" not in res.text


def test_production_uploads_are_long_cached(settings, upload_dir):
    prod = settings.model_copy(update={"environment": "production"})
    app = create_app(prod)
    (upload_dir / "logo_1.png").write_bytes(b"png")

    with TestClient(app) as c:
        res = c.get("/uploads/logo_1.png")

    assert res.status_code == 200
    assert res.headers["cache-control"] == "public, max-age=31536000, immutable"


def test_missing_upload_is_404(client):
    assert client.get("/uploads/nothing.png").status_code == 404
