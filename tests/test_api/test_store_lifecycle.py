"""
Application startup and shutdown manage the store.
"""

from fastapi.testclient import TestClient

from attachments_api.app.main import create_app


def test_store_opened_on_startup_and_closed_on_shutdown(app_settings):
    app = create_app("ratings", app_settings)
    assert app.state.store.closed
    assert not hasattr(app.state, "settings")

    with TestClient(app) as client:
        assert not app.state.store.closed
        assert client.get("/status").status_code == 200

    assert app.state.store.closed


def test_data_survives_restart(app_settings):
    with TestClient(create_app("ratings", app_settings)) as client:
        client.put("/api/v1/books/b1/ratings", json={"three_stars": 2})

    with TestClient(create_app("ratings", app_settings)) as client:
        assert client.get("/api/v1/books/b1/ratings").json()["three_stars"] == 2


def test_services_share_the_store(app_settings):
    with TestClient(create_app("comments", app_settings)) as comments, TestClient(
        create_app("ratings", app_settings)
    ) as ratings:
        comments.post("/api/v1/books/b1/comments", json={"value": "nice"})
        # the comment post provisioned b1, so the rating reads as zero
        assert ratings.get("/api/v1/books/b1/ratings").status_code == 200
