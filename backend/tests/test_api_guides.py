from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import guides as guides_router
from db import get_session
from repositories import StoreError
from services import enrichment

IMAGES = {"Tokyo": "https://img/tokyo.jpg", "Paris": "https://img/paris.jpg"}
COORDS = {"Tokyo": (35.68, 139.76), "Kyoto": (35.01, 135.77), "Paris": (48.85, 2.35)}


@pytest.fixture
def client(session_factory, monkeypatch):
    monkeypatch.setattr(enrichment, "lookup_city_image", lambda city: IMAGES.get(city))
    monkeypatch.setattr(enrichment, "geocode_city", lambda city: COORDS.get(city))

    def override_session():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app = FastAPI()
    app.include_router(guides_router.router, prefix="/guide")
    app.include_router(guides_router.alias_router)
    app.dependency_overrides[get_session] = override_session
    return TestClient(app)


def test_post_then_get_renders_guide(client):
    resp = client.post(
        "/guide/japan",
        content="## Tokyo\nSome text\n## Kyoto\nMore text",
        headers={"Content-Type": "text/markdown"},
    )
    assert resp.status_code == 200
    assert "japan" in resp.text
    assert "2 cities, 1 images, 2 locations" in resp.text

    page = client.get("/guide/japan")
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert "<h2>Tokyo</h2>" in page.text
    assert "<h2>Kyoto</h2>" in page.text
    assert 'src="https://img/tokyo.jpg"' in page.text
    assert 'id="map"' in page.text


def test_stored_record_keeps_document_order(client):
    client.post("/guide/japan", content="## Kyoto\n## Tokyo\n## Kyoto\n## Atlantis")

    data = client.get("/guide/japan/data").json()

    assert data["heading_pattern"] == "markdown"
    assert data["city_images"] == {"Tokyo": "https://img/tokyo.jpg"}
    assert [c["name"] for c in data["coordinates"]] == ["Kyoto", "Tokyo"]


def test_image_service_failure_keeps_coordinates(client, monkeypatch):
    def flaky_image(city):
        if city == "Tokyo":
            raise RuntimeError("image service unavailable")
        return IMAGES.get(city)

    monkeypatch.setattr(enrichment, "lookup_city_image", flaky_image)

    resp = client.post("/guide/japan", content="## Tokyo\n## Paris")
    assert resp.status_code == 200

    data = client.get("/guide/japan/data").json()
    assert data["city_images"] == {"Paris": "https://img/paris.jpg"}
    assert [c["name"] for c in data["coordinates"]] == ["Tokyo", "Paris"]


def test_unknown_guide_is_not_found(client):
    for path in ("/guide/never-written", "/never-written", "/guide/never-written/data"):
        resp = client.get(path)
        assert resp.status_code == 404
        assert resp.json()["detail"] == guides_router.NOT_FOUND_MESSAGE


def test_alias_route_serves_same_page(client):
    client.post("/guide/paris-trip", content="## Paris\nBaguettes")
    assert client.get("/paris-trip").text == client.get("/guide/paris-trip").text


def test_rewrite_replaces_previous_guide(client):
    client.post("/guide/paris-trip", content="## Paris\nFirst draft about the Louvre")
    client.post("/guide/paris-trip", content="## Tokyo\nSecond draft")

    page = client.get("/guide/paris-trip").text

    assert "Second draft" in page
    assert "Louvre" not in page
    assert "Paris" not in page
    assert "https://img/paris.jpg" not in page


def test_html_guide_detected_and_enriched(client):
    html = "<h3>Jour 1 – Paris</h3><p>Louvre</p><h3>Jour 2 – Kyoto</h3>"
    client.post("/guide/mixed", content=html, headers={"Content-Type": "text/html"})

    data = client.get("/guide/mixed/data").json()
    assert data["heading_pattern"] == "day_separator"
    assert data["city_images"] == {"Paris": "https://img/paris.jpg"}

    page = client.get("/guide/mixed").text
    assert 'src="https://img/paris.jpg"' in page


def test_explicit_pattern_overrides_detection(client):
    html = "<h3>Jour 1 – Paris</h3>\n## Tokyo"
    client.post("/guide/forced?pattern=markdown", content=html)
    assert client.get("/guide/forced/data").json()["coordinates"][0]["name"] == "Tokyo"


def test_unknown_pattern_is_rejected(client):
    resp = client.post("/guide/x?pattern=yaml", content="## Tokyo")
    assert resp.status_code == 422


def test_guide_without_headings_is_saved(client):
    resp = client.post("/guide/notes", content="Just some notes, no stops yet.")
    assert resp.status_code == 200
    page = client.get("/guide/notes").text
    assert "No geographic data available" in page


def test_store_failure_on_write_is_reported(client):
    with patch.object(
        guides_router.GuidesRepository, "upsert_guide", side_effect=StoreError("database is locked")
    ):
        resp = client.post("/guide/japan", content="## Tokyo")
    assert resp.status_code == 500
    assert "database is locked" in resp.json()["detail"]


def test_store_failure_on_read_is_not_a_not_found(client):
    with patch.object(
        guides_router.GuidesRepository, "get_guide", side_effect=StoreError("connection refused")
    ):
        resp = client.get("/guide/japan")
    assert resp.status_code == 500
    assert "connection refused" in resp.json()["detail"]


def test_landing_page_and_health():
    from api.main import app

    client = TestClient(app)
    landing = client.get("/")
    assert landing.status_code == 200
    assert "<textarea" in landing.text
    assert client.get("/health").json() == {"status": "healthy"}
