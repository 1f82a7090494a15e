import logging
from unittest.mock import patch

from fastapi.testclient import TestClient

from src.core.config import settings
from src.core.jmrl_client import UpstreamTransportError
from src.web.main import app
from src.web.routers.pool import _build_tag


def test_identify_english(client):
    response = client.get("/identify")
    assert response.status_code == 200
    assert response.headers["content-language"] == "en"

    data = response.json()
    assert data["name"] == "Jefferson-Madison Regional Library"
    assert data["mode"] == "record"
    attributes = {a["name"]: a for a in data["attributes"]}
    assert attributes["facets"]["supported"] is False
    assert attributes["logo_url"]["value"] == "/assets/jmrl_logo.svg"
    assert "value" not in attributes["sorting"]


def test_identify_spanish(client):
    response = client.get("/identify", headers={"Accept-Language": "es-ES,es;q=0.9,en;q=0.8"})
    assert response.status_code == 200
    assert response.headers["content-language"] == "es"
    assert response.json()["name"] == "Biblioteca Regional Jefferson-Madison"


def test_identify_unknown_language_falls_back_to_english(client):
    response = client.get("/identify", headers={"Accept-Language": "fr-FR"})
    assert response.headers["content-language"] == "en"
    assert response.json()["name"] == "Jefferson-Madison Regional Library"


def test_healthcheck_healthy(client, mock_jmrl_client):
    response = client.get("/healthcheck")
    assert response.status_code == 200
    assert response.json() == {"jmrl": {"healthy": True}}
    mock_jmrl_client.about.assert_called_once()


def test_healthcheck_unhealthy(client, mock_jmrl_client):
    mock_jmrl_client.about.side_effect = UpstreamTransportError(408, "https://jmrl.test/about timed out")

    response = client.get("/healthcheck")
    assert response.status_code == 200
    assert response.json() == {
        "jmrl": {"healthy": False, "message": "https://jmrl.test/about timed out"},
    }


@patch("src.web.routers.pool._build_tag", return_value="42")
def test_version(mock_build_tag, client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": settings.version, "build": "42"}


def test_build_tag(tmp_path):
    assert _build_tag(tmp_path) == "unknown"
    (tmp_path / "buildtag.20240101.1").touch()
    assert _build_tag(tmp_path) == "20240101.1"


def test_build_tag_ambiguous(tmp_path):
    (tmp_path / "buildtag.1").touch()
    (tmp_path / "buildtag.2").touch()
    assert _build_tag(tmp_path) == "unknown"


def test_providers(client):
    response = client.get("/api/providers")
    assert response.status_code == 200
    providers = {p["provider"]: p for p in response.json()["providers"]}
    assert set(providers) == {"freading", "overdrive"}
    assert providers["overdrive"]["homepage_url"] == "https://www.overdrive.com"


def test_favicon(client):
    assert client.get("/favicon.ico").status_code == 204


def test_metrics(client):
    client.get("/healthcheck")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "jmrl_pool_requests_total" in response.text
    assert 'path="/healthcheck"' in response.text


def test_root(client):
    data = client.get("/").json()
    assert data["name"] == "JMRL Pool API"
    assert data["health"] == "/healthcheck"


def test_startup_and_shutdown_logging(caplog):
    with caplog.at_level(logging.INFO, logger="src.web.main"):
        with TestClient(app) as test_client:
            assert test_client.get("/").status_code == 200
    messages = [r.getMessage() for r in caplog.records if r.name == "src.web.main"]
    assert any("ready" in m for m in messages)
    assert messages[-1] == "JMRL pool shutting down"
