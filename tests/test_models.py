"""Tests for host URL canonicalisation, /health parsing and settings."""

import pytest
from pydantic import ValidationError

from inference_router import HealthResponse, InvalidHostUrl, RouterSettings, canonical_host_url


class TestCanonicalHostUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("http://h1:8000", "http://h1:8000"),
            ("http://h1:8000/", "http://h1:8000"),
            ("http://h1", "http://h1:80"),
            ("https://h1", "https://h1:443"),
            ("  http://127.0.0.1:5005 ", "http://127.0.0.1:5005"),
            ("http://[::1]:8000", "http://[::1]:8000"),
            ("http://[::1]/", "http://[::1]:80"),
        ],
    )
    def test_canonical(self, raw, expected):
        assert canonical_host_url(raw) == expected

    @pytest.mark.parametrize("raw", ["", "h1:8000/x", "http://h1:8000/v1", "http://h1:8000?x=1"])
    def test_rejected(self, raw):
        with pytest.raises(InvalidHostUrl):
            canonical_host_url(raw)

    def test_invalid_host_url_is_value_error(self):
        with pytest.raises(ValueError):
            canonical_host_url("http://h1:8000/v1")


class TestHealthResponse:
    def test_precedence(self):
        assert HealthResponse(model="b", model_name="c").resolved_model_id == "b"
        assert HealthResponse(model_id="a", model="b").resolved_model_id == "a"

    def test_unknown_when_absent(self):
        assert HealthResponse.model_validate({"status": "ok"}).resolved_model_id == "unknown"


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("USE_LOCALHOST_INFERENCE", raising=False)
        monkeypatch.delenv("IS_DOCKER_COMPOSE", raising=False)
        settings = RouterSettings()
        assert settings.use_localhost_inference is False
        assert settings.default_inference_host == "http://127.0.0.1:5002"
        assert settings.discovery_timeout == 2.0
        assert settings.discovery_cache_ttl == 30.0

    def test_routing_mode_from_env(self, monkeypatch):
        monkeypatch.setenv("USE_LOCALHOST_INFERENCE", "true")
        monkeypatch.setenv("IS_DOCKER_COMPOSE", "1")
        settings = RouterSettings()
        assert settings.use_localhost_inference is True
        assert settings.default_inference_host == "http://inference:5002"

    def test_ports_from_comma_string(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_PORTS", "5002, 5010,5011")
        assert RouterSettings().discovery_ports == [5002, 5010, 5011]

    def test_ports_from_json(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_PORTS", "[5005, 5006]")
        assert RouterSettings().discovery_ports == [5005, 5006]

    def test_settings_are_frozen(self):
        settings = RouterSettings()
        with pytest.raises(ValidationError):
            settings.use_localhost_inference = True
