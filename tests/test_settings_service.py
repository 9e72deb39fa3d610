"""Tests for settings_service module."""

import copy

import pytest
import yaml

from node_service.constants import SERVICE_ROOT
from node_service.services.settings_service import (
    DEFAULT_SETTINGS,
    ClientSettings,
    ConfigurationError,
    load_settings,
    parse_settings,
)


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestLoadSettings:

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")

        assert settings.service.name == "skeleton.herp.app"
        assert settings.orchestrator.host == "127.0.0.1:5050"
        assert settings.processor == "echo"

    def test_bundled_config_file_loads(self):
        settings = load_settings(SERVICE_ROOT / "config" / "node.yaml")

        assert settings.service.version == "1.0.0"
        assert settings.node_schema.primary.inputs[0].name == "inputField1"
        assert settings.client.attempts == 1

    def test_yaml_overrides(self, tmp_path):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["service"]["title"] = "Custom"
        data["client"] = {"timeout": 3, "attempts": 2}

        settings = load_settings(write_yaml(tmp_path / "node.yaml", data))

        assert settings.service.title == "Custom"
        assert settings.client.timeout == 3
        assert settings.client.attempts == 2

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "node.yaml"
        path.write_text("service: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(path)

    def test_top_level_not_mapping(self, tmp_path):
        path = tmp_path / "node.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(path)


class TestParseSettings:

    def test_unknown_field_type_rejected(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["schema"]["nodeDefinitions"][0]["inputs"][0]["fieldType"] = "number"

        with pytest.raises(ConfigurationError, match="unsupported fieldType"):
            parse_settings(data)

    def test_duplicate_input_names_rejected(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        field = data["schema"]["nodeDefinitions"][0]["inputs"][0]
        data["schema"]["nodeDefinitions"][0]["inputs"] = [field, dict(field)]

        with pytest.raises(ConfigurationError, match="duplicate field name"):
            parse_settings(data)

    def test_empty_node_definitions_rejected(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["schema"]["nodeDefinitions"] = []

        with pytest.raises(ConfigurationError):
            parse_settings(data)

    def test_missing_endpoint_rejected(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["orchestrator"]["endpoints"] = {"register": "/services/register"}

        with pytest.raises(ConfigurationError, match="missing orchestrator endpoint"):
            parse_settings(data)

    def test_zero_attempts_rejected(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["client"] = {"attempts": 0}

        with pytest.raises(ConfigurationError):
            parse_settings(data)


class TestOrchestratorEndpoint:

    def test_url_for(self, settings):
        endpoint = settings.orchestrator

        assert endpoint.url_for("login") == "http://127.0.0.1:5050/users/login"
        assert endpoint.url_for("install", "abc") == "http://127.0.0.1:5050/services/install/abc"

    def test_url_for_escapes_segments(self, settings):
        url = settings.orchestrator.url_for("install", "a/b?c#d")

        assert url == "http://127.0.0.1:5050/services/install/a%2Fb%3Fc%23d"

    def test_explicit_scheme_kept(self):
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["orchestrator"]["host"] = "https://herp.example.com/"

        endpoint = parse_settings(data).orchestrator

        assert endpoint.url_for("register") == "https://herp.example.com/services/register"


def test_register_payload(settings):
    assert settings.service.to_register_payload() == {
        "name": "skeleton.herp.app",
        "host": "127.0.0.1:6100",
        "title": "Python Skeleton Service",
        "version": "1.0.0",
        "description": settings.service.description,
    }


class TestEnvironmentOverrides:

    BUNDLED_CONFIG = SERVICE_ROOT / "config" / "node.yaml"

    def test_env_overrides_bundled_config(self, monkeypatch):
        monkeypatch.setenv("ORCHESTRATOR_TIMEOUT", "3")
        monkeypatch.setenv("ORCHESTRATOR_RETRIES", "2")

        client = load_settings(self.BUNDLED_CONFIG).client

        assert client.timeout == 3.0
        assert client.attempts == 3

    def test_file_values_without_env(self, monkeypatch):
        monkeypatch.delenv("ORCHESTRATOR_TIMEOUT", raising=False)
        monkeypatch.delenv("ORCHESTRATOR_RETRIES", raising=False)

        client = load_settings(self.BUNDLED_CONFIG).client

        assert client.timeout == 10.0
        assert client.attempts == 1

    def test_env_applies_without_config_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ORCHESTRATOR_TIMEOUT", "4.5")

        assert load_settings(tmp_path / "missing.yaml").client.timeout == 4.5

    @pytest.mark.parametrize("name, value", [
        ("ORCHESTRATOR_TIMEOUT", "0"),
        ("ORCHESTRATOR_TIMEOUT", "-1"),
        ("ORCHESTRATOR_TIMEOUT", "soon"),
        ("ORCHESTRATOR_RETRIES", "-1"),
        ("ORCHESTRATOR_RETRIES", "two"),
    ])
    def test_bad_env_values_rejected(self, tmp_path, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "missing.yaml")

    def test_zero_timeout_in_file_rejected(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ORCHESTRATOR_TIMEOUT", raising=False)
        data = copy.deepcopy(DEFAULT_SETTINGS)
        data["client"] = {"timeout": 0}

        with pytest.raises(ConfigurationError):
            load_settings(write_yaml(tmp_path / "node.yaml", data))


def test_client_defaults_are_validated():
    assert ClientSettings.model_config["validate_default"] is True
