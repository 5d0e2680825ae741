"""
Tests for server configuration.
"""

import json
from datetime import timedelta

import pytest

from oauth2_server import ServerConfig, parse_duration_string
from oauth2_server.config import parse_lifetime


class TestParseDuration:
    """Test duration parsing"""

    @pytest.mark.parametrize("text,expected", [
        ("30s", timedelta(seconds=30)),
        ("5m", timedelta(minutes=5)),
        ("2h", timedelta(hours=2)),
        ("14d", timedelta(days=14)),
        (" 1.5H ", timedelta(minutes=90)),
    ])
    def test_valid(self, text, expected):
        assert parse_duration_string(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "5w", "m5"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration_string(text)

    def test_not_a_string(self):
        with pytest.raises(ValueError):
            parse_duration_string(30)

    @pytest.mark.parametrize("value,expected", [
        (60, 60),
        ("3600", 3600),
        ("1h", 3600),
        (timedelta(minutes=5), 300),
    ])
    def test_parse_lifetime(self, value, expected):
        assert parse_lifetime(value) == expected


class TestServerConfig:
    """Test server configuration loading"""

    def test_defaults(self):
        config = ServerConfig()
        assert config.realm == "Service"
        assert config.access_token_lifetime == 3600
        assert config.refresh_token_lifetime == 14 * 24 * 60 * 60
        assert config.authorization_code_lifetime == 300
        assert config.login_url is None
        assert config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OAUTH2_REALM", "Example")
        monkeypatch.setenv("OAUTH2_ACCESS_TOKEN_LIFETIME", "30m")
        monkeypatch.setenv("OAUTH2_REFRESH_TOKEN_LIFETIME", "86400")
        monkeypatch.setenv("OAUTH2_LOGIN_URL", "https://auth.example.com/login")

        config = ServerConfig.from_env()

        assert config.realm == "Example"
        assert config.access_token_lifetime == 1800
        assert config.refresh_token_lifetime == 86400
        assert config.authorization_code_lifetime == 300
        assert config.login_url == "https://auth.example.com/login"

    def test_from_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MYAPP_AUTHORIZATION_CODE_LIFETIME", "1m")
        assert ServerConfig.from_env(prefix="MYAPP_").authorization_code_lifetime == 60

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "oauth2.json"
        path.write_text(json.dumps({"realm": "Json", "access-token-lifetime": "2h", "unknown": 1}))

        config = ServerConfig.from_file(path)

        assert config.realm == "Json"
        assert config.access_token_lifetime == 7200

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "oauth2.yaml"
        path.write_text("realm: Yaml\nrefresh_token_lifetime: 7d\nauthorization_code_lifetime: 120\n")

        config = ServerConfig.from_file(str(path))

        assert config.realm == "Yaml"
        assert config.refresh_token_lifetime == 7 * 24 * 60 * 60
        assert config.authorization_code_lifetime == 120

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "oauth2.yml"
        path.write_text("")
        assert ServerConfig.from_file(path) == ServerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ServerConfig.from_file(tmp_path / "missing.json")

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "oauth2.ini"
        path.write_text("[oauth2]\n")
        with pytest.raises(ValueError):
            ServerConfig.from_file(path)

    @pytest.mark.parametrize("changes", [
        {"realm": ""},
        {"realm": 'a"b'},
        {"access_token_lifetime": 0},
        {"refresh_token_lifetime": -1},
        {"authorization_code_lifetime": 0},
    ])
    def test_validate(self, changes):
        with pytest.raises(ValueError):
            ServerConfig(**changes).validate()

    def test_from_file_validates(self, tmp_path):
        path = tmp_path / "oauth2.json"
        path.write_text(json.dumps({"access_token_lifetime": -60}))
        with pytest.raises(ValueError):
            ServerConfig.from_file(path)

    def test_from_env_validates(self, monkeypatch):
        monkeypatch.setenv("OAUTH2_REALM", 'Bad"Realm')
        with pytest.raises(ValueError):
            ServerConfig.from_env()

    def test_to_dict(self):
        assert ServerConfig(login_url="https://auth.example.com/login").to_dict() == {
            "realm": "Service",
            "access_token_lifetime": 3600,
            "refresh_token_lifetime": 1209600,
            "authorization_code_lifetime": 300,
            "login_url": "https://auth.example.com/login",
        }
