"""Tests for aquos_tv.client.client_config."""
import json

import pytest

from aquos_tv import AquosTvClientConfig, AquosTvError, DEFAULT_PORT
from aquos_tv.client import split_host_port


class TestHostPort:
    def test_default_port(self):
        assert split_host_port("10.0.0.5", DEFAULT_PORT) == ("10.0.0.5", 10002)

    def test_explicit_port_and_scheme(self):
        assert split_host_port("tcp://10.0.0.5:4000", DEFAULT_PORT) == ("10.0.0.5", 4000)

    def test_bad_scheme(self):
        with pytest.raises(AquosTvError):
            split_host_port("http://10.0.0.5", DEFAULT_PORT)

    def test_bad_port(self):
        with pytest.raises(AquosTvError):
            split_host_port("10.0.0.5:abc", DEFAULT_PORT)


class TestConfig:
    def test_defaults(self):
        config = AquosTvClientConfig(use_config_file=False)
        assert config.host is None
        assert config.port == DEFAULT_PORT
        assert config.line_framing
        assert not config.has_credentials

    def test_immutable(self):
        config = AquosTvClientConfig("10.0.0.5", use_config_file=False)
        with pytest.raises(AquosTvError):
            config.host = "10.0.0.6"

    def test_host_with_port_overrides_port(self):
        config = AquosTvClientConfig("10.0.0.5:4000", port=5000, use_config_file=False)
        assert (config.host, config.port) == ("10.0.0.5", 4000)

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("AQUOS_TV_HOST", "10.0.0.7")
        monkeypatch.setenv("AQUOS_TV_PORT", "4001")
        monkeypatch.setenv("AQUOS_TV_USERNAME", "admin")
        monkeypatch.setenv("AQUOS_TV_PASSWORD", "secret")
        config = AquosTvClientConfig()
        assert (config.host, config.port) == ("10.0.0.7", 4001)
        assert config.has_credentials

    def test_arguments_override_environment(self, monkeypatch):
        monkeypatch.setenv("AQUOS_TV_HOST", "10.0.0.7")
        monkeypatch.setenv("AQUOS_TV_USERNAME", "admin")
        config = AquosTvClientConfig("10.0.0.8", username="other")
        assert config.host == "10.0.0.8"
        assert config.username == "other"
        assert not config.has_credentials

    def test_base_config(self):
        base = AquosTvClientConfig("10.0.0.5", "admin", "secret", timeout_secs=2.0, use_config_file=False)
        derived = AquosTvClientConfig(base_config=base, timeout_secs=3.0)
        assert derived.host == "10.0.0.5"
        assert derived.password == "secret"
        assert derived.timeout_secs == 3.0
        assert base.timeout_secs == 2.0

    def test_json(self):
        config = AquosTvClientConfig("10.0.0.5:4000", "admin", "secret", line_framing=False, use_config_file=False)
        copy = AquosTvClientConfig.from_json(config.to_json(), use_config_file=False)
        assert copy.to_jsonable() == config.to_jsonable()
        with pytest.raises(AquosTvError):
            copy.port = 1

    def test_config_file_from_environment(self, monkeypatch, tmp_path):
        config_file = tmp_path / "aquos.json"
        config_file.write_text(json.dumps(dict(host="10.0.0.9", username="admin", password="pw")))
        monkeypatch.setenv("AQUOS_TV_CONFIG_FILE", str(config_file))
        config = AquosTvClientConfig()
        assert config.host == "10.0.0.9"
        assert config.has_credentials

    def test_from_config_file(self, tmp_path):
        config_file = tmp_path / "aquos.json"
        config_file.write_text(json.dumps(dict(host="10.0.0.9:4002", timeout_secs=1.5)))
        config = AquosTvClientConfig.from_config_file(str(config_file))
        assert (config.host, config.port) == ("10.0.0.9", 4002)
        assert config.timeout_secs == 1.5

    def test_environment_overrides_config_file(self, monkeypatch, tmp_path):
        config_file = tmp_path / "aquos.json"
        config_file.write_text(json.dumps(dict(host="10.0.0.9", username="file-user", password="pw")))
        monkeypatch.setenv("AQUOS_TV_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("AQUOS_TV_HOST", "10.0.0.7")
        config = AquosTvClientConfig()
        assert config.host == "10.0.0.7"
        assert config.username == "file-user"

    def test_json_boolean_strings(self):
        assert AquosTvClientConfig.from_jsonable(
            dict(host="10.0.0.5", line_framing="false"), use_config_file=False).line_framing is False
        assert AquosTvClientConfig.from_jsonable(
            dict(host="10.0.0.5", line_framing="on"), use_config_file=False).line_framing is True
        assert AquosTvClientConfig.from_jsonable(
            dict(host="10.0.0.5", line_framing=0), use_config_file=False).line_framing is False

    def test_invalid_json_boolean(self):
        with pytest.raises(AquosTvError):
            AquosTvClientConfig.from_jsonable(dict(host="10.0.0.5", line_framing="maybe"), use_config_file=False)
