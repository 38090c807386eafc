"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and overrides to verify precedence: defaults < YAML < ENV < overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from invidiarr.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host INVIDIARR_* variables out of the precedence tests."""
    for key in list(os.environ):
        if key.startswith("INVIDIARR_"):
            monkeypatch.delenv(key)


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "invidiarr-test",
        "environment": "test",
        "invidious": {"instance": "inv.example.org", "timeout_seconds": 15.0},
        "http": {"user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
        "cipher": {"param": "sig"},
        "streams": {"probe_timeout_seconds": 2.5, "allow_unvalidated_fallback": False},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    """Load with no YAML, no ENV, no overrides: pure defaults."""

    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "invidiarr"
        assert config.environment == "dev"
        assert config.invidious_instance == "yewtu.be"
        assert config.invidious_timeout_seconds == 10.0
        assert config.log_level == "INFO"
        assert config.log_format == "console"  # dev -> console
        assert config.cipher.param == "n"
        assert config.streams.probe_timeout_seconds == 5.0
        assert config.streams.allow_unvalidated_fallback is True
        assert config.streams.related_limit == 10

    def test_defaults_derive_log_format_from_environment(self) -> None:
        config = load_config(overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    """YAML values override defaults."""

    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "invidiarr-test"
        assert config.environment == "test"
        assert config.invidious_instance == "inv.example.org"
        assert config.invidious_timeout_seconds == 15.0
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.cipher.param == "sig"
        assert config.streams.probe_timeout_seconds == 2.5
        assert config.streams.allow_unvalidated_fallback is False

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_yaml_partial_override_preserves_defaults(self, tmp_path: Path) -> None:
        """YAML that only sets streams.related_limit keeps other defaults."""
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.dump({"streams": {"related_limit": 3}}), encoding="utf-8")

        config = load_config(config_path=path)
        assert config.streams.related_limit == 3
        assert config.streams.probe_timeout_seconds == 5.0  # default preserved
        assert config.cipher.watch_url.startswith("https://www.youtube.com/watch")

    def test_empty_yaml_is_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "invidiarr"

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)


class TestEnvOverrides:
    """Environment variables override YAML and defaults."""

    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INVIDIARR_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("INVIDIARR_INVIDIOUS_INSTANCE", "env.example.org")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.invidious_instance == "env.example.org"
        # YAML values not overridden by ENV stay
        assert config.app_name == "invidiarr-test"

    def test_env_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INVIDIARR_ENVIRONMENT", "prod")

        config = load_config()
        assert config.environment == "prod"
        assert config.log_format == "json"  # prod -> json

    def test_env_reaches_cipher_and_streams(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INVIDIARR_CIPHER_PARAM", "n")
        monkeypatch.setenv("INVIDIARR_STREAMS_ALLOW_UNVALIDATED_FALLBACK", "true")
        monkeypatch.setenv("INVIDIARR_STREAMS_RELATED_LIMIT", "4")

        config = load_config(config_path=yaml_config)
        assert config.cipher.param == "n"
        assert config.streams.allow_unvalidated_fallback is True
        assert config.streams.related_limit == 4
        # untouched YAML sibling survives
        assert config.streams.probe_timeout_seconds == 2.5

    def test_env_moves_cipher_hosts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INVIDIARR_CIPHER_WATCH_URL", "https://yt.example/watch?v=x")
        monkeypatch.setenv("INVIDIARR_CIPHER_PLAYER_BASE_URL", "https://yt.example")

        config = load_config()
        assert config.cipher.watch_url == "https://yt.example/watch?v=x"
        assert config.cipher.player_base_url == "https://yt.example"
        assert config.cipher.param == "n"  # default preserved

    def test_config_path_from_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INVIDIARR_CONFIG", str(yaml_config))

        config = load_config()
        assert config.app_name == "invidiarr-test"

    def test_config_path_from_env_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INVIDIARR_CONFIG", str(tmp_path / "gone.yaml"))
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("INVIDIARR_INVIDIOUS_TIMEOUT_SECONDS=42\n", encoding="utf-8")
        # load_dotenv writes into os.environ; register for cleanup
        monkeypatch.setenv("INVIDIARR_INVIDIOUS_TIMEOUT_SECONDS", "")
        monkeypatch.delenv("INVIDIARR_INVIDIOUS_TIMEOUT_SECONDS")

        config = load_config(dotenv_path=dotenv)
        assert config.invidious_timeout_seconds == 42.0

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestOverrides:
    """Explicit overrides beat everything (highest precedence)."""

    def test_overrides_beat_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INVIDIARR_LOG_LEVEL", "WARNING")

        config = load_config(
            config_path=yaml_config,
            overrides={"log_level": "ERROR", "streams": {"related_limit": 1}},
        )
        assert config.log_level == "ERROR"
        assert config.streams.related_limit == 1
        # sibling keys from YAML survive the deep merge
        assert config.streams.probe_timeout_seconds == 2.5


class TestValidation:
    def test_blank_instance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            load_config(overrides={"invidious_instance": "  "})

    def test_non_positive_probe_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            load_config(overrides={"streams": {"probe_timeout_seconds": 0}})

    def test_sectioned_dump_round_trips(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        dumped = config.to_sectioned_dict()
        assert dumped["invidious"]["instance"] == "inv.example.org"
        assert dumped["streams"]["allow_unvalidated_fallback"] is False
        assert load_config(overrides=dumped) == config
