"""Unit tests for configuration loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import platformdirs
import pytest
from pydantic import ValidationError

from fetchstate.config import ControllerSettings, Settings, TransportSettings, _find_config_file

if TYPE_CHECKING:
    from pathlib import Path


class TestDefaults:
    def test_transport_defaults(self) -> None:
        settings = TransportSettings()
        assert settings.base_url == ""
        assert settings.timeout_seconds == 30.0
        assert settings.follow_redirects is True

    def test_cache_enabled_by_default(self) -> None:
        assert ControllerSettings().cache_enabled is True

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TransportSettings(timeout_seconds=0)


class TestSources:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCHSTATE__TRANSPORT__BASE_URL", "https://api.example.com")
        monkeypatch.setenv("FETCHSTATE__CONTROLLER__CACHE_ENABLED", "false")
        settings = Settings()
        assert settings.transport.base_url == "https://api.example.com"
        assert settings.controller.cache_enabled is False

    def test_init_args_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCHSTATE__LOGGING__LEVEL", "ERROR")
        settings = Settings(logging={"level": "DEBUG"})
        assert settings.logging.level == "DEBUG"

    def test_yaml_file_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "fetchstate.yaml"
        config_file.write_text(
            "transport:\n  base_url: https://yaml.example.com\nlogging:\n  format: text\n",
            encoding="utf-8",
        )
        monkeypatch.setitem(Settings.model_config, "yaml_file", str(config_file))
        settings = Settings()
        assert settings.transport.base_url == "https://yaml.example.com"
        assert settings.logging.format == "text"

    def test_env_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "fetchstate.yaml"
        config_file.write_text("logging:\n  level: WARNING\n", encoding="utf-8")
        monkeypatch.setitem(Settings.model_config, "yaml_file", str(config_file))
        monkeypatch.setenv("FETCHSTATE__LOGGING__LEVEL", "DEBUG")
        assert Settings().logging.level == "DEBUG"


class TestFindConfigFile:
    def test_cwd_first(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "fetchstate.yaml").write_text("{}", encoding="utf-8")
        assert _find_config_file() == "fetchstate.yaml"

    def test_platform_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "fetchstate.yaml").write_text("{}", encoding="utf-8")
        monkeypatch.setattr(platformdirs, "user_config_dir", lambda _: str(config_dir))
        assert _find_config_file() == str(config_dir / "fetchstate.yaml")

    def test_none_when_absent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(platformdirs, "user_config_dir", lambda _: str(tmp_path / "nope"))
        assert _find_config_file() is None
