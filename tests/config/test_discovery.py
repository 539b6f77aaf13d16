"""Tests for config discovery."""

from pathlib import Path

import pytest

from taskdn.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME, find_config


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[query]\nupcoming_days = 3\n")
        assert find_config(tmp_path) == config_file.resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file.resolve()

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        monkeypatch.chdir(tmp_path)
        assert find_config() == config_file.resolve()

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert find_config(tmp_path / "anywhere") == config_file

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None
