"""
Tests for configuration directory resolution.
"""

from pathlib import Path

from pushbullet_cli.utils.paths import (
    CONFIG_DIR_ENV_VAR,
    DEFAULT_CONFIG_DIR,
    resolve_config_dir,
)


class TestResolveConfigDir:
    """Tests for resolve_config_dir function."""

    def test_explicit_path_wins(self, tmp_path):
        """Test that an explicit directory beats the environment."""
        assert resolve_config_dir(tmp_path / "x") == (tmp_path / "x").resolve()

    def test_string_path(self, tmp_path):
        assert resolve_config_dir(str(tmp_path)) == tmp_path.resolve()

    def test_environment_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path / "env"))
        assert resolve_config_dir() == (tmp_path / "env").resolve()

    def test_default(self, monkeypatch):
        monkeypatch.delenv(CONFIG_DIR_ENV_VAR, raising=False)
        assert resolve_config_dir() == DEFAULT_CONFIG_DIR.resolve()

    def test_expands_user(self):
        assert resolve_config_dir("~/pb") == (Path.home() / "pb").resolve()
