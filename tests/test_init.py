"""Tests for tcprov init wizard."""

from pathlib import Path
from unittest.mock import patch

import pytest
import tomlkit
from typer.testing import CliRunner

import tcprov.settings as settings_module
from tcprov.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_lru_cache():
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


class TestInit:
    def test_writes_profile(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("tcprov.main.CONFIG_PATH", config_path):
            with patch("tcprov.main.config_show"):
                result = runner.invoke(
                    app,
                    ["init"],
                    # profile, url, user, password, project id, then accept defaults,
                    # git url, branch default, set default
                    input="prod\nhttps://tc.example.com/\nbuilder\ns3cret\nApp\n\n\n\n\n"
                    "https://github.com/acme/app.git\n\ny\n",
                )

        assert result.exit_code == 0, result.output
        config = tomlkit.load(config_path.open())
        assert config["default_profile"] == "prod"
        profile = config["prod"]
        assert profile["server_url"] == "https://tc.example.com"
        assert profile["password"] == "s3cret"
        assert profile["project_name"] == "App"
        assert profile["build_type_id"] == "App_Build"
        assert profile["vcs_root_name"] == "App Repository"
        assert profile["git_url"] == "https://github.com/acme/app.git"
        assert profile["git_branch"] == "refs/heads/main"

    def test_keeps_existing_profiles(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        config_path.write_text(tomlkit.dumps({"default_profile": "old", "old": {"project_id": "Old"}}))
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("tcprov.main.CONFIG_PATH", config_path):
            with patch("tcprov.main.config_show"):
                result = runner.invoke(
                    app,
                    ["init"],
                    input="new\nhttp://tc.local:8111\nbuilder\npw\nNew\n\n\n\n\n\n\nn\n",
                )

        assert result.exit_code == 0, result.output
        config = tomlkit.load(config_path.open())
        assert config["default_profile"] == "old"
        assert config["old"]["project_id"] == "Old"
        assert config["new"]["git_url"] == "YOUR_GIT_REPOSITORY_URL"

    def test_rejects_url_without_scheme(self, tmp_path: Path) -> None:
        with patch("tcprov.main.CONFIG_PATH", tmp_path / "config.toml"):
            result = runner.invoke(app, ["init"], input="prod\ntc.local:8111\n")
        assert result.exit_code == 1
