"""Tests for bbkit init wizard."""

from pathlib import Path
from unittest.mock import patch

import pytest
import tomlkit
from typer.testing import CliRunner

import bbkit.settings as settings_module
from bbkit.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_lru_cache():
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


class TestInitCloud:
    def test_writes_token_profile(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                result = runner.invoke(
                    app,
                    ["init"],
                    # platform, profile, auth, token, verify=n, set-default=y
                    input="cloud\nwork\ntoken\ntok_test\nn\ny\n",
                )

        assert result.exit_code == 0, result.output
        config = tomlkit.load(config_path.open())
        assert config["default_profile"] == "work"
        assert config["work"]["platform"] == "cloud"
        assert config["work"]["token"] == "tok_test"
        assert "base_url" not in config["work"]

    def test_app_password_profile(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                result = runner.invoke(
                    app,
                    ["init"],
                    input="cloud\npersonal\napp-password\nada\npw_secret\nn\nn\n",
                )

        assert result.exit_code == 0, result.output
        config = tomlkit.load(config_path.open())
        assert config["personal"]["username"] == "ada"
        assert config["personal"]["app_password"] == "pw_secret"
        assert "token" not in config["personal"]
        assert "default_profile" not in config

    def test_verifies_with_current_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                with patch("bbkit.main.BitbucketClient") as client_cls:
                    result = runner.invoke(app, ["init"], input="cloud\nwork\ntoken\ntok_test\ny\ny\n")

        assert result.exit_code == 0, result.output
        assert "Connected" in result.output
        contract, payload = client_cls.return_value.execute.call_args.args
        assert contract.id == "bitbucket.users.current"
        assert payload == {}

    def test_failed_verification_still_writes(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                with patch("bbkit.main.BitbucketClient") as client_cls:
                    client_cls.return_value.execute.side_effect = RuntimeError("Bitbucket API returned 401")
                    result = runner.invoke(app, ["init"], input="cloud\nwork\ntoken\nbad\ny\ny\n")

        assert result.exit_code == 0, result.output
        assert "Could not verify credentials" in result.output
        assert config_path.exists()

    def test_preserves_existing_profiles(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        config_path.write_text('default_profile = "old"\n\n# keep me\n[old]\ntoken = "t"\n')
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                result = runner.invoke(app, ["init"], input="cloud\nnew\ntoken\ntok\nn\nn\n")

        assert result.exit_code == 0, result.output
        text = config_path.read_text()
        assert "# keep me" in text
        config = tomlkit.parse(text)
        assert config["default_profile"] == "old"
        assert set(settings_module._list_profiles(config)) == {"old", "new"}


class TestInitDataCenter:
    def test_writes_base_url(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                result = runner.invoke(
                    app,
                    ["init"],
                    input="datacenter\nonprem\nhttps://git.example.com/\ntoken\nhttp_tok\nn\ny\n",
                )

        assert result.exit_code == 0, result.output
        config = tomlkit.load(config_path.open())
        assert config["onprem"]["platform"] == "datacenter"
        assert config["onprem"]["base_url"] == "https://git.example.com"

    def test_rejects_url_without_scheme(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            result = runner.invoke(app, ["init"], input="datacenter\nonprem\ngit.example.com\n")

        assert result.exit_code == 1
        assert not config_path.exists()

    def test_verifies_with_project_list(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = tmp_path / "config.toml"
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        with patch("bbkit.main.CONFIG_PATH", config_path):
            with patch("bbkit.main.config_show"):
                with patch("bbkit.main.BitbucketClient") as client_cls:
                    result = runner.invoke(
                        app,
                        ["init"],
                        input="datacenter\nonprem\nhttps://git.example.com\ntoken\nhttp_tok\ny\ny\n",
                    )

        assert result.exit_code == 0, result.output
        contract, payload = client_cls.return_value.execute.call_args.args
        assert contract.id == "bitbucket.datacenter.projects.list"
        assert payload == {"limit": 1}


def test_invalid_platform_exits() -> None:
    result = runner.invoke(app, ["init"], input="github\n")
    assert result.exit_code == 1


def test_invalid_auth_method_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)
    with patch("bbkit.main.CONFIG_PATH", config_path):
        result = runner.invoke(app, ["init"], input="cloud\nwork\noauth\n")
    assert result.exit_code == 1
    assert not config_path.exists()
