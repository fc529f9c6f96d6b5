"""Settings resolution with profile precedence chain."""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "bbkit" / "config.toml"

CLOUD_BASE_URL = "https://api.bitbucket.org"


class BbkitSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BBKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None
    platform: str = "cloud"  # "cloud" | "datacenter"
    base_url: str | None = None  # required for datacenter, e.g. https://bitbucket.example.com

    # Either a bearer token (access token / HTTP access token) or username + app password
    token: SecretStr | None = None
    username: str | None = None
    app_password: SecretStr | None = None

    timeout: float = 30.0

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Profile values arrive as init kwargs; environment wins over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @property
    def api_url(self) -> str:
        return (self.base_url or CLOUD_BASE_URL).rstrip("/")


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/bbkit/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> BbkitSettings:
    """Resolve the active profile and return a fully populated BbkitSettings.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. BBKIT_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/bbkit/config.toml
    4. First profile defined in ~/.config/bbkit/config.toml
    """
    import os

    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("BBKIT_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    # env vars + .env always override profile defaults
    settings = BbkitSettings(**profile_defaults)

    if settings.platform not in ("cloud", "datacenter"):
        typer.echo(f"Unknown platform '{settings.platform}'. Valid: cloud, datacenter")
        raise typer.Exit(1)
    if settings.platform == "datacenter" and not settings.base_url:
        typer.echo(
            "Missing Data Center URL. Set BBKIT_BASE_URL or "
            f"base_url in the [{active or 'profile'}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)
    has_basic = settings.username and settings.app_password
    if not settings.token and not has_basic:
        typer.echo(
            "Missing Bitbucket credentials. Set BBKIT_TOKEN, or BBKIT_USERNAME and BBKIT_APP_PASSWORD, "
            f"or the same keys in the [{active or 'profile'}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)

    return settings
