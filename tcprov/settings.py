"""Settings resolution with profile precedence chain and conversion to ProvisionConfig."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from tcprov.models import ProvisionConfig, maven_actions, parse_cron

CONFIG_PATH = Path.home() / ".config" / "tcprov" / "config.toml"

PLACEHOLDER_GIT_URL = "YOUR_GIT_REPOSITORY_URL"

# Fields that must be set (profile, env or .env) before a run.
REQUIRED_FIELDS = (
    "server_url",
    "username",
    "password",
    "project_id",
    "project_name",
    "build_type_id",
    "build_type_name",
    "vcs_root_name",
    "git_url",
)


class TcprovSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TCPROV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None

    # Server
    server_url: str | None = None
    username: str | None = None
    password: SecretStr | None = None
    verify_tls: bool = True
    timeout: float = 30.0

    # Project / build configuration
    project_id: str | None = None
    project_name: str | None = None
    project_description: str = ""
    build_type_id: str | None = None
    build_type_name: str | None = None

    # Source control
    vcs_root_name: str | None = None
    git_url: str | None = None
    git_branch: str = "refs/heads/main"

    # Build
    pom_location: str = "pom.xml"
    artifact_rules: str = "target/*.jar"
    quiet_period: int = 60
    schedule: str = "0 0 2 * * ?"  # daily at 02:00


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/tcprov/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> TcprovSettings:
    """Resolve the active profile and return populated TcprovSettings.

    Precedence for the profile name (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. TCPROV_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/tcprov/config.toml
    4. First profile defined in ~/.config/tcprov/config.toml

    Profile values are defaults; env vars and .env override them.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("TCPROV_DEFAULT_PROFILE")
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

    return TcprovSettings(**profile_defaults)


def build_config(settings: TcprovSettings) -> ProvisionConfig:
    """Turn resolved settings into the immutable record a run works from."""
    missing = [name for name in REQUIRED_FIELDS if not getattr(settings, name)]
    if missing:
        typer.echo(
            f"Missing settings: {', '.join(missing)}. Set them in your profile in {CONFIG_PATH} "
            "or as TCPROV_<NAME> environment variables."
        )
        raise typer.Exit(1)

    try:
        schedule = parse_cron(settings.schedule)
    except ValueError as exc:
        typer.echo(f"Invalid schedule: {exc}")
        raise typer.Exit(1) from exc

    try:
        return ProvisionConfig(
            server_url=settings.server_url,  # type: ignore[arg-type]
            username=settings.username,  # type: ignore[arg-type]
            password=settings.password,  # type: ignore[arg-type]
            project_id=settings.project_id,  # type: ignore[arg-type]
            project_name=settings.project_name,  # type: ignore[arg-type]
            project_description=settings.project_description,
            build_type_id=settings.build_type_id,  # type: ignore[arg-type]
            build_type_name=settings.build_type_name,  # type: ignore[arg-type]
            vcs_root_name=settings.vcs_root_name,  # type: ignore[arg-type]
            git_url=settings.git_url,  # type: ignore[arg-type]
            git_branch=settings.git_branch,
            build_actions=maven_actions(settings.pom_location),
            artifact_rules=settings.artifact_rules,
            quiet_period=settings.quiet_period,
            schedule=schedule,
        )
    except ValidationError as exc:
        typer.echo(f"Invalid configuration:\n{exc}")
        raise typer.Exit(1) from exc
