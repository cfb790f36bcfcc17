"""Persisted configuration store backed by pydantic-settings.

Sources, highest precedence first:

1. ``GSOC2_*`` environment variables (an empty variable counts as unset).
2. A ``.env`` file in the working directory.
3. The project rc file (``.gsoc2clirc`` in the working directory or the
   nearest parent that has one).
4. The global rc file (``~/.gsoc2clirc``, or ``$GSOC2_PROPERTIES``).

The rc files are INI documents::

    [defaults]
    url = https://gsoc2.example.com/
    org = acme
    project = mobile-app
    allow_failure = false

    [auth]
    token = ...

    [http]
    headers =
        X-Forwarded-Proto:https
        X-Team:mobile

    [log]
    level = info

    [update]
    disable_check = true

This module is the only place that reads or writes those files.
"""

from __future__ import annotations

import configparser
import os
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from gsoc2_cli.core.config import DEFAULT_URL, Config
from gsoc2_cli.core.models import Auth, KeyAuth, LogLevel, NoAuth, TokenAuth
from gsoc2_cli.exceptions import ConfigError

RC_FILENAME: str = ".gsoc2clirc"

# (section, option) -> settings field
_RC_KEYS: dict[tuple[str, str], str] = {
    ("defaults", "url"): "url",
    ("defaults", "org"): "org",
    ("defaults", "project"): "project",
    ("defaults", "allow_failure"): "allow_failure",
    ("auth", "token"): "auth_token",
    ("auth", "api_key"): "api_key",
    ("http", "headers"): "headers",
    ("log", "level"): "log_level",
    ("update", "disable_check"): "disable_update_check",
}


# ---------------------------------------------------------------------------
# rc file discovery
# ---------------------------------------------------------------------------

def filename() -> Path:
    """Return the path of the global rc file (it may not exist)."""
    override = os.environ.get("GSOC2_PROPERTIES")
    if override:
        return Path(override).expanduser()
    return Path.home() / RC_FILENAME


def find_project_rc(start: Path | None = None) -> Path | None:
    """Return the nearest ``.gsoc2clirc`` above *start*, excluding the global one."""
    global_rc = filename().resolve()
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / RC_FILENAME
        if candidate.is_file() and candidate.resolve() != global_rc:
            return candidate
    return None


def _read_ini(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    try:
        with path.open(encoding="utf-8") as handle:
            parser.read_file(handle)
    except configparser.Error as exc:
        raise ConfigError(
            f"Could not parse config file {path}",
            hint="Check the INI syntax of the file.",
        ) from exc
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}") from exc
    return parser


def read_rc_values(path: Path) -> dict[str, Any]:
    """Map the known options of the rc file at *path* to settings fields."""
    if not path.is_file():
        return {}
    parser = _read_ini(path)
    values: dict[str, Any] = {}
    for (section, option), field_name in _RC_KEYS.items():
        if not parser.has_option(section, option):
            continue
        raw = parser.get(section, option)
        if field_name == "headers":
            values[field_name] = [line.strip() for line in raw.splitlines() if line.strip()]
        else:
            values[field_name] = raw.strip()
    return values


class RcFileSettingsSource(PydanticBaseSettingsSource):
    """Settings source for the global and project rc files."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        values = read_rc_values(filename())
        project_rc = find_project_rc()
        if project_rc is not None:
            values.update(read_rc_values(project_rc))
        self._values: dict[str, Any] = values

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._values)


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------

class Gsoc2Settings(BaseSettings):
    """Raw persisted settings before they become a :class:`Config`."""

    model_config = SettingsConfigDict(
        env_prefix="GSOC2_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
    )

    url: str = Field(default=DEFAULT_URL, min_length=1)
    auth_token: str | None = None
    api_key: str | None = None
    org: str | None = None
    project: str | None = None
    headers: list[str] = Field(default_factory=list)
    log_level: str | None = None
    allow_failure: bool = False
    disable_update_check: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            RcFileSettingsSource(settings_cls),
        )


def _auth_from_settings(settings: Gsoc2Settings) -> Auth:
    if settings.auth_token:
        return TokenAuth(settings.auth_token)
    if settings.api_key:
        return KeyAuth(settings.api_key)
    return NoAuth()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load() -> Config:
    """Load the persisted configuration (files + environment).

    Raises
    ------
    ConfigError
        When a file cannot be parsed or a value fails validation.
    UnknownLogLevelError
        When the persisted log level is not recognised.
    """
    try:
        settings = Gsoc2Settings()
    except (ValidationError, SettingsError) as exc:
        raise ConfigError(
            "Invalid gsoc2-cli configuration.",
            hint=f"Check {filename()} and the GSOC2_* environment variables.",
        ) from exc

    log_level = LogLevel.parse(settings.log_level) if settings.log_level else None
    return Config(
        filename=filename(),
        base_url=settings.url,
        auth=_auth_from_settings(settings),
        headers=tuple(settings.headers),
        org=settings.org or None,
        project=settings.project or None,
        log_level=log_level,
        allow_failure=settings.allow_failure,
        disable_update_check=settings.disable_update_check,
    )


def save_auth_token(token: str) -> Path:
    """Store *token* as ``[auth] token`` in the global rc file.

    Other sections and options of the file are preserved.  Any API key
    in the same section is removed so the stored credential is
    unambiguous.
    """
    path = filename()
    parser = _read_ini(path) if path.is_file() else configparser.ConfigParser(interpolation=None)
    if not parser.has_section("auth"):
        parser.add_section("auth")
    parser.set("auth", "token", token)
    parser.remove_option("auth", "api_key")

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open("w", encoding="utf-8") as handle:
            parser.write(handle)
        path.chmod(0o600)
    except OSError as exc:
        raise ConfigError(f"Could not write config file {path}") from exc
    return path
