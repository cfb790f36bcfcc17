"""Apply global command-line overrides on top of the persisted config.

Pure transformation: takes the loaded :class:`~gsoc2_cli.core.config.Config`
and the parsed :class:`argparse.Namespace` and returns a new snapshot.
Loading and binding are orchestrated by the CLI layer.
"""

from __future__ import annotations

import argparse

from gsoc2_cli.core.config import Config
from gsoc2_cli.core.models import KeyAuth, LogLevel, TokenAuth


def get_log_level(args: argparse.Namespace) -> LogLevel | None:
    """Return the ``--log-level`` value, or ``None`` when not supplied.

    Raises
    ------
    UnknownLogLevelError
        When the supplied value is not a known level.
    """
    value: str | None = getattr(args, "log_level", None)
    if value is None:
        return None
    return LogLevel.parse(value)


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Return *config* overridden by the global flags present in *args*.

    Order matters: ``--api-key`` is applied before ``--auth-token``, so
    the token wins whenever both are given, whatever their position on
    the command line.
    """
    api_key: str | None = getattr(args, "api_key", None)
    if api_key is not None:
        config = config.with_auth(KeyAuth(api_key))

    auth_token: str | None = getattr(args, "auth_token", None)
    if auth_token is not None:
        config = config.with_auth(TokenAuth(auth_token))

    url: str | None = getattr(args, "url", None)
    if url is not None:
        config = config.with_base_url(url)

    headers: list[str] | None = getattr(args, "headers", None)
    if headers:
        config = config.with_extra_headers(headers)

    log_level = get_log_level(args)
    if log_level is not None:
        config = config.with_log_level(log_level)

    return config.with_quiet(bool(getattr(args, "quiet", False)))
