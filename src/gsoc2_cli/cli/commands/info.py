"""``gsoc2-cli info``: show the resolved configuration and verify credentials."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from gsoc2_cli.cli import exit_codes
from gsoc2_cli.cli.console import is_quiet_mode, stdout
from gsoc2_cli.core import config
from gsoc2_cli.core.config import Config
from gsoc2_cli.core.models import NoAuth, SilentExit, describe_auth
from gsoc2_cli.exceptions import ApiError
from gsoc2_cli.infra.api import Api

ABOUT: str = "Print information about the configuration and verify authentication."


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config-status-json",
        action="store_true",
        help="Return the status of the config that gsoc2-cli loads as JSON dump. "
        "This can be used by external tools to aid the user towards configuration.",
    )
    parser.add_argument(
        "--no-defaults",
        action="store_true",
        help="Skip default organization and project output.",
    )


def _fetch_auth_info(cfg: Config) -> tuple[dict[str, Any] | None, str | None]:
    """Return ``(auth_info, error)``; exactly one of them is set when authenticated."""
    if isinstance(cfg.auth, NoAuth):
        return None, None
    try:
        return Api(cfg).get_auth_info(), None
    except ApiError as exc:
        return None, str(exc)


def build_status(cfg: Config, auth_info: dict[str, Any] | None, error: str | None) -> dict[str, Any]:
    """Machine-readable summary printed by ``--config-status-json``."""
    return {
        "config": {
            "url": cfg.base_url,
            "filename": str(cfg.get_filename()),
            "exists": cfg.get_filename().exists(),
            "org": cfg.org,
            "project": cfg.project,
        },
        "auth": {
            "type": None if isinstance(cfg.auth, NoAuth) else describe_auth(cfg.auth),
            "successful": auth_info is not None,
            "error": error,
        },
    }


def _print_human(
    cfg: Config,
    auth_info: dict[str, Any] | None,
    error: str | None,
    *,
    show_defaults: bool,
) -> None:
    exists = "found" if cfg.get_filename().exists() else "not found"
    stdout.print("Gsoc2 Server:", cfg.base_url, markup=False)
    stdout.print("Config file:", f"{cfg.get_filename()} ({exists})", markup=False)
    if show_defaults:
        stdout.print()
        stdout.print("Default Organization:", cfg.org or "-", markup=False)
        stdout.print("Default Project:", cfg.project or "-", markup=False)
    stdout.print()
    stdout.print("Authentication Info:")
    stdout.print("  Method:", describe_auth(cfg.auth), markup=False)

    if error is not None:
        stdout.print("  Error:", error, markup=False)
        return
    if auth_info is None:
        return

    user = auth_info.get("user") or {}
    stdout.print("  User:", user.get("email") or user.get("username") or "-", markup=False)
    scopes = (auth_info.get("auth") or {}).get("scopes") or []
    if scopes:
        stdout.print("  Scopes:")
        for scope in scopes:
            stdout.print(f"    - {scope}", markup=False)


def execute(args: argparse.Namespace) -> SilentExit | None:
    cfg = config.current()
    auth_info, error = _fetch_auth_info(cfg)

    if args.config_status_json:
        sys.stdout.write(json.dumps(build_status(cfg, auth_info, error), indent=2) + "\n")
    elif not is_quiet_mode():
        _print_human(cfg, auth_info, error, show_defaults=not args.no_defaults)

    if auth_info is None:
        return SilentExit(exit_codes.GENERAL_ERROR)
    return None
