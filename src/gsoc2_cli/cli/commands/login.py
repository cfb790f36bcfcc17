"""``gsoc2-cli login``: verify an auth token and store it in the rc file."""

from __future__ import annotations

import argparse

from gsoc2_cli.cli.console import console, is_quiet_mode
from gsoc2_cli.cli.prompts import prompt_secret
from gsoc2_cli.core import config
from gsoc2_cli.core.models import SilentExit, TokenAuth
from gsoc2_cli.exceptions import Gsoc2CliError
from gsoc2_cli.infra import config_store
from gsoc2_cli.infra.api import Api

ABOUT: str = "Authenticate with the Gsoc2 server."

TOKEN_PAGE: str = "settings/account/api/auth-tokens/"


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """No own arguments: the token comes from --auth-token or the prompt."""


def prompt_token(token_url: str) -> str:
    """Ask for a token on the terminal.

    Raises
    ------
    Gsoc2CliError
        If the prompt is cancelled or left empty.
    """
    console.print("This helps you signing in your gsoc2-cli with an authentication token.")
    console.print("If you do not yet have a token ready, create one here:")
    console.print(f"  [bold]{token_url}[/bold]")
    console.print()

    token = prompt_secret("Enter your token:")
    if token is None:
        raise Gsoc2CliError("No token entered.", hint=f"Create a token at {token_url}")
    return token


def execute(args: argparse.Namespace) -> SilentExit | None:
    cfg = config.current()
    token_url = Api(cfg).absolute_url(TOKEN_PAGE)
    token: str = getattr(args, "auth_token", None) or prompt_token(token_url)

    auth_info = Api(cfg.with_auth(TokenAuth(token))).get_auth_info()
    user = auth_info.get("user")
    if not user:
        raise Gsoc2CliError(
            "Invalid token: the server did not accept it.",
            hint=f"Create a new token at {token_url}",
        )

    path = config_store.save_auth_token(token)
    if not is_quiet_mode():
        who = user.get("email") or user.get("username") or "unknown user"
        console.print(f"Valid token for user {who}", markup=False)
        console.print(f"Stored token in {path}", markup=False)
    return None
