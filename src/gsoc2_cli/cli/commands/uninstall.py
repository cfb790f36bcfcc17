"""``gsoc2-cli uninstall``: remove a standalone gsoc2-cli executable.

Installations owned by a package manager are never touched; the command
explains how to remove them instead and exits with code 1 without any
further diagnostics.
"""

from __future__ import annotations

import argparse
import os
import subprocess

from gsoc2_cli.cli import exit_codes
from gsoc2_cli.cli.console import stdout
from gsoc2_cli.cli.prompts import prompt_to_continue
from gsoc2_cli.core.models import SilentExit
from gsoc2_cli.exceptions import Gsoc2CliError
from gsoc2_cli.infra.install_detector import (
    InstallMethod,
    detect_install,
    is_windows,
    is_writable,
)

ABOUT: str = "Uninstall the gsoc2-cli executable."

INTEGRATION_TEST_ENV: str = "GSOC2_INTEGRATION_TEST"

_MANAGER_NAMES: dict[InstallMethod, str] = {
    InstallMethod.HOMEBREW: "homebrew",
    InstallMethod.NPM: "npm/yarn",
    InstallMethod.PIPX: "pipx",
    InstallMethod.PIP: "pip",
}


def is_hidden() -> bool:
    return is_windows() or detect_install().is_managed


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Skip uninstall confirmation prompt.",
    )


def execute(args: argparse.Namespace) -> SilentExit | None:
    status = detect_install()

    if status.is_managed:
        manager = _MANAGER_NAMES[status.method]
        stdout.print(f"This installation of gsoc2-cli is managed through {manager}")
        if len(status.uninstall_commands) == 1:
            stdout.print(f"Please use {manager} to uninstall gsoc2-cli")
            stdout.print()
            stdout.print(f"[dim]$[/dim] {status.uninstall_commands[0]}")
        else:
            stdout.print(
                f"Please use {manager} to uninstall gsoc2-cli, "
                "using one of the following commands:"
            )
            for command in status.uninstall_commands:
                stdout.print(f"  {command}", markup=False)
        return SilentExit(exit_codes.GENERAL_ERROR)

    if is_windows():
        stdout.print("Cannot uninstall on Windows :(")
        stdout.print()
        stdout.print(f"Delete this file yourself: {status.executable}", markup=False)
        return SilentExit(exit_codes.GENERAL_ERROR)

    if os.environ.get(INTEGRATION_TEST_ENV) is not None:
        stdout.print("Running in integration tests mode. Skipping execution.")
        return None

    if not args.confirm and not prompt_to_continue("Do you really want to uninstall gsoc2-cli?"):
        stdout.print("Aborted!")
        return None

    if not is_writable(status.executable):
        stdout.print(f"Need to sudo to uninstall {status.executable}", markup=False)
        completed = subprocess.run(["sudo", "rm", "-f", str(status.executable)], check=False)
        if completed.returncode != 0:
            raise Gsoc2CliError(f"Could not remove {status.executable}")
    else:
        try:
            status.executable.unlink()
        except OSError as exc:
            raise Gsoc2CliError(f"Could not remove {status.executable}") from exc
    stdout.print("Uninstalled!")
    return None
