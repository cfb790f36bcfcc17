"""``gsoc2-cli update``: upgrade a pip-installed gsoc2-cli to the latest release."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys

from gsoc2_cli.cli import exit_codes
from gsoc2_cli.cli.console import is_quiet_mode, stdout
from gsoc2_cli.core import config
from gsoc2_cli.core.models import SilentExit
from gsoc2_cli.core.update import is_newer
from gsoc2_cli.exceptions import Gsoc2CliError
from gsoc2_cli.infra.api import Api
from gsoc2_cli.infra.install_detector import InstallMethod, detect_install
from gsoc2_cli.version import __version__

ABOUT: str = "Update the gsoc2-cli executable."

INTEGRATION_TEST_ENV: str = "GSOC2_INTEGRATION_TEST"

_UPGRADE_INSTRUCTIONS: dict[InstallMethod, str] = {
    InstallMethod.HOMEBREW: "brew upgrade gsoc2-cli",
    InstallMethod.NPM: "npm install --global @gsoc2/cli@latest",
    InstallMethod.PIPX: "pipx upgrade gsoc2-cli",
    InstallMethod.STANDALONE: "download the latest release and replace this executable",
}


def is_hidden() -> bool:
    return detect_install().method is not InstallMethod.PIP


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Force the update even if the latest version is already installed.",
    )


def pip_upgrade_command(version: str) -> list[str]:
    return [sys.executable, "-m", "pip", "install", "--upgrade", f"gsoc2-cli=={version}"]


def execute(args: argparse.Namespace) -> SilentExit | None:
    latest = Api(config.current()).get_latest_version()
    status = detect_install()

    if not args.force and not is_newer(latest, __version__):
        if not is_quiet_mode():
            stdout.print(f"Already up to date! (version {__version__})")
        return None

    stdout.print(f"Latest release is {latest} (installed: {__version__})")

    if status.method is not InstallMethod.PIP:
        stdout.print("This installation of gsoc2-cli cannot update itself.")
        stdout.print(f"To upgrade, {_UPGRADE_INSTRUCTIONS[status.method]}", markup=False)
        return SilentExit(exit_codes.GENERAL_ERROR)

    if os.environ.get(INTEGRATION_TEST_ENV) is not None:
        stdout.print("Running in integration tests mode. Skipping execution.")
        return None

    completed = subprocess.run(pip_upgrade_command(latest), check=False)
    if completed.returncode != 0:
        raise Gsoc2CliError(
            f"pip exited with code {completed.returncode} while updating gsoc2-cli.",
            hint="Re-run with --log-level=debug or upgrade manually with pip.",
        )
    stdout.print(f"Updated gsoc2-cli to {latest}!")
    return None
