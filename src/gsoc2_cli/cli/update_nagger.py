"""Post-run notice that a newer gsoc2-cli release is available.

The lookup runs at most once per :data:`~gsoc2_cli.core.update.CHECK_INTERVAL`;
its result is cached in the update state file so most invocations only
read a small JSON document.  Nothing here may change a command's exit
code: every failure is logged at debug level and ignored.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from gsoc2_cli.cli.console import console, is_quiet_mode
from gsoc2_cli.core import config
from gsoc2_cli.core.update import UpdateCheckState
from gsoc2_cli.exceptions import ApiError
from gsoc2_cli.infra.api import Api
from gsoc2_cli.infra.install_detector import detect_install
from gsoc2_cli.infra.update_state import read_state, write_state
from gsoc2_cli.version import __version__

logger = logging.getLogger(__name__)


def _is_interactive() -> bool:
    return sys.stderr.isatty()


def _refresh(state: UpdateCheckState, now: datetime) -> UpdateCheckState:
    if not state.is_stale(now):
        return state
    latest = Api(config.current()).get_latest_version()
    state = UpdateCheckState(last_check=now, latest_version=latest)
    write_state(state)
    return state


def run_update_nagger(now: datetime | None = None) -> None:
    """Print an update notice on stderr when a newer release is known."""
    if not config.is_bound():
        return
    cfg = config.current()
    if cfg.disable_update_check or is_quiet_mode() or not _is_interactive():
        return

    now = now or datetime.now(timezone.utc)
    try:
        state = _refresh(read_state(), now)
    except (ApiError, OSError) as exc:
        logger.debug("Update check failed: %s", exc)
        return

    if not state.newer_than(__version__):
        return

    console.print()
    console.print(
        f"[yellow]gsoc2-cli update to {state.latest_version} is available![/yellow]"
    )
    if detect_install().is_managed:
        console.print("[dim]Please use your package manager to upgrade gsoc2-cli.[/dim]")
    else:
        console.print("[dim]Run [bold]gsoc2-cli update[/bold] to upgrade.[/dim]")
