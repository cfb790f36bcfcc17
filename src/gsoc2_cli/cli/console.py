"""CLI console helpers: Rich output, quiet mode and error rendering.

Diagnostics go to stderr; command results go to stdout.  Consoles are
built per call so they follow whatever ``sys.stderr``/``sys.stdout`` are
at that moment, and they never hard-wrap: a message longer than the
terminal (or the 80-column default of a pipe) stays on one line.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from rich.console import Console

from gsoc2_cli.exceptions import Gsoc2CliError
from gsoc2_cli.utils.logging import effective_level


def get_rich_console(*, stderr: bool = True) -> Console:
    """Create a Rich console instance targeting stderr (or stdout)."""
    return Console(stderr=stderr, highlight=False, soft_wrap=True)


class _ConsoleProxy:
    """Module-level handle that renders through a fresh Rich console."""

    def __init__(self, *, stderr: bool) -> None:
        self._stderr = stderr

    def print(self, *objects: object, **kwargs: Any) -> None:
        get_rich_console(stderr=self._stderr).print(*objects, **kwargs)


console = _ConsoleProxy(stderr=True)
"""Diagnostics, prompts and notices."""

stdout = _ConsoleProxy(stderr=False)
"""Command results meant for pipes and scripts."""


# ---------------------------------------------------------------------------
# Quiet mode
# ---------------------------------------------------------------------------

_quiet: bool = False


def set_quiet_mode(enabled: bool) -> None:
    """Switch quiet mode on or off for the rest of the process.

    Quiet mode is advisory: commands that honour it check
    :func:`is_quiet_mode` before printing.  Errors are always reported.
    """
    global _quiet
    _quiet = enabled


def is_quiet_mode() -> bool:
    return _quiet


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

def format_error(exc: BaseException) -> list[str]:
    """Return the ``error:`` line followed by one line per chained cause."""
    lines = [f"error: {exc}"]
    cause = exc.__cause__
    while cause is not None:
        lines.append(f"  caused by: {cause}")
        cause = cause.__cause__
    return lines


def print_error(exc: BaseException) -> None:
    """Print *exc*, its cause chain and guidance to stderr."""
    for line in format_error(exc):
        console.print(line, style="red", markup=False)

    if isinstance(exc, Gsoc2CliError) and exc.hint:
        console.print(exc.hint, style="yellow", markup=False)

    if effective_level() <= logging.DEBUG:
        console.print(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip(),
            markup=False,
        )
    elif effective_level() > logging.INFO:
        console.print()
        console.print(
            "Add --log-level=[info|debug] or export GSOC2_LOG_LEVEL=[info|debug] "
            "to see more output.",
            markup=False,
        )
        console.print("Please attach the full debug log to all bug reports.", markup=False)
