"""Protocols (interfaces) consumed by the dispatch core.

Command modules and pre-execution hooks satisfy these structurally; the
registry and engine depend only on these contracts, never on concrete
command implementations.
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gsoc2_cli.core.models import SilentExit


class CommandModule(Protocol):
    """Structural interface for subcommand modules.

    Any module registered in :data:`gsoc2_cli.cli.registry.COMMANDS`
    must provide:

    * ``ABOUT``: one-line help shown in the root command listing.
    * ``add_arguments(parser)``: register the command's own arguments.
    * ``execute(args)``: run the command after configuration is bound.

    ``is_hidden()`` is optional; when present and true the command is
    parsed normally but left out of help output.
    """

    __name__: str
    ABOUT: str

    def add_arguments(self, parser: argparse.ArgumentParser) -> None: ...

    def execute(self, args: argparse.Namespace) -> SilentExit | None:
        """Run the command.

        Return ``None`` on success or a :class:`SilentExit` to set an
        exact exit code without engine diagnostics.  Raise to report a
        failure.
        """
        ...  # pragma: no cover


class PreExecutionHook(Protocol):
    """Interception point evaluated before the parser is built."""

    def try_consume(self) -> bool:
        """Handle the invocation entirely, returning ``True`` if handled."""
        ...  # pragma: no cover
