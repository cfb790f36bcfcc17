"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
Commands that need another code return a
:class:`~gsoc2_cli.core.models.SilentExit` carrying it.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, or a failure suppressed by allow-failure mode."""

GENERAL_ERROR: int = 1
"""An error was reported to the user, or no subcommand was given."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
