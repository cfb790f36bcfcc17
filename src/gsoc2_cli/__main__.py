"""Allow ``python -m gsoc2_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m gsoc2_cli`` behaves identically to the ``gsoc2-cli``
console script.
"""

from __future__ import annotations

from gsoc2_cli.cli.app import cli

if __name__ == "__main__":
    cli()
