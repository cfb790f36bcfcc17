"""gsoc2-cli: command line utility for Gsoc2.

Manages remote resources on a Gsoc2 server through a fixed set of
subcommands that share one resolved configuration per process.
"""

from gsoc2_cli.version import __version__

__all__: list[str] = ["__version__"]
