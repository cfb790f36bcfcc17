"""Command registry and argument-parser construction.

:data:`COMMANDS` is the single source of truth for the available
subcommands.  Each entry contributes its own arguments to a child parser
named after it; the root parser owns the global flags and the built-in
``completions`` command.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import NoReturn

from gsoc2_cli.cli.commands import bash_hook, info, login, uninstall, update
from gsoc2_cli.core.models import CommandDescriptor, LogLevel
from gsoc2_cli.exceptions import DuplicateCommandError, UsageError
from gsoc2_cli.version import __version__

PROG: str = "gsoc2-cli"

ABOUT: str = """
Command line utility for Gsoc2.

This tool helps you manage remote resources on a Gsoc2 server like
sourcemaps, debug symbols or releases.  Use `--help` on the subcommands
to learn more about them."""

COMPLETIONS_COMMAND: str = "completions"
COMPLETION_SHELLS: tuple[str, ...] = ("bash", "zsh", "fish")

COMMANDS: tuple[CommandDescriptor, ...] = (
    CommandDescriptor.from_module(bash_hook, naggable=False),
    CommandDescriptor.from_module(info, naggable=True),
    CommandDescriptor.from_module(login, naggable=True),
    CommandDescriptor.from_module(uninstall, naggable=False),
    CommandDescriptor.from_module(update, naggable=False),
)

# Sub-level ``--header`` values land here and are merged after parsing.
_SUB_HEADERS_DEST: str = "sub_headers"


class ArgumentParser(argparse.ArgumentParser):
    """``argparse`` parser that raises :class:`UsageError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise UsageError(message, hint=f"Run '{self.prog} --help' for more information.")


# ---------------------------------------------------------------------------
# Global arguments
# ---------------------------------------------------------------------------

def _add_inheritable_arguments(parser: argparse.ArgumentParser, *, sub_level: bool) -> None:
    """Register the flags accepted both before and after the subcommand name.

    At sub level every default is suppressed so a flag omitted after the
    subcommand never overwrites a value given before it.
    """
    default = argparse.SUPPRESS if sub_level else None
    parser.add_argument(
        "--header",
        dest=_SUB_HEADERS_DEST if sub_level else "headers",
        action="append",
        metavar="KEY:VALUE",
        default=default,
        help="Custom headers that should be attached to all requests in key:value format.",
    )
    parser.add_argument(
        "--auth-token",
        metavar="AUTH_TOKEN",
        default=default,
        help="Use the given Gsoc2 auth token.",
    )
    parser.add_argument(
        "--log-level",
        metavar="LOG_LEVEL",
        default=default,
        help="Set the log output verbosity. [possible values: "
        + ", ".join(level.value for level in LogLevel)
        + "]",
    )
    parser.add_argument(
        "--quiet",
        "--silent",
        action="store_true",
        default=argparse.SUPPRESS if sub_level else False,
        help="Do not print any output while preserving correct exit code. "
        "This flag is currently implemented only for selected subcommands.",
    )
    parser.add_argument(
        "--allow-failure",
        action="store_true",
        default=argparse.SUPPRESS if sub_level else False,
        help=argparse.SUPPRESS,
    )


def _inherited_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _add_inheritable_arguments(parent, sub_level=True)
    return parent


def build_root_parser() -> ArgumentParser:
    """Root parser with global flags only, before any subcommand is attached."""
    parser = ArgumentParser(
        prog=PROG,
        description=ABOUT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--url",
        metavar="URL",
        help="Fully qualified URL to the Gsoc2 server. [default: https://gsoc2.io/]",
    )
    parser.add_argument(
        "--api-key",
        metavar="API_KEY",
        help="Use the given Gsoc2 API key.",
    )
    _add_inheritable_arguments(parser, sub_level=False)
    return parser


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------

def validate_descriptors(descriptors: Sequence[CommandDescriptor]) -> None:
    """Abort on duplicate command names.

    Raises
    ------
    DuplicateCommandError
        When two descriptors (or a descriptor and a built-in) share a name.
    """
    seen: set[str] = {COMPLETIONS_COMMAND}
    for descriptor in descriptors:
        if descriptor.name in seen:
            raise DuplicateCommandError(f"Command {descriptor.name!r} is registered twice.")
        seen.add(descriptor.name)


def _is_hidden(descriptor: CommandDescriptor) -> bool:
    is_hidden = getattr(descriptor.module, "is_hidden", None)
    return bool(is_hidden()) if callable(is_hidden) else False


def build_parser(descriptors: Sequence[CommandDescriptor] = COMMANDS) -> ArgumentParser:
    """Build the full parser tree: root flags, ``completions`` and every command."""
    validate_descriptors(descriptors)

    parser = build_root_parser()
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")
    inherited = _inherited_parent()

    completions = subparsers.add_parser(
        COMPLETIONS_COMMAND,
        help="Generate completions for the specified shell.",
        description="Generate completions for the specified shell.",
        parents=[inherited],
    )
    completions.add_argument(
        "shell",
        choices=COMPLETION_SHELLS,
        help="The shell to print completions for.",
    )

    for descriptor in descriptors:
        about = getattr(descriptor.module, "ABOUT", None)
        kwargs: dict[str, object] = {"description": about, "parents": [inherited]}
        # Hidden commands omit ``help`` so argparse leaves them out of the listing.
        if not _is_hidden(descriptor):
            kwargs["help"] = about
        child = subparsers.add_parser(descriptor.name, **kwargs)
        descriptor.module.add_arguments(child)

    return parser


def parse_args(parser: argparse.ArgumentParser, argv: Sequence[str]) -> argparse.Namespace:
    """Parse *argv* and fold sub-level ``--header`` values into ``headers``."""
    args = parser.parse_args(list(argv))
    sub_headers = vars(args).pop(_SUB_HEADERS_DEST, None)
    if sub_headers:
        args.headers = (args.headers or []) + sub_headers
    return args


def find_descriptor(
    name: str,
    descriptors: Sequence[CommandDescriptor] = COMMANDS,
) -> CommandDescriptor:
    """Return the descriptor registered as *name*."""
    for descriptor in descriptors:
        if descriptor.name == name:
            return descriptor
    raise LookupError(f"No command registered as {name!r}")
