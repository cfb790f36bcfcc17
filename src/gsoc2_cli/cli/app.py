"""CLI application entry point and command dispatch for gsoc2-cli.

This module is the **sole error boundary** for the application.  Every
invocation goes through the same sequence:

1. Pre-execution hooks (may handle the whole invocation).
2. Parse arguments with the registry's parser tree.
3. Resolve and bind the process configuration.
4. Dispatch to exactly one command and collect its outcome.
5. Translate the outcome into an exit code.
6. Dispose the shared HTTP pool.

Commands report results as :class:`~gsoc2_cli.core.models.CommandOutcome`
values; exceptions they raise become :class:`Failure` outcomes here.
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from collections.abc import Sequence

from gsoc2_cli.cli import exit_codes
from gsoc2_cli.cli.completions import generate
from gsoc2_cli.cli.console import console, print_error, set_quiet_mode
from gsoc2_cli.cli.hooks import select_hook
from gsoc2_cli.cli.registry import (
    COMMANDS,
    COMPLETIONS_COMMAND,
    PROG,
    build_parser,
    find_descriptor,
    parse_args,
)
from gsoc2_cli.cli.update_nagger import run_update_nagger
from gsoc2_cli.core import config
from gsoc2_cli.core.config import Config
from gsoc2_cli.core.models import (
    CommandDescriptor,
    CommandOutcome,
    Failure,
    SilentExit,
    Success,
)
from gsoc2_cli.core.protocols import PreExecutionHook
from gsoc2_cli.core.resolver import apply_args, get_log_level
from gsoc2_cli.exceptions import Gsoc2CliError
from gsoc2_cli.infra import config_store
from gsoc2_cli.infra.api import Api
from gsoc2_cli.utils.logging import bind_logger, set_max_level
from gsoc2_cli.version import __version__

logger = logging.getLogger(__name__)

ALLOW_FAILURE_NOTICE: str = (
    'Command failed, however, "GSOC2_ALLOW_FAILURE" variable or "allow-failure" '
    "flag was set. Exiting with 0 exit code."
)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def resolve_config(args: argparse.Namespace, argv: Sequence[str] = ()) -> Config:
    """Load, override, bind and announce the process configuration."""
    log_level = get_log_level(args)
    if log_level is not None:
        set_max_level(log_level)

    resolved = apply_args(config_store.load(), args)
    if log_level is None and resolved.log_level is not None:
        set_max_level(resolved.log_level)

    bound = config.bind(resolved)
    set_quiet_mode(bound.quiet)

    if bound.get_filename().exists():
        logger.info("Loaded config from %s", bound.get_filename())
    logger.debug(
        'gsoc2-cli version: %s, platform: "%s", architecture: "%s"',
        __version__,
        platform.system().lower(),
        platform.machine(),
    )
    logger.info(
        "gsoc2-cli was invoked with the following command line: %s",
        " ".join(f'"{arg}"' for arg in (PROG, *argv)),
    )
    return bound


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def run_command(descriptor: CommandDescriptor, args: argparse.Namespace) -> CommandOutcome:
    """Execute *descriptor* and capture how it ended."""
    try:
        result = descriptor.module.execute(args)
    except Exception as exc:  # noqa: BLE001 (intentional: boundary catch)
        outcome: CommandOutcome = Failure(exc)
    else:
        outcome = result if isinstance(result, SilentExit) else Success()
    return outcome


def report_outcome(outcome: CommandOutcome, *, allow_failure: bool) -> CommandOutcome:
    """Print a command failure and return the outcome that sets the exit code.

    With *allow_failure* the error is still printed, followed by a notice,
    and the invocation succeeds.  Silent exits are never suppressed.
    """
    if not isinstance(outcome, Failure):
        return outcome
    print_error(outcome.error)
    if allow_failure:
        console.print()
        console.print(ALLOW_FAILURE_NOTICE, markup=False)
        return Success()
    return SilentExit(exit_codes.GENERAL_ERROR)


def _print_completions(parser: argparse.ArgumentParser, shell: str) -> None:
    console.print(f"Generating completion file for {shell}...")
    sys.stdout.write(generate(shell, parser))
    sys.stdout.flush()


def execute(
    argv: Sequence[str],
    *,
    descriptors: Sequence[CommandDescriptor] = COMMANDS,
    hook: PreExecutionHook | None = None,
) -> CommandOutcome:
    """Run one invocation and return its outcome.

    Command failures are reported here, before the update nagger runs.
    Errors raised before dispatch (usage errors, bad configuration) are
    not converted here; :func:`main` reports them.
    """
    hook = hook if hook is not None else select_hook(argv=argv)
    if hook.try_consume():
        return Success()

    parser = build_parser(descriptors)
    if not argv:
        parser.print_help(sys.stderr)
        return SilentExit(exit_codes.GENERAL_ERROR)

    args = parse_args(parser, argv)
    cfg = resolve_config(args, argv)

    if args.command == COMPLETIONS_COMMAND:
        _print_completions(parser, args.shell)
        return Success()

    descriptor = find_descriptor(args.command, descriptors)
    outcome = report_outcome(
        run_command(descriptor, args),
        allow_failure=cfg.get_allow_failure(args),
    )
    # Nag only once the outcome has been reported.
    if descriptor.naggable:
        run_update_nagger()
    return outcome


def exit_code(outcome: CommandOutcome) -> int:
    """Map *outcome* to a process exit code, reporting failures."""
    if isinstance(outcome, SilentExit):
        return outcome.code
    if isinstance(outcome, Failure):
        print_error(outcome.error)
        return exit_codes.GENERAL_ERROR
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    descriptors: Sequence[CommandDescriptor] = COMMANDS,
    hook: PreExecutionHook | None = None,
) -> int:
    """Run the gsoc2-cli command line.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    descriptors:
        Command table to dispatch against.
    hook:
        Pre-execution hook; defaults to the one for this platform.

    Returns
    -------
    int
        OS process exit code.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    bind_logger()
    try:
        try:
            outcome = execute(argv, descriptors=descriptors, hook=hook)
        except Gsoc2CliError as exc:
            outcome = Failure(exc)
        return exit_code(outcome)
    finally:
        # Pooled connections keep background threads alive on some
        # platforms; close them before the interpreter exits.
        Api.dispose_pool()


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level boundary invoked by the console-script entry point."""
    try:
        code = main()
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        code = exit_codes.KEYBOARD_INTERRUPT
    sys.exit(code)
