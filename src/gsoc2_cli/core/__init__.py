"""Core layer: configuration snapshot, models and pure dispatch rules.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
"""

from gsoc2_cli.core.config import Config
from gsoc2_cli.core.models import (
    CommandDescriptor,
    CommandOutcome,
    Failure,
    KeyAuth,
    LogLevel,
    NoAuth,
    SilentExit,
    Success,
    TokenAuth,
)
from gsoc2_cli.core.protocols import CommandModule, PreExecutionHook

__all__: list[str] = [
    "CommandDescriptor",
    "CommandModule",
    "CommandOutcome",
    "Config",
    "Failure",
    "KeyAuth",
    "LogLevel",
    "NoAuth",
    "PreExecutionHook",
    "SilentExit",
    "Success",
    "TokenAuth",
]
