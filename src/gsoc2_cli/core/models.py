"""Domain models for gsoc2-cli.

All models are **frozen** dataclasses or enums: immutable value objects
with no behaviour beyond data access and parsing.  They carry zero I/O
and no dependencies on external packages.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from gsoc2_cli.exceptions import UnknownLogLevelError

if TYPE_CHECKING:
    from gsoc2_cli.core.protocols import CommandModule


TRACE: int = 5
"""Numeric level used for ``--log-level trace`` (below ``logging.DEBUG``)."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NoAuth:
    """No credentials configured."""


@dataclass(frozen=True, slots=True)
class KeyAuth:
    """Legacy API-key authentication."""

    key: str


@dataclass(frozen=True, slots=True)
class TokenAuth:
    """Auth-token authentication."""

    token: str


Auth = Union[NoAuth, KeyAuth, TokenAuth]
"""Exactly one credential variant is active at a time."""


def describe_auth(auth: Auth) -> str:
    """Return a human-readable name for the active auth variant."""
    if isinstance(auth, TokenAuth):
        return "Auth Token"
    if isinstance(auth, KeyAuth):
        return "API Key"
    return "Unauthorized"


# ---------------------------------------------------------------------------
# Log level
# ---------------------------------------------------------------------------

class LogLevel(enum.Enum):
    """Verbosity accepted by ``--log-level``."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def parse(cls, value: str) -> LogLevel:
        """Parse *value* case-insensitively.

        Raises
        ------
        UnknownLogLevelError
            When *value* is not one of the known level names.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise UnknownLogLevelError(value) from None

    @property
    def numeric(self) -> int:
        """Equivalent :mod:`logging` level number."""
        return {
            LogLevel.TRACE: TRACE,
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARN: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
        }[self]


# ---------------------------------------------------------------------------
# Command outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Success:
    """The command completed normally."""


@dataclass(frozen=True, slots=True)
class SilentExit:
    """Exit with *code* without any engine-generated output.

    Returned by commands that have already told the user what went wrong
    and only need to control the process exit code.
    """

    code: int


@dataclass(frozen=True, slots=True)
class Failure:
    """The command raised *error*; the engine formats and reports it."""

    error: BaseException


CommandOutcome = Union[Success, SilentExit, Failure]


# ---------------------------------------------------------------------------
# Command descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """One entry of the static command table."""

    name: str
    """Kebab-case subcommand name (e.g. ``bash-hook``)."""

    module: CommandModule
    """Object contributing ``add_arguments`` and ``execute``."""

    naggable: bool
    """Whether the update nagger runs after this command."""

    @classmethod
    def from_module(cls, module: CommandModule, *, naggable: bool) -> CommandDescriptor:
        """Build a descriptor whose name is derived from the module identifier."""
        identifier = module.__name__.rsplit(".", 1)[-1]
        return cls(name=identifier.replace("_", "-"), module=module, naggable=naggable)
