"""Custom exception hierarchy for gsoc2-cli.

All user-facing error conditions inherit from :class:`Gsoc2CliError` so
the execution engine can render them with a consistent
``error: ...`` / ``caused by: ...`` layout.  Raw third-party exceptions
(httpx, configparser, OS errors) are wrapped at the infrastructure
boundary and chained with ``raise ... from exc``.

Hierarchy
---------
Gsoc2CliError
├── UsageError
│   └── UnknownLogLevelError
├── ConfigError
├── ConfigBindError
├── LoggerBindError
├── ApiError
├── HookError
└── EnvironmentError

DuplicateCommandError is deliberately *not* part of this tree: it is a
programming defect detected at startup and aborts the process.
"""

from __future__ import annotations


class Gsoc2CliError(Exception):
    """Base exception for all gsoc2-cli errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Argument parsing ------------------------------------------------------

class UsageError(Gsoc2CliError):
    """Raised when the command line cannot be parsed."""


class UnknownLogLevelError(UsageError):
    """Raised when ``--log-level`` (or a persisted level) is not recognised."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Unknown log level: {value}",
            hint="Use one of: trace, debug, info, warn, error.",
        )
        self.value: str = value


# --- Configuration ---------------------------------------------------------

class ConfigError(Gsoc2CliError):
    """Raised when persisted or supplied configuration is malformed."""


class ConfigBindError(Gsoc2CliError):
    """Raised on a second bind, or on a read before the first bind."""


class LoggerBindError(Gsoc2CliError):
    """Raised when the logging backend is bound more than once."""


# --- Network ---------------------------------------------------------------

class ApiError(Gsoc2CliError):
    """Raised when a request to the Gsoc2 server (or PyPI) fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code


# --- Pre-execution hooks ---------------------------------------------------

class HookError(Gsoc2CliError):
    """Raised when an internally re-invoked wrapper call fails."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(Gsoc2CliError):
    """Raised when an optional runtime dependency is not available."""


# --- Startup defects -------------------------------------------------------

class DuplicateCommandError(RuntimeError):
    """Two registered command descriptors share the same name."""
