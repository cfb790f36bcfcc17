"""Resolved configuration snapshot and its process-wide slot.

A :class:`Config` is built once per process (persisted store, then CLI
overrides), bound once with :func:`bind`, and read everywhere else with
:func:`current`.  The snapshot is frozen, so no locking is needed for
reads after binding.

Rules
-----
* No I/O: loading lives in :mod:`gsoc2_cli.infra.config_store`.
* Binding twice, or reading before the first bind, is a programming
  error and raises :class:`~gsoc2_cli.exceptions.ConfigBindError`.
"""

from __future__ import annotations

import argparse
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path

from gsoc2_cli.core.models import Auth, LogLevel, NoAuth
from gsoc2_cli.exceptions import ConfigBindError

DEFAULT_URL: str = "https://gsoc2.io/"


@dataclass(frozen=True, slots=True)
class Config:
    """Process-wide gsoc2-cli configuration."""

    filename: Path
    """Path of the global rc file (it may not exist)."""

    base_url: str = DEFAULT_URL
    auth: Auth = field(default_factory=NoAuth)
    headers: tuple[str, ...] = ()
    """Extra request headers as ``key:value`` strings, in order."""

    org: str | None = None
    """Default organization slug (``[defaults] org``)."""

    project: str | None = None
    """Default project slug (``[defaults] project``)."""

    log_level: LogLevel | None = None
    quiet: bool = False
    allow_failure: bool = False
    disable_update_check: bool = False

    # ------------------------------------------------------------------
    # Copy-on-write setters (used before binding)
    # ------------------------------------------------------------------

    def with_auth(self, auth: Auth) -> Config:
        """Return a copy whose auth is *auth*; the previous variant is dropped."""
        return replace(self, auth=auth)

    def with_base_url(self, url: str) -> Config:
        return replace(self, base_url=url)

    def with_extra_headers(self, headers: list[str]) -> Config:
        """Return a copy with *headers* appended after the existing ones."""
        return replace(self, headers=self.headers + tuple(headers))

    def with_log_level(self, level: LogLevel) -> Config:
        return replace(self, log_level=level)

    def with_quiet(self, quiet: bool) -> Config:
        return replace(self, quiet=quiet)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_filename(self) -> Path:
        return self.filename

    def get_allow_failure(self, args: argparse.Namespace) -> bool:
        """True when failures should be suppressed for this invocation.

        Either the persisted/env setting (``GSOC2_ALLOW_FAILURE``) or the
        ``--allow-failure`` flag enables it.
        """
        return self.allow_failure or bool(getattr(args, "allow_failure", False))


# ---------------------------------------------------------------------------
# Process-wide slot
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_current: Config | None = None


def bind(config: Config) -> Config:
    """Bind *config* as the process configuration and return it."""
    global _current
    with _lock:
        if _current is not None:
            raise ConfigBindError("Configuration is already bound to this process.")
        _current = config
    return config


def current() -> Config:
    """Return the bound configuration."""
    config = _current
    if config is None:
        raise ConfigBindError("Configuration was read before it was bound.")
    return config


def is_bound() -> bool:
    return _current is not None


def unbind() -> None:
    """Release the slot.

    Only for callers that run :func:`gsoc2_cli.cli.app.main` several
    times in one interpreter (test suites, embedding hosts).
    """
    global _current
    with _lock:
        _current = None
