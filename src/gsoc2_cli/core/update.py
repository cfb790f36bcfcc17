"""Pure rules behind the update nagger and the ``update`` command."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

CHECK_INTERVAL: timedelta = timedelta(hours=24)

_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(value: str) -> tuple[int, int, int]:
    """Parse the numeric ``major.minor.patch`` prefix of *value*.

    Missing components count as ``0``; pre-release suffixes are ignored.

    Raises
    ------
    ValueError
        When *value* does not start with a number.
    """
    match = _VERSION_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Not a version number: {value!r}")
    major, minor, patch = (int(part or 0) for part in match.groups())
    return major, minor, patch


def is_newer(candidate: str, current: str) -> bool:
    """True when *candidate* is a strictly newer release than *current*."""
    return parse_version(candidate) > parse_version(current)


@dataclass(frozen=True, slots=True)
class UpdateCheckState:
    """Persisted result of the last release lookup."""

    last_check: datetime | None = None
    latest_version: str | None = None

    def is_stale(self, now: datetime, interval: timedelta = CHECK_INTERVAL) -> bool:
        """True when a fresh lookup is due."""
        if self.last_check is None or self.latest_version is None:
            return True
        return now - self.last_check >= interval

    def newer_than(self, current: str) -> bool:
        """True when the recorded release is newer than *current*."""
        if self.latest_version is None:
            return False
        try:
            return is_newer(self.latest_version, current)
        except ValueError:
            return False
