"""Single source of the running gsoc2-cli version."""

from __future__ import annotations

__version__: str = "2.21.0"
