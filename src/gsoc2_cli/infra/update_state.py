"""Persistence of the update-check state (``~/.gsoc2/update-check.json``)."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from gsoc2_cli.core.update import UpdateCheckState

logger = logging.getLogger(__name__)


def state_path() -> Path:
    return Path.home() / ".gsoc2" / "update-check.json"


def read_state(path: Path | None = None) -> UpdateCheckState:
    """Return the stored state, or an empty one when missing or unreadable."""
    path = path or state_path()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        last_check = payload.get("last_check")
        return UpdateCheckState(
            last_check=datetime.fromisoformat(last_check) if last_check else None,
            latest_version=payload.get("latest_version"),
        )
    except FileNotFoundError:
        return UpdateCheckState()
    except (OSError, ValueError, AttributeError) as exc:
        logger.debug("Ignoring unreadable update state %s: %s", path, exc)
        return UpdateCheckState()


def write_state(state: UpdateCheckState, path: Path | None = None) -> None:
    path = path or state_path()
    payload = {
        "last_check": state.last_check.isoformat() if state.last_check else None,
        "latest_version": state.latest_version,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
