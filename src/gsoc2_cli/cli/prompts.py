"""Interactive prompts for the CLI layer, backed by questionary.

questionary is imported lazily so non-interactive commands never pay for
it, and a missing install surfaces as a clean
:class:`~gsoc2_cli.exceptions.EnvironmentError`.
"""

from __future__ import annotations

from typing import Any

from gsoc2_cli.exceptions import EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def prompt_to_continue(message: str) -> bool:
    """Ask a yes/no question; Ctrl+C or Esc counts as *no*."""
    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(message, default=False).ask()
    return bool(answer)


def prompt_secret(message: str) -> str | None:
    """Ask for a hidden value; returns ``None`` when cancelled or empty."""
    questionary = _import_questionary()
    value: str | None = questionary.password(message).ask()
    if value is None or not value.strip():
        return None
    return value.strip()
