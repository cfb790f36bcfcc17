"""Shared pytest fixtures and configuration for the gsoc2-cli test suite.

Guidelines
----------
* No internet access in any test; HTTP goes through ``httpx.MockTransport``.
* Every test gets a private ``$HOME`` and working directory, so rc files,
  ``.env`` files and the update state never leak between tests.
* Process-wide state (config slot, logger, quiet mode, HTTP pool) is reset
  after each test.
"""

from __future__ import annotations

import os
import types
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from gsoc2_cli.cli.console import set_quiet_mode
from gsoc2_cli.core import config
from gsoc2_cli.core.config import Config
from gsoc2_cli.infra.api import Api
from gsoc2_cli.utils.logging import unbind_logger


@pytest.fixture(autouse=True)
def _isolated_process(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name.startswith("GSOC2_") or name.startswith("__GSOC2_"):
            monkeypatch.delenv(name, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(workdir)

    yield

    config.unbind()
    unbind_logger()
    set_quiet_mode(False)
    Api.use_transport(None)


@pytest.fixture()
def home() -> Path:
    return Path.home()


@pytest.fixture()
def bound_config(home: Path) -> Callable[..., Config]:
    """Bind a :class:`Config` built from keyword overrides and return it."""

    def _bind(**overrides: Any) -> Config:
        return config.bind(Config(filename=home / ".gsoc2clirc", **overrides))

    return _bind


def _make_command(
    name: str,
    execute: Callable[..., Any],
    *,
    add_arguments: Callable[..., None] | None = None,
    hidden: bool | None = None,
) -> types.ModuleType:
    """Build an in-memory command module named ``tests.commands.<name>``."""
    module = types.ModuleType(f"tests.commands.{name}")
    module.ABOUT = f"The {name.replace('_', ' ')} command."  # type: ignore[attr-defined]
    module.add_arguments = add_arguments or (lambda parser: None)  # type: ignore[attr-defined]
    module.execute = execute  # type: ignore[attr-defined]
    if hidden is not None:
        module.is_hidden = lambda: hidden  # type: ignore[attr-defined]
    return module


@pytest.fixture()
def make_command() -> Callable[..., types.ModuleType]:
    return _make_command

