"""Infrastructure: detect how this gsoc2-cli installation is managed.

Used by ``uninstall`` and ``update`` to refuse acting on installations
owned by a package manager, and to print the right instructions.

Rules
-----
* Inspection of paths and interpreter state only: no subprocess.
* No ``print()``: callers handle user-facing output.
"""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from pathlib import Path


class InstallMethod(enum.Enum):
    HOMEBREW = "homebrew"
    NPM = "npm"
    PIPX = "pipx"
    PIP = "pip"
    STANDALONE = "standalone"


@dataclass(frozen=True, slots=True)
class InstallStatus:
    """Result of an installation probe.

    Attributes
    ----------
    method : InstallMethod
        The detected installation channel.
    executable : Path
        The file that would be removed or replaced.
    uninstall_commands : tuple[str, ...]
        Suggested commands for package-manager installs.  Empty for
        standalone executables, which gsoc2-cli manages itself.
    """

    method: InstallMethod
    executable: Path
    uninstall_commands: tuple[str, ...]

    @property
    def is_managed(self) -> bool:
        return self.method is not InstallMethod.STANDALONE


def current_executable() -> Path:
    """Return the running gsoc2-cli executable (or console script)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def is_homebrew_install(executable: Path) -> bool:
    parts = executable.parts
    return "Cellar" in parts or "homebrew" in parts


def is_npm_install(executable: Path) -> bool:
    return "node_modules" in executable.parts


def is_pipx_install() -> bool:
    return "pipx" in Path(sys.prefix).parts


def detect_install(executable: Path | None = None) -> InstallStatus:
    """Probe how the running executable was installed."""
    exe = executable or current_executable()

    if is_homebrew_install(exe):
        return InstallStatus(InstallMethod.HOMEBREW, exe, ("brew uninstall gsoc2-cli",))
    if is_npm_install(exe):
        return InstallStatus(
            InstallMethod.NPM,
            exe,
            (
                "yarn remove @gsoc2/cli",
                "yarn global remove @gsoc2/cli",
                "npm uninstall @gsoc2/cli",
                "npm uninstall --global @gsoc2/cli",
            ),
        )
    if getattr(sys, "frozen", False):
        return InstallStatus(InstallMethod.STANDALONE, exe, ())
    if is_pipx_install():
        return InstallStatus(InstallMethod.PIPX, exe, ("pipx uninstall gsoc2-cli",))
    return InstallStatus(InstallMethod.PIP, exe, ("pip uninstall gsoc2-cli",))


def is_windows() -> bool:
    return sys.platform.startswith("win")


def is_writable(path: Path) -> bool:
    """True when *path* can be removed by the current user."""
    return os.access(path.parent, os.W_OK) and os.access(path, os.W_OK)
