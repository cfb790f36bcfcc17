"""Pre-execution hooks evaluated before the argument parser is built.

React Native's Xcode build phase re-invokes gsoc2-cli in place of the
JavaScript packager by setting ``__GSOC2_RN_WRAP_XCODE_CALL=1``.  That
call must behave like the packager itself, so it is intercepted here and
never reaches normal parsing, configuration or dispatch.

Only macOS builds Xcode projects; every other platform gets the
:class:`NoopHook`.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

from gsoc2_cli.core.protocols import PreExecutionHook
from gsoc2_cli.exceptions import HookError

logger = logging.getLogger(__name__)

XCODE_WRAP_MARKER: str = "__GSOC2_RN_WRAP_XCODE_CALL"
SOURCEMAP_REPORT_ENV: str = "GSOC2_RN_SOURCEMAP_REPORT"


class NoopHook:
    """Hook for platforms without any re-entry interception."""

    def try_consume(self) -> bool:
        return False


class XcodeWrapHook:
    """Intercepts the React Native packager call made from Xcode."""

    def __init__(self, argv: Sequence[str] | None = None) -> None:
        self._argv: list[str] = list(sys.argv[1:] if argv is None else argv)

    def try_consume(self) -> bool:
        value = os.environ.pop(XCODE_WRAP_MARKER, None)
        if value != "1":
            return False
        wrap_call(self._argv)
        return True


def _option_value(args: Sequence[str], name: str) -> str | None:
    for index, arg in enumerate(args):
        if arg == name and index + 1 < len(args):
            return args[index + 1]
        if arg.startswith(name + "="):
            return arg.split("=", 1)[1]
    return None


def wrap_call(args: Sequence[str]) -> None:
    """Run the real packager with a guaranteed sourcemap output.

    The bundle and sourcemap paths are written as JSON to the file named
    by ``$GSOC2_RN_SOURCEMAP_REPORT`` so a later upload step can find them.

    Raises
    ------
    HookError
        When the packager cannot be started or exits non-zero.
    """
    packager_args = list(args)
    bundle_path = _option_value(packager_args, "--bundle-output")
    sourcemap_path = _option_value(packager_args, "--sourcemap-output")

    if bundle_path is not None and sourcemap_path is None:
        sourcemap_path = str(
            Path(tempfile.gettempdir()) / (Path(bundle_path).name + ".map")
        )
        packager_args += ["--sourcemap-output", sourcemap_path]

    report_path = os.environ.get(SOURCEMAP_REPORT_ENV)
    if report_path:
        Path(report_path).write_text(
            json.dumps({"bundle_path": bundle_path, "sourcemap_path": sourcemap_path}),
            encoding="utf-8",
        )

    node = os.environ.get("NODE_BINARY", "node")
    logger.info("Wrapping packager call: %s %s", node, " ".join(packager_args))
    try:
        completed = subprocess.run([node, *packager_args], check=False)
    except OSError as exc:
        raise HookError(f"Could not run the React Native packager ({node})") from exc
    if completed.returncode != 0:
        raise HookError(f"React Native packager exited with code {completed.returncode}")


def select_hook(
    platform: str | None = None,
    *,
    argv: Sequence[str] | None = None,
) -> PreExecutionHook:
    """Return the hook implementation for *platform* (default: this one).

    *argv* is what a consuming hook forwards; ``sys.argv[1:]`` when omitted.
    """
    platform = sys.platform if platform is None else platform
    if platform == "darwin":
        return XcodeWrapHook(argv)
    return NoopHook()
