"""``gsoc2-cli bash-hook``: report failing bash scripts as Gsoc2 events.

Without ``--send-event`` the command prints a bash snippet meant to be
evaluated at the top of a script::

    eval "$(gsoc2-cli bash-hook)"

The snippet installs ``ERR``/``EXIT`` traps that record a traceback and
the script's output, then call back into ``gsoc2-cli bash-hook
--send-event`` with those files.
"""

from __future__ import annotations

import argparse
import os
import re
import shlex
import sys
import tempfile
import uuid
from importlib import resources
from pathlib import Path
from typing import Any

from gsoc2_cli.core import config
from gsoc2_cli.core.models import SilentExit
from gsoc2_cli.exceptions import ConfigError, Gsoc2CliError
from gsoc2_cli.infra.api import Api, Dsn

ABOUT: str = "Prints out a bash script that does error handling."

DSN_ENV: str = "GSOC2_DSN"
MAX_BREADCRUMBS: int = 50

_LOG_LINE_RE = re.compile(
    r"^(?P<timestamp>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}): (?P<stream>stdout|stderr): (?P<message>.*)$"
)


def is_hidden() -> bool:
    return True


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-exit",
        action="store_true",
        help="Do not turn on -e (exit immediately) flag automatically.",
    )
    parser.add_argument(
        "--no-environ",
        action="store_true",
        help="Do not send environment variables along.",
    )
    parser.add_argument(
        "--cli",
        metavar="CMD",
        help="Explicitly set/override the gsoc2-cli command.",
    )
    parser.add_argument(
        "--release",
        metavar="RELEASE",
        help="Set the release that errors are reported against.",
    )
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        metavar="KEY:VALUE",
        help="Add tags (key:value) to the event.",
    )
    parser.add_argument("--send-event", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("--traceback", metavar="PATH", help=argparse.SUPPRESS)
    parser.add_argument("--log", metavar="PATH", help=argparse.SUPPRESS)


# ---------------------------------------------------------------------------
# Script rendering
# ---------------------------------------------------------------------------

def load_script_template() -> str:
    return resources.files("gsoc2_cli").joinpath("data/bashsupport.sh").read_text(encoding="utf-8")


def render_script(args: argparse.Namespace, *, temp_dir: Path | None = None) -> str:
    """Fill the bash template with file paths and the callback options."""
    temp_dir = temp_dir or Path(tempfile.gettempdir())
    run_id = uuid.uuid4().hex
    cli = args.cli or Path(sys.argv[0]).resolve().as_posix()

    tags = " ".join(f"--tag {shlex.quote(tag)}" for tag in args.tags)
    release = f"--release {shlex.quote(args.release)}" if args.release else ""

    script = load_script_template()
    script = script.replace(
        "___GSOC2_TRACEBACK_FILE___", str(temp_dir / f"gsoc2-traceback-{run_id}.txt")
    )
    script = script.replace("___GSOC2_LOG_FILE___", str(temp_dir / f"gsoc2-log-{run_id}.txt"))
    script = script.replace("___GSOC2_CLI___", shlex.quote(cli))
    script = script.replace("___GSOC2_TAGS___", tags)
    script = script.replace("___GSOC2_RELEASE___", release)
    script = script.replace("___GSOC2_NO_ENVIRON___", "--no-environ" if args.no_environ else "")

    if not args.no_exit:
        script = "set -e\n\n" + script
    return script


# ---------------------------------------------------------------------------
# Event construction
# ---------------------------------------------------------------------------

def _context_line(filename: str, lineno: int) -> str | None:
    try:
        lines = Path(filename).read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return None
    if 1 <= lineno <= len(lines):
        return lines[lineno - 1]
    return None


def parse_traceback(text: str) -> tuple[list[dict[str, Any]], str, str]:
    """Return ``(frames, command, exit_code)`` from a traceback file.

    Frame lines are ``function:file:line``, innermost first; the trailing
    ``@command:`` and ``@exit_code:`` lines describe the failing command.
    Frames are returned outermost first.
    """
    frames: list[dict[str, Any]] = []
    command = "unknown"
    exit_code = "unknown"
    for line in text.splitlines():
        if line.startswith("@command:"):
            command = line[len("@command:"):]
            continue
        if line.startswith("@exit_code:"):
            exit_code = line[len("@exit_code:"):]
            continue
        function, _, rest = line.partition(":")
        filename, _, lineno_text = rest.rpartition(":")
        if not filename or not lineno_text.isdigit():
            continue
        lineno = int(lineno_text)
        frame: dict[str, Any] = {
            "function": function or "main",
            "filename": filename,
            "abs_path": os.path.abspath(filename),
            "lineno": lineno,
        }
        context = _context_line(filename, lineno)
        if context is not None:
            frame["context_line"] = context
        frames.append(frame)
    frames.reverse()
    return frames, command, exit_code


def parse_log(text: str) -> list[dict[str, Any]]:
    """Turn the timestamped output log into breadcrumbs (most recent last)."""
    breadcrumbs = []
    for line in text.splitlines():
        match = _LOG_LINE_RE.match(line)
        if match is None:
            continue
        breadcrumbs.append(
            {
                "timestamp": match["timestamp"],
                "category": match["stream"],
                "message": match["message"],
            }
        )
    return breadcrumbs[-MAX_BREADCRUMBS:]


def parse_tags(raw_tags: list[str]) -> dict[str, str]:
    tags: dict[str, str] = {}
    for raw in raw_tags:
        key, sep, value = raw.partition(":")
        if not sep or not key:
            raise ConfigError(f"Invalid tag: {raw!r}", hint="Tags must use the KEY:VALUE format.")
        tags[key] = value
    return tags


def build_event(
    traceback_text: str,
    log_text: str,
    *,
    tags: dict[str, str],
    release: str | None,
    environ: dict[str, str] | None,
) -> dict[str, Any]:
    frames, command, exit_code = parse_traceback(traceback_text)
    event: dict[str, Any] = {
        "level": "error",
        "platform": "other",
        "logger": "bash",
        "exception": {
            "values": [
                {
                    "type": "BashError",
                    "value": f"command {command} exited with status {exit_code}",
                    "stacktrace": {"frames": frames},
                }
            ]
        },
        "breadcrumbs": {"values": parse_log(log_text)},
        "tags": tags,
    }
    if release:
        event["release"] = release
    if environ is not None:
        event["extra"] = {"environ": environ}
    return event


def send_event(args: argparse.Namespace) -> None:
    if not args.traceback or not args.log:
        raise Gsoc2CliError("--send-event requires --traceback and --log.")
    dsn_value = os.environ.get(DSN_ENV)
    if not dsn_value:
        raise ConfigError(
            "No DSN configured for bash-hook events.",
            hint=f"Export {DSN_ENV} before evaluating the hook.",
        )

    try:
        traceback_text = Path(args.traceback).read_text(encoding="utf-8", errors="replace")
        log_text = Path(args.log).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise Gsoc2CliError("Could not read the bash-hook traceback or log file.") from exc

    event = build_event(
        traceback_text,
        log_text,
        tags=parse_tags(args.tags),
        release=args.release,
        environ=None if args.no_environ else dict(os.environ),
    )
    event_id = Api(config.current()).send_event(Dsn.parse(dsn_value), event)
    sys.stdout.write(event_id + "\n")


def execute(args: argparse.Namespace) -> SilentExit | None:
    if args.send_event:
        send_event(args)
        return None
    sys.stdout.write(render_script(args))
    sys.stdout.flush()
    return None
