"""Tests for the execution engine (cli/app.py).

Commands are in-memory modules registered through explicit descriptor
tables, so the engine is exercised without any network or real command.

Coverage:
* Exactly one command runs per invocation.
* Outcome to exit-code mapping (success, silent exit, failure).
* Allow-failure mode via flag and environment.
* Global flags resolved into the bound configuration.
* Update nagger gating by descriptor, after the outcome is reported.
* Pre-execution hooks, empty argv, usage errors, --help / --version.
* Shutdown always disposes the HTTP pool.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gsoc2_cli.cli import exit_codes
from gsoc2_cli.cli.app import ALLOW_FAILURE_NOTICE, cli, exit_code, main
from gsoc2_cli.cli.console import is_quiet_mode
from gsoc2_cli.cli.hooks import XCODE_WRAP_MARKER, NoopHook
from gsoc2_cli.core import config
from gsoc2_cli.core.models import (
    CommandDescriptor,
    Failure,
    KeyAuth,
    LogLevel,
    SilentExit,
    Success,
    TokenAuth,
)
from gsoc2_cli.exceptions import DuplicateCommandError, Gsoc2CliError
from gsoc2_cli.infra.api import Api


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _descriptors(*modules, naggable: bool = False) -> tuple[CommandDescriptor, ...]:
    return tuple(CommandDescriptor.from_module(m, naggable=naggable) for m in modules)


def _run(argv: list[str], *modules, naggable: bool = False) -> int:
    return main(argv, descriptors=_descriptors(*modules, naggable=naggable), hook=NoopHook())


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_only_selected_command_runs(self, make_command) -> None:
        alpha = MagicMock(return_value=None)
        beta = MagicMock(return_value=None)

        code = _run(["alpha"], make_command("alpha", alpha), make_command("beta", beta))

        assert code == exit_codes.SUCCESS
        alpha.assert_called_once()
        beta.assert_not_called()

    def test_kebab_case_name(self, make_command) -> None:
        execute = MagicMock(return_value=None)
        code = _run(["bash-hook"], make_command("bash_hook", execute))
        assert code == exit_codes.SUCCESS
        execute.assert_called_once()

    def test_config_bound_before_execute(self, make_command) -> None:
        seen = []
        _run(["alpha"], make_command("alpha", lambda args: seen.append(config.current())))
        assert len(seen) == 1
        assert seen[0].base_url == "https://gsoc2.io/"

    def test_unknown_command_is_usage_error(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        execute = MagicMock(return_value=None)
        code = _run(["nope"], make_command("alpha", execute))

        assert code == exit_codes.GENERAL_ERROR
        execute.assert_not_called()
        assert "error:" in capsys.readouterr().err

    def test_empty_argv_prints_help_and_exits_1(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        execute = MagicMock(return_value=None)
        code = _run([], make_command("alpha", execute))

        assert code == exit_codes.GENERAL_ERROR
        execute.assert_not_called()
        err = capsys.readouterr().err
        assert "usage:" in err
        assert "error:" not in err

    def test_duplicate_names_abort(self, make_command) -> None:
        first = make_command("alpha", MagicMock(return_value=None))
        second = make_command("alpha", MagicMock(return_value=None))
        with pytest.raises(DuplicateCommandError):
            _run(["alpha"], first, second)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class TestOutcomes:
    def test_silent_exit_code_passes_through(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = _run(["alpha"], make_command("alpha", lambda args: SilentExit(3)))

        assert code == 3
        assert "error:" not in capsys.readouterr().err

    def test_gsoc2_error_is_reported(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        def boom(args):
            raise Gsoc2CliError("boom")

        code = _run(["alpha"], make_command("alpha", boom))

        assert code == exit_codes.GENERAL_ERROR
        assert "error: boom" in capsys.readouterr().err

    def test_unexpected_exception_is_reported(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        def boom(args):
            raise RuntimeError("kaput")

        code = _run(["alpha"], make_command("alpha", boom))

        assert code == exit_codes.GENERAL_ERROR
        assert "kaput" in capsys.readouterr().err

    def test_exit_code_mapping(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert exit_code(Success()) == 0
        assert exit_code(SilentExit(7)) == 7
        assert exit_code(Failure(ValueError("x"))) == 1


# ---------------------------------------------------------------------------
# Allow-failure
# ---------------------------------------------------------------------------

def _failing(args):
    raise Gsoc2CliError("upload failed")


class TestAllowFailure:
    @pytest.mark.parametrize(
        "argv",
        [["--allow-failure", "alpha"], ["alpha", "--allow-failure"]],
    )
    def test_flag_turns_failure_into_success(
        self,
        argv: list[str],
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = _run(argv, make_command("alpha", _failing))

        assert code == exit_codes.SUCCESS
        err = capsys.readouterr().err
        assert "upload failed" in err
        assert "GSOC2_ALLOW_FAILURE" in err

    def test_long_error_and_notice_stay_whole(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        message = (
            "Release 1.2.3 could not be finalized because the upload of the source "
            "bundle to the server timed out after several attempts"
        )

        def long_failure(args):
            raise Gsoc2CliError(message)

        code = _run(["--allow-failure", "alpha"], make_command("alpha", long_failure))

        assert code == exit_codes.SUCCESS
        err = capsys.readouterr().err
        assert message in err
        assert ALLOW_FAILURE_NOTICE in err

    def test_environment_turns_failure_into_success(
        self,
        make_command,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("GSOC2_ALLOW_FAILURE", "1")
        assert _run(["alpha"], make_command("alpha", _failing)) == exit_codes.SUCCESS

    def test_silent_exit_is_not_suppressed(self, make_command) -> None:
        code = _run(["--allow-failure", "alpha"], make_command("alpha", lambda args: SilentExit(2)))
        assert code == 2

    def test_pre_dispatch_errors_still_fail(self, make_command) -> None:
        execute = MagicMock(return_value=None)
        code = _run(
            ["--allow-failure", "--log-level", "loud", "alpha"],
            make_command("alpha", execute),
        )
        assert code == exit_codes.GENERAL_ERROR
        execute.assert_not_called()


# ---------------------------------------------------------------------------
# Global flags → bound configuration
# ---------------------------------------------------------------------------

class TestConfigResolution:
    def _capture(self, argv: list[str], make_command) -> config.Config:
        seen = []
        code = _run(argv, make_command("alpha", lambda args: seen.append(config.current())))
        assert code == exit_codes.SUCCESS
        return seen[0]

    @pytest.mark.parametrize(
        "argv",
        [
            ["--api-key", "k", "--auth-token", "t", "alpha"],
            ["--auth-token", "t", "--api-key", "k", "alpha"],
            ["--api-key", "k", "alpha", "--auth-token", "t"],
        ],
    )
    def test_token_beats_api_key(self, argv: list[str], make_command) -> None:
        assert self._capture(argv, make_command).auth == TokenAuth("t")

    def test_api_key_alone(self, make_command) -> None:
        assert self._capture(["--api-key", "k", "alpha"], make_command).auth == KeyAuth("k")

    def test_url_override(self, make_command) -> None:
        cfg = self._capture(["--url", "https://self.hosted/", "alpha"], make_command)
        assert cfg.base_url == "https://self.hosted/"

    def test_headers_appended_in_order(self, make_command, home: Path) -> None:
        (home / ".gsoc2clirc").write_text("[http]\nheaders =\n    X-Rc:0\n", encoding="utf-8")

        cfg = self._capture(
            ["--header", "A:1", "alpha", "--header", "B:2"],
            make_command,
        )

        assert cfg.headers == ("X-Rc:0", "A:1", "B:2")

    def test_sub_level_flag_not_reset_by_subcommand(self, make_command) -> None:
        cfg = self._capture(["--auth-token", "t", "alpha"], make_command)
        assert cfg.auth == TokenAuth("t")

    def test_log_level_flag(self, make_command) -> None:
        cfg = self._capture(["alpha", "--log-level", "DEBUG"], make_command)
        assert cfg.log_level is LogLevel.DEBUG

    def test_unknown_log_level(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = _run(["--log-level", "chatty", "alpha"], make_command("alpha", MagicMock()))
        assert code == exit_codes.GENERAL_ERROR
        assert "Unknown log level: chatty" in capsys.readouterr().err

    @pytest.mark.parametrize("flag", ["--quiet", "--silent"])
    def test_quiet_mode_enabled(self, flag: str, make_command) -> None:
        seen = []
        _run(["alpha", flag], make_command("alpha", lambda args: seen.append(is_quiet_mode())))
        assert seen == [True]

    def test_quiet_mode_off_by_default(self, make_command) -> None:
        seen = []
        _run(["alpha"], make_command("alpha", lambda args: seen.append(is_quiet_mode())))
        assert seen == [False]


# ---------------------------------------------------------------------------
# Update nagger
# ---------------------------------------------------------------------------

class TestNagger:
    @patch("gsoc2_cli.cli.app.run_update_nagger")
    def test_runs_after_naggable_command(self, nagger: MagicMock, make_command) -> None:
        _run(["alpha"], make_command("alpha", MagicMock(return_value=None)), naggable=True)
        nagger.assert_called_once()

    @patch("gsoc2_cli.cli.app.run_update_nagger")
    def test_skipped_for_non_naggable_command(self, nagger: MagicMock, make_command) -> None:
        _run(["alpha"], make_command("alpha", MagicMock(return_value=None)), naggable=False)
        nagger.assert_not_called()

    @pytest.mark.parametrize(
        "execute",
        [_failing, lambda args: SilentExit(2)],
        ids=["raises", "silent-exit"],
    )
    @patch("gsoc2_cli.cli.app.run_update_nagger")
    def test_runs_after_failing_naggable_command(
        self,
        nagger: MagicMock,
        execute,
        make_command,
    ) -> None:
        code = _run(["alpha"], make_command("alpha", execute), naggable=True)

        assert code != exit_codes.SUCCESS
        nagger.assert_called_once()

    @patch("gsoc2_cli.cli.app.run_update_nagger")
    def test_skipped_for_failing_non_naggable_command(
        self,
        nagger: MagicMock,
        make_command,
    ) -> None:
        code = _run(["alpha"], make_command("alpha", _failing), naggable=False)

        assert code == exit_codes.GENERAL_ERROR
        nagger.assert_not_called()

    def test_error_printed_before_update_notice(
        self,
        make_command,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        def nag() -> None:
            sys.stderr.write("update available\n")

        with patch("gsoc2_cli.cli.app.run_update_nagger", side_effect=nag):
            _run(["alpha"], make_command("alpha", _failing), naggable=True)

        err = capsys.readouterr().err
        assert err.index("error: upload failed") < err.index("update available")
        assert err.count("error: upload failed") == 1

    @patch("gsoc2_cli.cli.app.run_update_nagger")
    def test_skipped_for_completions(self, nagger: MagicMock, make_command) -> None:
        _run(["completions", "bash"], make_command("alpha", MagicMock()), naggable=True)
        nagger.assert_not_called()


# ---------------------------------------------------------------------------
# Hooks, built-ins and shutdown
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_consumed_hook_skips_parsing(self, make_command) -> None:
        hook = MagicMock()
        hook.try_consume.return_value = True
        execute = MagicMock(return_value=None)
        descriptors = _descriptors(make_command("alpha", execute))

        code = main(["--not-a-flag"], descriptors=descriptors, hook=hook)

        assert code == exit_codes.SUCCESS
        execute.assert_not_called()
        assert not config.is_bound()

    @patch("gsoc2_cli.cli.hooks.subprocess.run")
    def test_default_hook_forwards_explicit_argv(
        self,
        run: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("gsoc2_cli.cli.hooks.sys.platform", "darwin")
        monkeypatch.setattr("gsoc2_cli.cli.hooks.sys.argv", ["gsoc2-cli", "unrelated"])
        monkeypatch.setenv(XCODE_WRAP_MARKER, "1")
        run.return_value = MagicMock(returncode=0)
        packager_args = ["bundle", "--bundle-output", "/build/main.jsbundle"]

        code = main(packager_args, descriptors=())

        assert code == exit_codes.SUCCESS
        assert run.call_args.args[0][1:4] == packager_args

    def test_help_exits_zero(self, make_command, capsys: pytest.CaptureFixture[str]) -> None:
        modules = (
            make_command("alpha", MagicMock()),
            make_command("secret", MagicMock(), hidden=True),
        )
        with pytest.raises(SystemExit) as exc_info:
            _run(["--help"], *modules)

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "alpha" in out
        assert "secret" not in out

    def test_hidden_command_still_dispatches(self, make_command) -> None:
        execute = MagicMock(return_value=None)
        assert _run(["secret"], make_command("secret", execute, hidden=True)) == 0
        execute.assert_called_once()

    def test_version_exits_zero(self, make_command, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run(["--version"], make_command("alpha", MagicMock()))
        assert exc_info.value.code == 0
        assert "gsoc2-cli" in capsys.readouterr().out

    def test_completions_builtin(self, make_command, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run(["completions", "bash"], make_command("alpha", MagicMock()))

        assert code == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "complete -F _gsoc2_cli gsoc2-cli" in out
        assert "alpha" in out

    def test_pool_disposed_after_command(self, make_command) -> None:
        with patch.object(Api, "dispose_pool") as dispose:
            _run(["alpha"], make_command("alpha", MagicMock(return_value=None)))
        dispose.assert_called_once()

    def test_pool_disposed_after_failure(self, make_command) -> None:
        with patch.object(Api, "dispose_pool") as dispose:
            _run(["alpha"], make_command("alpha", _failing))
        dispose.assert_called_once()

    def test_pool_disposed_on_duplicate_abort(self, make_command) -> None:
        modules = (make_command("alpha", MagicMock()), make_command("alpha", MagicMock()))
        with patch.object(Api, "dispose_pool") as dispose:
            with pytest.raises(DuplicateCommandError):
                _run(["alpha"], *modules)
        dispose.assert_called_once()

    def test_pool_disposed_after_consumed_hook(self) -> None:
        hook = MagicMock()
        hook.try_consume.return_value = True
        with patch.object(Api, "dispose_pool") as dispose:
            main([], descriptors=(), hook=hook)
        dispose.assert_called_once()


class TestScriptBoundary:
    @patch("gsoc2_cli.cli.app.main", side_effect=KeyboardInterrupt)
    def test_keyboard_interrupt_exits_130(self, _main: MagicMock) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.KEYBOARD_INTERRUPT

    @patch("gsoc2_cli.cli.app.main", return_value=4)
    def test_exit_code_forwarded(self, _main: MagicMock) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == 4
