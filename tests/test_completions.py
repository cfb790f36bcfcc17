"""Tests for shell completion generation (cli/completions.py)."""

from __future__ import annotations

import argparse
from unittest.mock import MagicMock

import pytest

from gsoc2_cli.cli.completions import collect_commands, generate
from gsoc2_cli.cli.registry import build_parser
from gsoc2_cli.core.models import CommandDescriptor


@pytest.fixture()
def parser(make_command) -> argparse.ArgumentParser:
    def add_arguments(p: argparse.ArgumentParser) -> None:
        p.add_argument("--force", action="store_true", help="Do it anyway.")

    return build_parser(
        (
            CommandDescriptor.from_module(
                make_command("deploy", MagicMock(), add_arguments=add_arguments),
                naggable=False,
            ),
            CommandDescriptor.from_module(
                make_command("internal", MagicMock(), hidden=True),
                naggable=False,
            ),
        )
    )


class TestCollectCommands:
    def test_visible_commands_only(self, parser: argparse.ArgumentParser) -> None:
        names = [cmd.name for cmd in collect_commands(parser)]
        assert names == ["completions", "deploy"]

    def test_command_options(self, parser: argparse.ArgumentParser) -> None:
        deploy = next(cmd for cmd in collect_commands(parser) if cmd.name == "deploy")
        assert "--force" in deploy.options
        assert "--auth-token" in deploy.options
        assert "--allow-failure" not in deploy.options


class TestGenerate:
    @pytest.mark.parametrize("shell", ["bash", "zsh", "fish"])
    def test_mentions_visible_commands(self, parser: argparse.ArgumentParser, shell: str) -> None:
        script = generate(shell, parser)
        assert "deploy" in script
        assert "internal" not in script

    def test_bash_registers_function(self, parser: argparse.ArgumentParser) -> None:
        script = generate("bash", parser)
        assert "complete -F _gsoc2_cli gsoc2-cli" in script
        assert "--force" in script

    def test_zsh_header(self, parser: argparse.ArgumentParser) -> None:
        assert generate("zsh", parser).startswith("#compdef gsoc2-cli")

    def test_fish_subcommand_options(self, parser: argparse.ArgumentParser) -> None:
        script = generate("fish", parser)
        assert "complete -c gsoc2-cli -n '__fish_seen_subcommand_from deploy' -l force" in script

    def test_unsupported_shell(self, parser: argparse.ArgumentParser) -> None:
        with pytest.raises(ValueError):
            generate("powershell", parser)
