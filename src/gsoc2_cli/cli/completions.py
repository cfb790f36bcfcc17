"""Shell completion scripts generated from the argument-parser tree.

Outputs a completion script for the requested shell to stdout.  Users
install it by sourcing it or placing it in the shell's completion
directory::

    eval "$(gsoc2-cli completions bash)"
    gsoc2-cli completions fish > ~/.config/fish/completions/gsoc2-cli.fish
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandWords:
    """Completion words of one subcommand."""

    name: str
    help: str
    options: tuple[str, ...]


def _options(parser: argparse.ArgumentParser) -> tuple[str, ...]:
    words: list[str] = []
    for action in parser._actions:
        if action.help == argparse.SUPPRESS:
            continue
        words.extend(opt for opt in action.option_strings if opt.startswith("--"))
    return tuple(words)


def _subparsers_action(parser: argparse.ArgumentParser) -> argparse._SubParsersAction | None:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return action
    return None


def collect_commands(parser: argparse.ArgumentParser) -> list[CommandWords]:
    """Return the visible subcommands of *parser* with their options."""
    action = _subparsers_action(parser)
    if action is None:
        return []
    commands = []
    for choice in action._choices_actions:
        child = action.choices[choice.dest]
        commands.append(CommandWords(choice.dest, choice.help or "", _options(child)))
    return commands


def _bash(prog: str, root_options: tuple[str, ...], commands: list[CommandWords]) -> str:
    func = "_" + prog.replace("-", "_")
    names = " ".join(cmd.name for cmd in commands)
    pattern = "|".join(cmd.name for cmd in commands) or "__none__"
    root_words = " ".join(root_options)
    cases = "\n".join(
        '        {})\n            COMPREPLY=($(compgen -W "{}" -- "$cur"))\n            ;;'.format(
            cmd.name, " ".join(cmd.options)
        )
        for cmd in commands
    )
    return f"""\
# Bash completion for {prog}
# Add to ~/.bashrc: eval "$({prog} completions bash)"
{func}() {{
    local cur cmd word
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    cmd=""
    for word in "${{COMP_WORDS[@]:1:COMP_CWORD-1}}"; do
        case "$word" in
            {pattern})
                cmd="$word"
                break
                ;;
        esac
    done

    case "$cmd" in
{cases}
        *)
            COMPREPLY=($(compgen -W "{root_words} {names}" -- "$cur"))
            ;;
    esac
}}
complete -F {func} {prog}
"""


def _zsh(prog: str, root_options: tuple[str, ...], commands: list[CommandWords]) -> str:
    func = "_" + prog.replace("-", "_")
    command_lines = "\n        ".join(
        "'{}:{}'".format(cmd.name, cmd.help.replace("'", "'\\''").replace(":", "\\:"))
        for cmd in commands
    )
    option_cases = "\n".join(
        f"        {cmd.name})\n            _values 'options' {' '.join(repr(o) for o in cmd.options)}\n            ;;"
        for cmd in commands
        if cmd.options
    )
    return f"""\
#compdef {prog}
# Zsh completion for {prog}
# Add to ~/.zshrc: eval "$({prog} completions zsh)"

{func}() {{
    local -a commands
    commands=(
        {command_lines}
    )

    if (( CURRENT == 2 )); then
        _describe 'command' commands
        _values 'options' {' '.join(repr(o) for o in root_options)}
        return
    fi

    case "$words[2]" in
{option_cases}
    esac
}}

compdef {func} {prog}
"""


def _fish(prog: str, root_options: tuple[str, ...], commands: list[CommandWords]) -> str:
    lines = [
        f"# Fish completion for {prog}",
        f"# Add to ~/.config/fish/completions/{prog}.fish",
        f"complete -c {prog} -f",
    ]
    for option in root_options:
        lines.append(f"complete -c {prog} -n '__fish_use_subcommand' -l {option[2:]}")
    for cmd in commands:
        description = cmd.help.replace("'", "\\'")
        lines.append(
            f"complete -c {prog} -n '__fish_use_subcommand' -a {cmd.name} -d '{description}'"
        )
        for option in cmd.options:
            lines.append(
                f"complete -c {prog} -n '__fish_seen_subcommand_from {cmd.name}' -l {option[2:]}"
            )
    return "\n".join(lines) + "\n"


_GENERATORS = {
    "bash": _bash,
    "zsh": _zsh,
    "fish": _fish,
}


def generate(shell: str, parser: argparse.ArgumentParser) -> str:
    """Return the completion script for *shell* describing *parser*.

    Raises
    ------
    ValueError
        When *shell* is not supported.
    """
    try:
        generator = _GENERATORS[shell]
    except KeyError:
        raise ValueError(f"Unsupported shell: {shell}") from None
    return generator(parser.prog, _options(parser), collect_commands(parser))
