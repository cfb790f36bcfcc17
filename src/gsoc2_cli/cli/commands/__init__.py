"""Subcommand implementations.

Each module exposes ``ABOUT``, ``add_arguments(parser)`` and
``execute(args)`` and is registered in :mod:`gsoc2_cli.cli.registry`.
"""
