"""Infrastructure layer: external system integration.

This layer wraps all interaction with the network (httpx), the
filesystem (rc files, update state) and the operating system.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~gsoc2_cli.exceptions.Gsoc2CliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from gsoc2_cli.infra.api import Api, Dsn
from gsoc2_cli.infra.install_detector import InstallMethod, InstallStatus, detect_install

__all__: list[str] = [
    "Api",
    "Dsn",
    "InstallMethod",
    "InstallStatus",
    "detect_install",
]
