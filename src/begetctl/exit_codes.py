"""Enumerations for CLI exit codes."""
from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Well-known exit codes enforced across the CLI."""

    OK = 0
    GENERIC = 1
    USAGE = 2
    AUTH = 3
    API = 4
    CONFIG = 5
    NETWORK = 6
    INTERRUPTED = 130
