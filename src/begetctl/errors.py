"""Error taxonomy shared by every layer of begetctl.

Each error class maps to exactly one :class:`~begetctl.exit_codes.ExitCode`.
Lower layers raise these errors and let them propagate; the CLI renders each
one once on the diagnostic channel and exits with the associated code.
"""
from __future__ import annotations

from enum import StrEnum

from .exit_codes import ExitCode


class ErrorKind(StrEnum):
    """Classification reported alongside every failure."""

    USAGE = "usage"
    AUTH = "auth"
    CONFIG = "config"
    API_METHOD = "api_method"
    API_PROTOCOL = "api_protocol"
    NETWORK = "network"
    INTERRUPTED = "interrupted"
    UNEXPECTED = "unexpected"


class BegetError(RuntimeError):
    """Base class for all user-visible begetctl failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    exit_code: ExitCode = ExitCode.GENERIC

    def __init__(
        self,
        message: str,
        *,
        details: str | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.provider_code = provider_code

    def to_dict(self) -> dict[str, object]:
        """Return the structured diagnostic representation."""
        return {
            "error": self.message,
            "kind": str(self.kind),
            "code": self.provider_code,
            "details": self.details,
        }


class UsageError(BegetError):
    """Bad invocation, missing input, or a blocked/cancelled confirmation."""

    kind = ErrorKind.USAGE
    exit_code = ExitCode.USAGE


class AuthError(BegetError):
    """Credentials are missing after resolution or were rejected remotely."""

    kind = ErrorKind.AUTH
    exit_code = ExitCode.AUTH


class ConfigError(BegetError):
    """Local configuration could not be read, written, or referenced."""

    kind = ErrorKind.CONFIG
    exit_code = ExitCode.CONFIG


class ApiMethodError(BegetError):
    """The remote operation rejected the request."""

    kind = ErrorKind.API_METHOD
    exit_code = ExitCode.API


class ApiProtocolError(BegetError):
    """The remote endpoint answered with something other than the expected JSON."""

    kind = ErrorKind.API_PROTOCOL
    exit_code = ExitCode.API


class NetworkError(BegetError):
    """Timeout, transport failure, or a non-2xx HTTP status."""

    kind = ErrorKind.NETWORK
    exit_code = ExitCode.NETWORK


class AbortedError(BegetError):
    """The user interrupted the command (Ctrl+C or end of input at a prompt)."""

    kind = ErrorKind.INTERRUPTED
    exit_code = ExitCode.INTERRUPTED


_ERRORS_BY_KIND: dict[ErrorKind, type[BegetError]] = {
    ErrorKind.USAGE: UsageError,
    ErrorKind.AUTH: AuthError,
    ErrorKind.CONFIG: ConfigError,
    ErrorKind.API_METHOD: ApiMethodError,
    ErrorKind.API_PROTOCOL: ApiProtocolError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.INTERRUPTED: AbortedError,
    ErrorKind.UNEXPECTED: BegetError,
}


def error_for_kind(kind: ErrorKind) -> type[BegetError]:
    """Return the error class that represents *kind*."""
    return _ERRORS_BY_KIND[kind]


__all__ = [
    "AbortedError",
    "ApiMethodError",
    "ApiProtocolError",
    "AuthError",
    "BegetError",
    "ConfigError",
    "ErrorKind",
    "NetworkError",
    "UsageError",
    "error_for_kind",
]
