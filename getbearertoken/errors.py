"""Exit codes and the exception taxonomy for getbearertoken."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per failure category."""

    SUCCESS = 0
    AUTH_CONFIG = 2
    AUTH_TOKEN = 3
    INVALID_ARGUMENT = 4
    CERTIFICATE_NOT_FOUND = 5
    CERTIFICATE_DECODE = 6
    ARGUMENT_CONFLICT = 7
    OUTPUT_WRITE = 8


class GetBearerTokenError(Exception):
    """Base class for every terminal error raised by the tool."""

    exit_code: ExitCode = ExitCode.INVALID_ARGUMENT


class ArgumentError(GetBearerTokenError):
    """Raised when flags are missing or cannot be parsed."""

    exit_code = ExitCode.INVALID_ARGUMENT


class ArgumentConflictError(ArgumentError):
    """Raised when mutually exclusive flags are combined."""

    exit_code = ExitCode.ARGUMENT_CONFLICT


class CertificateNotFoundError(GetBearerTokenError):
    """Raised when the certificate file is missing or unreadable."""

    exit_code = ExitCode.CERTIFICATE_NOT_FOUND


class CertificateDecodeError(GetBearerTokenError):
    """Raised when the PFX container cannot be decoded."""

    exit_code = ExitCode.CERTIFICATE_DECODE


class AuthConfigError(GetBearerTokenError):
    """Raised when the credential object cannot be constructed."""

    exit_code = ExitCode.AUTH_CONFIG


class AuthTokenError(GetBearerTokenError):
    """Raised when the identity provider does not return a token."""

    exit_code = ExitCode.AUTH_TOKEN


class OutputWriteError(GetBearerTokenError):
    """Raised when the token file cannot be written."""

    exit_code = ExitCode.OUTPUT_WRITE
