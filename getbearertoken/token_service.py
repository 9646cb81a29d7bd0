"""Token acquisition and persistence for getbearertoken."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from azure.core.exceptions import AzureError
from azure.identity import ManagedIdentityCredential

from .certificate import load_certificate
from .config import AuthMode, InvocationParameters
from .errors import AuthConfigError, AuthTokenError, OutputWriteError
from .msal_client import build_confidential_client
from .utils import token_claims_for_logging

logger = logging.getLogger(__name__)

TOKEN_FILE_MODE = 0o600


@dataclass
class BearerToken:
    """An access token and, when the SDK reports it, its expiry."""

    token: str = field(repr=False)
    expires_on: Optional[int] = None


def build_token(result: Dict[str, Any]) -> BearerToken:
    """Normalise an MSAL client-credentials response into a ``BearerToken``."""

    expires_on = None
    expires_in = result.get("expires_in")
    if expires_in is not None:
        try:
            expires_on = int(time.time()) + int(expires_in)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed expires_in value: %r", expires_in)
    return BearerToken(token=result["access_token"], expires_on=expires_on)


def acquire_certificate_token(params: InvocationParameters) -> BearerToken:
    """Exchange the PFX certificate for a token via the client-credentials flow."""

    decoded = load_certificate(params.certificate_path, params.pfx_password)
    app = build_confidential_client(params, decoded)

    logger.info("Getting the token...")
    try:
        result = app.acquire_token_for_client(scopes=params.scopes)
    except Exception as exc:  # noqa: BLE001 - network and signing errors surface here
        raise AuthTokenError(f"an error occurred getting the token: {exc}") from exc

    if not result:
        raise AuthTokenError("an error occurred getting the token: empty response")

    error = result.get("error")
    if error:
        description = result.get("error_description") or error
        raise AuthTokenError(f"an error occurred getting the token: {description}")

    if "access_token" not in result:
        raise AuthTokenError(
            "an error occurred getting the token: response holds no access token"
        )

    return build_token(result)


def acquire_managed_identity_token(params: InvocationParameters) -> BearerToken:
    """Request a token from the platform managed identity endpoint."""

    transport_options: Dict[str, Any] = {}
    if params.timeout is not None:
        transport_options["connection_timeout"] = params.timeout
        transport_options["read_timeout"] = params.timeout

    logger.info("Creating ManagedIdentityCredential...")
    try:
        credential = ManagedIdentityCredential(**transport_options)
    except (ValueError, AzureError) as exc:
        raise AuthConfigError(
            f"an error occurred creating ManagedIdentityCredential: {exc}"
        ) from exc

    logger.info("Getting the token...")
    with credential:
        try:
            access_token = credential.get_token(*params.scopes)
        except AzureError as exc:
            raise AuthTokenError(f"an error occurred getting the token: {exc}") from exc

    return BearerToken(token=access_token.token, expires_on=access_token.expires_on)


def resolve(params: InvocationParameters) -> BearerToken:
    """Produce a bearer token for ``params`` using the configured mode."""

    if params.mode is AuthMode.MANAGED_IDENTITY:
        token = acquire_managed_identity_token(params)
    else:
        token = acquire_certificate_token(params)

    if not token.token:
        raise AuthTokenError("the identity provider returned an empty token")

    if logger.isEnabledFor(logging.DEBUG):
        try:
            logger.debug("Token claims: %s", token_claims_for_logging(token.token))
        except ValueError as exc:
            logger.warning("Failed to decode access token for logging: %s", exc)
    if token.expires_on is not None:
        expiry = time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime(token.expires_on))
        logger.info("Token expires on %s", expiry)
    return token


def write_token_file(path: str, token: BearerToken) -> None:
    """Write the raw token to ``path``, readable and writable by the owner only."""

    logger.info("Writing the token to the output file %s ...", path)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, TOKEN_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            # An existing file keeps its old mode through O_CREAT.
            os.fchmod(handle.fileno(), TOKEN_FILE_MODE)
            handle.write(token.token)
    except OSError as exc:
        raise OutputWriteError(
            f"an error occurred writing the token to the file {path}: {exc}"
        ) from exc
