"""Helpers for creating the MSAL client used by certificate authentication."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import msal
import requests

from .certificate import DecodedCertificate
from .config import InvocationParameters
from .errors import AuthConfigError, AuthTokenError

logger = logging.getLogger(__name__)

# Prefix of the ValueError msal raises when tenant discovery is rejected.
AUTHORITY_DISCOVERY_ERROR = "Unable to get authority configuration"


def build_client_credential(
    decoded: DecodedCertificate, send_certificate_chain: bool = False
) -> Dict[str, Any]:
    """Translate decoded PFX material into MSAL's ``client_credential`` dict."""

    credential = {
        "private_key": decoded.private_key_pem(),
        "thumbprint": decoded.thumbprint,
    }
    if send_certificate_chain:
        # MSAL sends the x5c header only when the public certificate is given.
        credential["public_certificate"] = decoded.chain_pem()
    return credential


def build_confidential_client(
    params: InvocationParameters,
    decoded: DecodedCertificate,
    http_client: Optional[Any] = None,
) -> msal.ConfidentialClientApplication:
    """Construct a ConfidentialClientApplication using certificate credentials.

    MSAL fetches the tenant's OpenID configuration while constructing the
    client. Failures of that request (network, timeout, unknown tenant) are
    token acquisition failures, not configuration errors.
    """

    logger.info("Creating ConfidentialClientApplication...")
    client_credential = build_client_credential(decoded, params.use_sni_auth)
    options: Dict[str, Any] = {}
    if http_client is not None:
        options["http_client"] = http_client
    try:
        return msal.ConfidentialClientApplication(
            client_id=params.application_id,
            authority=params.authority,
            client_credential=client_credential,
            timeout=params.timeout,
            **options,
        )
    except requests.exceptions.RequestException as exc:
        raise AuthTokenError(
            f"an error occurred getting the token: authority discovery failed: {exc}"
        ) from exc
    except ValueError as exc:
        if str(exc).startswith(AUTHORITY_DISCOVERY_ERROR):
            raise AuthTokenError(f"an error occurred getting the token: {exc}") from exc
        raise AuthConfigError(
            f"an error occurred creating ConfidentialClientApplication: {exc}"
        ) from exc
    except Exception as exc:  # noqa: BLE001 - MSAL raises plain exceptions for bad config
        raise AuthConfigError(
            f"an error occurred creating ConfidentialClientApplication: {exc}"
        ) from exc
