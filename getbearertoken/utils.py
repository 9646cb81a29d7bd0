"""Miscellaneous helpers for getbearertoken."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict

LOGGED_CLAIMS = ("aud", "appid", "tid", "exp")


def decode_jwt_without_verification(token: str) -> Dict[str, Any]:
    """Return the claims segment of a JWT. The signature is not checked."""

    segments = token.split(".")
    if len(segments) != 3:
        raise ValueError("Token is not a valid JWT")

    claims_segment = segments[1].encode("ascii")
    claims_segment += b"=" * (-len(claims_segment) % 4)
    claims = json.loads(base64.urlsafe_b64decode(claims_segment))
    if not isinstance(claims, dict):
        raise ValueError("JWT claims are not a JSON object")
    return claims


def token_claims_for_logging(token: str) -> Dict[str, Any]:
    """Return the non-secret claims worth showing in debug output."""

    claims = decode_jwt_without_verification(token)
    return {key: claims.get(key) for key in LOGGED_CLAIMS}
