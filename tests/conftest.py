"""Shared fixtures: throwaway PFX files built with ``cryptography``."""

from __future__ import annotations

import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    pkcs12,
)
from cryptography.x509.oid import NameOID

PFX_PASSWORD = "s3cret-pfx"
APPLICATION_ID = "11111111-2222-3333-4444-555555555555"
TENANT_ID = "66666666-7777-8888-9999-000000000000"
# header.payload.signature with payload {"aud": "https://management.core.windows.net/", "exp": 1700000000}
FAKE_JWT = (
    "eyJhbGciOiJub25lIn0."
    "eyJhdWQiOiJodHRwczovL21hbmFnZW1lbnQuY29yZS53aW5kb3dzLm5ldC8iLCJleHAiOjE3MDAwMDAwMDB9."
    "c2ln"
)


def _make_certificate(subject_name, key, issuer_name=None, issuer_key=None, ca=False):
    now = datetime.datetime.now(datetime.timezone.utc)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_name)])
    issuer = x509.Name(
        [x509.NameAttribute(NameOID.COMMON_NAME, issuer_name or subject_name)]
    )
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key or key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def ca_material():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key, _make_certificate("getbearertoken-test-ca", key, ca=True)


@pytest.fixture(scope="session")
def leaf_material(ca_material):
    ca_key, _ = ca_material
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    cert = _make_certificate(
        "getbearertoken-test", key, issuer_name="getbearertoken-test-ca", issuer_key=ca_key
    )
    return key, cert


@pytest.fixture(scope="session")
def pfx_bytes(leaf_material, ca_material):
    key, cert = leaf_material
    _, ca_cert = ca_material
    return pkcs12.serialize_key_and_certificates(
        b"getbearertoken-test",
        key,
        cert,
        [ca_cert],
        BestAvailableEncryption(PFX_PASSWORD.encode("utf-8")),
    )


@pytest.fixture()
def pfx_file(tmp_path: Path, pfx_bytes: bytes) -> Path:
    path = tmp_path / "spn.pfx"
    path.write_bytes(pfx_bytes)
    return path


@pytest.fixture()
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "token.txt"


@pytest.fixture()
def msal_app():
    app = MagicMock()
    app.acquire_token_for_client.return_value = {
        "access_token": FAKE_JWT,
        "expires_in": 3599,
        "token_type": "Bearer",
    }
    return app
