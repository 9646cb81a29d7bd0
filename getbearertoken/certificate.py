"""Reading and decoding PFX (PKCS#12) client certificates."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)

from .errors import CertificateDecodeError, CertificateNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class DecodedCertificate:
    """Private key and certificates extracted from a PFX container."""

    private_key: Any = field(repr=False)
    certificate: x509.Certificate
    additional_certificates: List[x509.Certificate] = field(default_factory=list)

    @property
    def thumbprint(self) -> str:
        """SHA-1 thumbprint as hex, the certificate identifier Entra ID expects."""

        return self.certificate.fingerprint(hashes.SHA1()).hex()

    def private_key_pem(self) -> str:
        # The unencrypted key only ever lives in memory for the MSAL assertion.
        return self.private_key.private_bytes(
            Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
        ).decode("ascii")

    def chain_pem(self) -> str:
        """Leaf certificate followed by any additional certificates, as PEM."""

        certificates = [self.certificate] + list(self.additional_certificates)
        return "".join(
            cert.public_bytes(Encoding.PEM).decode("ascii") for cert in certificates
        )


def read_certificate_file(path: str) -> bytes:
    """Return the raw bytes of the certificate file at ``path``."""

    logger.info("Checking if certificate file exists...")
    if not os.path.isfile(path):
        raise CertificateNotFoundError(f"certificate file {path}, not found")

    logger.info("Reading the certificate file...")
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise CertificateNotFoundError(
            f"failed to read the certificate file ({path}): {exc}"
        ) from exc


def decode_pfx(data: bytes, password: str) -> DecodedCertificate:
    """Decode PFX bytes into a private key and certificate chain."""

    logger.info("Decoding the PFX to get the certificate and private key...")
    try:
        private_key, certificate, additional = pkcs12.load_key_and_certificates(
            data, password.encode("utf-8") if password else None
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CertificateDecodeError(
            f"failed to decode PKCS#12 certificate: {exc}"
        ) from exc

    if private_key is None:
        raise CertificateDecodeError("the PKCS#12 container holds no private key")
    if certificate is None:
        raise CertificateDecodeError("the PKCS#12 container holds no certificate")

    decoded = DecodedCertificate(
        private_key=private_key,
        certificate=certificate,
        additional_certificates=list(additional or []),
    )
    logger.debug(
        "Decoded certificate %s (thumbprint %s, %d additional certificates)",
        certificate.subject.rfc4514_string(),
        decoded.thumbprint,
        len(decoded.additional_certificates),
    )
    return decoded


def load_certificate(path: str, password: str) -> DecodedCertificate:
    """Read and decode the PFX file at ``path``."""

    return decode_pfx(read_certificate_file(path), password)
