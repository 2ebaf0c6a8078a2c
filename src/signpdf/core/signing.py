"""
Signature construction -- certificate selection and detached PKCS#7 building.

All functions take a CryptoToolkit, so the pipeline is independent of the
library that implements ASN.1, PKCS#7, and PKCS#12.
"""

from __future__ import annotations

__all__ = [
    "SignOptions",
    "build_signature",
    "resolve_options",
    "select_signing_certificate",
]

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..constants import DEFAULT_DIGEST_ALGORITHM
from ..crypto.keys import key_matches_certificate
from ..crypto.protocol import SignedAttributeValues
from ..errors import InputError

if TYPE_CHECKING:
    from cryptography import x509

    from ..crypto.protocol import CryptoToolkit

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignOptions:
    """Options for :func:`build_signature` and :meth:`signpdf.SignPdf.sign`.

    Attributes:
        strict_parsing: Reject PKCS#12 containers with trailing or
            malformed ASN.1 instead of parsing leniently.
        passphrase: PKCS#12 passphrase; empty for unprotected containers.
        signing_time: Value of the signing-time attribute.
            If None, the current UTC time is used.
    """

    strict_parsing: bool = False
    passphrase: str = ""
    signing_time: datetime | None = None

    def __repr__(self) -> str:
        masked = "'***'" if self.passphrase else "''"
        return (
            f"SignOptions(strict_parsing={self.strict_parsing}, passphrase={masked}, "
            f"signing_time={self.signing_time!r})"
        )


_OPTIONS_FIELDS = frozenset(("strict_parsing", "passphrase", "signing_time"))


def resolve_options(options: SignOptions | None, kwargs: dict[str, object]) -> SignOptions:
    """Merge explicit keyword arguments into an options instance.

    Keyword arguments override the corresponding fields in *options*.
    Unknown keys raise TypeError.
    """
    unknown = set(kwargs) - _OPTIONS_FIELDS
    if unknown:
        raise TypeError(f"Unexpected keyword arguments: {', '.join(sorted(unknown))}")

    if options is None:
        options = SignOptions()
    if not kwargs:
        return options
    return replace(options, **kwargs)  # type: ignore[arg-type]


def select_signing_certificate(
    certificates: list[x509.Certificate], private_key: Any
) -> x509.Certificate:
    """Return the certificate whose public key belongs to *private_key*.

    Every certificate is checked in bag order and the last match wins.

    Raises:
        InputError: If no certificate matches.
    """
    selected: x509.Certificate | None = None
    for cert in certificates:
        if key_matches_certificate(private_key, cert.public_key()):
            selected = cert
    if selected is None:
        raise InputError("Failed to find a certificate that matches the private key.")
    return selected


def build_signature(
    content: bytes,
    container: bytes,
    options: SignOptions,
    toolkit: CryptoToolkit,
) -> bytes:
    """
    Build a detached PKCS#7 signature over *content*.

    Args:
        content: The document bytes with the signature field excised.
        container: PKCS#12 container holding the key and certificates.
        options: Parsing and attribute options.
        toolkit: Cryptographic primitives.

    Returns:
        DER-encoded ContentInfo with SignedData (SHA-256, detached).

    Raises:
        InputError: If the container is unusable or holds no certificate
            matching its private key.
    """
    bundle = toolkit.parse_pkcs12(container, options.strict_parsing, options.passphrase)
    if not bundle.private_keys:
        raise InputError("No private key found in the PKCS#12 container.")
    private_key = bundle.private_keys[0]

    certificate = select_signing_certificate(bundle.certificates, private_key)
    _logger.debug("Signing certificate: %s", certificate.subject.rfc4514_string())

    signing_time = options.signing_time or datetime.now(timezone.utc)
    der = toolkit.build_detached_signed_data(
        content,
        certificate,
        private_key,
        DEFAULT_DIGEST_ALGORITHM,
        SignedAttributeValues(signing_time=signing_time),
        bundle.certificates,
    )
    _logger.debug("Built SignedData: %d bytes over %d bytes of content", len(der), len(content))
    return der
