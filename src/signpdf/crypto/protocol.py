"""
Cryptographic toolkit protocol.

Defines the primitives the signing and verification pipelines need.
The pipelines depend on this protocol, not on the concrete toolkit, so
they can run against fixture implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from asn1crypto import cms as asn1_cms
    from asn1crypto import x509 as asn1_x509
    from cryptography import x509


@dataclass
class Pkcs12Bundle:
    """Certificates and private keys recovered from a PKCS#12 container.

    ``certificates`` keeps container bag order: the certificate bound to
    the key first, then the additional certificates.
    """

    certificates: list[x509.Certificate] = field(default_factory=list)
    private_keys: list[Any] = field(default_factory=list)


@dataclass
class ParsedSignedData:
    """The parts of a PKCS#7 SignedData message needed for verification."""

    certificates: list[asn1_x509.Certificate]
    signer_certificate: asn1_x509.Certificate
    digest_algorithm: str
    signature: bytes
    authenticated_attributes: asn1_cms.CMSAttributes


@dataclass(frozen=True)
class SignedAttributeValues:
    """Values for the authenticated attributes of a new signature.

    The message digest is not listed: it is computed over the content
    when the signature is built.
    """

    signing_time: datetime
    content_type: str = "data"


class CryptoToolkit(Protocol):
    """Protocol for the ASN.1, PKCS#7, and PKCS#12 primitives."""

    def parse_pkcs12(self, container: bytes, strict: bool, passphrase: str) -> Pkcs12Bundle:
        """
        Decode a PKCS#12 container.

        Raises:
            InputError: If the container cannot be parsed or decrypted.
        """
        ...

    def build_detached_signed_data(
        self,
        content: bytes,
        certificate: x509.Certificate,
        private_key: Any,
        digest_algorithm: str,
        attributes: SignedAttributeValues,
        extra_certificates: list[x509.Certificate],
    ) -> bytes:
        """
        Build a detached SignedData over *content* and return it DER-encoded.

        The signed attributes are content-type, message-digest (of
        *content* with *digest_algorithm*) and signing-time.
        """
        ...

    def parse_signed_data(self, der: bytes) -> ParsedSignedData:
        """
        Parse a DER ContentInfo holding SignedData.

        Raises:
            ValueError: If the structure is not a usable SignedData.
        """
        ...

    def der_encode_attribute_set(self, attributes: asn1_cms.CMSAttributes) -> bytes:
        """Encode captured attributes as the universal SET that was signed."""
        ...

    def compute_digest(self, algorithm: str, data: bytes) -> bytes:
        """Digest *data* with a hashlib algorithm name."""
        ...

    def verify_signature(
        self, algorithm: str, certificate_pem: bytes, signature: bytes, signed_bytes: bytes
    ) -> bool:
        """Check *signature* over *signed_bytes* with the certificate's public key."""
        ...
