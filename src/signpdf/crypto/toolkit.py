# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Default cryptographic toolkit.

``asn1crypto`` builds and parses the CMS, X.509 and PKCS#12 structures;
``cryptography`` decrypts PKCS#12 containers and performs the public-key
operations.
"""

from __future__ import annotations

__all__ = ["DefaultCryptoToolkit", "resolve_hash_algo"]

import hashlib
import logging
from datetime import timezone
from typing import TYPE_CHECKING, Any

from asn1crypto import algos as asn1_algos
from asn1crypto import cms as asn1_cms
from asn1crypto import core as asn1_core
from asn1crypto import pkcs12 as asn1_pkcs12
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from ..core.pdf.asn1 import encode_set, retag_as_set
from ..errors import InputError
from .keys import sign_with_key, signature_algorithm_name, verify_with_public_key
from .protocol import ParsedSignedData, Pkcs12Bundle, SignedAttributeValues

if TYPE_CHECKING:
    from datetime import datetime

_logger = logging.getLogger(__name__)

# Signing times outside this range must be GeneralizedTime.
_UTC_TIME_FIRST_YEAR = 1950
_UTC_TIME_LAST_YEAR = 2049

# Map non-standard CMS digest algorithm identifiers to hashlib names.
# Some signers put the combined signature algorithm in digestAlgorithm.
_DIGEST_ALGO_MAP: dict[str, str] = {
    "sha1_rsa": "sha1",
    "sha256_rsa": "sha256",
    "sha384_rsa": "sha384",
    "sha512_rsa": "sha512",
    "1.2.840.113549.1.1.5": "sha1",  # sha1WithRSAEncryption OID
    "1.2.840.113549.1.1.11": "sha256",  # sha256WithRSAEncryption OID
    "1.2.840.113549.1.1.12": "sha384",  # sha384WithRSAEncryption OID
    "1.2.840.113549.1.1.13": "sha512",  # sha512WithRSAEncryption OID
}


def resolve_hash_algo(algo_raw: str) -> str | None:
    """Resolve a CMS digest algorithm identifier to a hashlib-compatible name.

    Args:
        algo_raw: Algorithm name or OID from asn1crypto (.native or .dotted).

    Returns:
        hashlib algorithm name, or None if unrecognized.
    """
    if algo_raw in hashlib.algorithms_available:
        return algo_raw
    return _DIGEST_ALGO_MAP.get(algo_raw)


def _to_asn1_certificate(certificate: x509.Certificate) -> asn1_x509.Certificate:
    return asn1_x509.Certificate.load(certificate.public_bytes(serialization.Encoding.DER))


def _signing_time_value(signing_time: datetime) -> asn1_cms.Time:
    """UTCTime for 1950-2049, GeneralizedTime otherwise (RFC 5652 §11.3)."""
    if signing_time.tzinfo is None:
        signing_time = signing_time.replace(tzinfo=timezone.utc)
    if _UTC_TIME_FIRST_YEAR <= signing_time.astimezone(timezone.utc).year <= _UTC_TIME_LAST_YEAR:
        return asn1_cms.Time({"utc_time": asn1_core.UTCTime(signing_time)})
    return asn1_cms.Time({"generalized_time": asn1_core.GeneralizedTime(signing_time)})


def _ordered_attribute_set(attributes: list[asn1_cms.CMSAttribute]) -> asn1_cms.CMSAttributes:
    """Load a CMSAttributes from members encoded in the given order.

    A loaded value keeps its bytes on dump; a constructed one is
    DER-sorted.
    """
    return asn1_cms.CMSAttributes.load(encode_set([attr.dump() for attr in attributes]))


def _find_signer_certificate(
    signer_info: asn1_cms.SignerInfo, certificates: list[asn1_x509.Certificate]
) -> asn1_x509.Certificate:
    """Pick the certificate named by the SignerInfo sid, else the first one."""
    sid = signer_info["sid"]
    for cert in certificates:
        if sid.name == "issuer_and_serial_number":
            chosen = sid.chosen
            if (
                cert.serial_number == chosen["serial_number"].native
                and cert.issuer == chosen["issuer"]
            ):
                return cert
        elif sid.name == "subject_key_identifier" and cert.key_identifier == sid.chosen.native:
            return cert
    _logger.debug("No certificate matches the signer identifier; using the first one")
    return certificates[0]


class DefaultCryptoToolkit:
    """CryptoToolkit backed by asn1crypto and cryptography."""

    def parse_pkcs12(self, container: bytes, strict: bool, passphrase: str) -> Pkcs12Bundle:
        try:
            pfx = asn1_pkcs12.Pfx.load(container, strict=strict)
            if strict:
                # Forces a full structural parse; lenient mode defers it.
                pfx.native  # noqa: B018
        except ValueError as e:
            raise InputError(f"Failed to parse PKCS#12 container: {e}") from e

        password = passphrase.encode("utf-8") if passphrase else None
        try:
            p12 = pkcs12.load_pkcs12(container, password)
        except (ValueError, TypeError) as e:
            raise InputError(f"Failed to decrypt PKCS#12 container: {e}") from e

        bundle = Pkcs12Bundle()
        if p12.cert is not None:
            bundle.certificates.append(p12.cert.certificate)
        bundle.certificates.extend(c.certificate for c in p12.additional_certs)
        if p12.key is not None:
            bundle.private_keys.append(p12.key)
        _logger.debug(
            "PKCS#12: %d certificate(s), %d key(s)",
            len(bundle.certificates),
            len(bundle.private_keys),
        )
        return bundle

    def build_detached_signed_data(
        self,
        content: bytes,
        certificate: x509.Certificate,
        private_key: Any,
        digest_algorithm: str,
        attributes: SignedAttributeValues,
        extra_certificates: list[x509.Certificate],
    ) -> bytes:
        # The piece of data actually signed is the SET of signed attributes,
        # in the order content-type, message-digest, signing-time.
        signed_attrs = _ordered_attribute_set(
            [
                asn1_cms.CMSAttribute(
                    {"type": "content_type", "values": [attributes.content_type]}
                ),
                asn1_cms.CMSAttribute(
                    {
                        "type": "message_digest",
                        "values": [self.compute_digest(digest_algorithm, content)],
                    }
                ),
                asn1_cms.CMSAttribute(
                    {
                        "type": "signing_time",
                        "values": [_signing_time_value(attributes.signing_time)],
                    }
                ),
            ]
        )
        signature = sign_with_key(private_key, signed_attrs.dump(), digest_algorithm)

        signer_cert = _to_asn1_certificate(certificate)
        digest_algorithm_obj = asn1_algos.DigestAlgorithm({"algorithm": digest_algorithm})
        signer_info = asn1_cms.SignerInfo(
            {
                "version": "v1",
                "sid": asn1_cms.SignerIdentifier(
                    {
                        "issuer_and_serial_number": asn1_cms.IssuerAndSerialNumber(
                            {
                                "issuer": signer_cert.issuer,
                                "serial_number": signer_cert.serial_number,
                            }
                        )
                    }
                ),
                "digest_algorithm": digest_algorithm_obj,
                "signed_attrs": signed_attrs,
                "signature_algorithm": asn1_algos.SignedDigestAlgorithm(
                    {"algorithm": signature_algorithm_name(private_key, digest_algorithm)}
                ),
                "signature": signature,
            }
        )

        certificates: list[asn1_x509.Certificate] = []
        seen: set[bytes] = set()
        for cert in [*extra_certificates, certificate]:
            der = cert.public_bytes(serialization.Encoding.DER)
            if der not in seen:
                seen.add(der)
                certificates.append(asn1_x509.Certificate.load(der))

        signed_data = asn1_cms.SignedData(
            {
                "version": "v1",
                "digest_algorithms": [digest_algorithm_obj],
                "encap_content_info": {"content_type": "data"},
                "certificates": certificates,
                "signer_infos": [signer_info],
            }
        )
        return asn1_cms.ContentInfo(
            {"content_type": "signed_data", "content": signed_data}
        ).dump()

    def parse_signed_data(self, der: bytes) -> ParsedSignedData:
        content_info = asn1_cms.ContentInfo.load(der)
        if content_info["content_type"].native != "signed_data":
            raise ValueError(f"Expected SignedData, got {content_info['content_type'].native}")
        signed_data = content_info["content"]

        signer_infos = signed_data["signer_infos"]
        if not len(signer_infos):
            raise ValueError("SignedData has no SignerInfo")
        signer_info = signer_infos[0]

        certificates = [c.chosen for c in signed_data["certificates"] if c.name == "certificate"]
        if not certificates:
            raise ValueError("SignedData carries no certificate")

        algo_id = signer_info["digest_algorithm"]["algorithm"]
        digest_algorithm = resolve_hash_algo(algo_id.native) or resolve_hash_algo(algo_id.dotted)
        if digest_algorithm is None:
            raise ValueError(f"Unrecognized digest algorithm: {algo_id.dotted}")

        signed_attrs = signer_info["signed_attrs"]
        if not len(signed_attrs):
            raise ValueError("SignerInfo has no authenticated attributes")

        return ParsedSignedData(
            certificates=certificates,
            signer_certificate=_find_signer_certificate(signer_info, certificates),
            digest_algorithm=digest_algorithm,
            signature=signer_info["signature"].native,
            authenticated_attributes=signed_attrs,
        )

    def der_encode_attribute_set(self, attributes: asn1_cms.CMSAttributes) -> bytes:
        # The parsed value keeps its original encoding, under the implicit [0] tag.
        return retag_as_set(attributes.dump())

    def compute_digest(self, algorithm: str, data: bytes) -> bytes:
        return hashlib.new(algorithm, data).digest()

    def verify_signature(
        self, algorithm: str, certificate_pem: bytes, signature: bytes, signed_bytes: bytes
    ) -> bool:
        cert = x509.load_pem_x509_certificate(certificate_pem)
        try:
            verify_with_public_key(cert.public_key(), signature, signed_bytes, algorithm)
        except InvalidSignature:
            return False
        return True
