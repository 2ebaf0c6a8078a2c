# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Verification of embedded PDF signatures.

Re-checks the signature over the authenticated attributes, then
recomputes the content digest over the signed ByteRange spans.  Every
failure is reported in the result; nothing is raised.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, TypedDict

from asn1crypto import pem as asn1_pem

from ...errors import SignPdfError, VerificationError
from .. import ensure_bytes
from .. import require_pikepdf as _require_pikepdf
from ..cert_info import extract_cert_info
from .cms_extraction import extract_signature

if TYPE_CHECKING:
    from asn1crypto import cms as asn1_cms
    from asn1crypto import x509 as asn1_x509

    from ...crypto.protocol import CryptoToolkit

_logger = logging.getLogger(__name__)

# OID for messageDigest attribute in CMS SignerInfo
_OID_MESSAGE_DIGEST = "1.2.840.113549.1.9.4"

WRONG_AUTHENTICATED_ATTRIBUTES = "Wrong authenticated attributes"
WRONG_CONTENT_DIGEST = "Wrong content digest"
GENERIC_FAILURE = "couldn't verify file signature"


class VerificationResult(TypedDict):
    """Result of verifying the embedded signature."""

    verified: bool
    reason: str | None  # Set when verified is False
    details: list[str]  # Human-readable trail of the checks
    signer: dict[str, str | None] | None  # Certificate info (name, email, organization, dn)


def find_message_digest(attributes: asn1_cms.CMSAttributes) -> bytes:
    """Return the raw octets of the message-digest attribute.

    Raises:
        ValueError: If the attribute is missing or empty.
    """
    for attr in attributes:
        if attr["type"].dotted == _OID_MESSAGE_DIGEST:
            values = attr["values"]
            if len(values):
                return values[0].contents
    raise ValueError("Authenticated attributes carry no message digest")


def _signer_info(cert: asn1_x509.Certificate) -> dict[str, str | None] | None:
    try:
        return extract_cert_info(cert)
    except (ValueError, TypeError, KeyError, AttributeError):
        _logger.debug("Could not extract signer info", exc_info=True)
        return None


def _structure_detail(pdf_bytes: bytes) -> str:
    """Open the document with pikepdf (informational only)."""
    try:
        pikepdf = _require_pikepdf()
    except SignPdfError as e:
        _logger.warning("Skipping structural check: %s", e)
        return "pikepdf: unavailable -- structural check skipped"
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            return f"pikepdf: valid PDF, {len(pdf.pages)} page(s)"
    except (ValueError, RuntimeError, OSError, pikepdf.PdfError) as e:
        _logger.warning("pikepdf structural check failed (non-fatal): %s", e)
        return f"pikepdf: structural warning -- {e}"


def _check(
    pdf_bytes: bytes,
    toolkit: CryptoToolkit,
    details: list[str],
    signer_out: list[dict[str, str | None] | None],
) -> None:
    """Run both checks, raising VerificationError on a failed one."""
    # ── 1. Extract the signed spans and the signature ────────────
    signed_data, signature_der = extract_signature(pdf_bytes)
    details.append(f"ByteRange OK -- signed data: {len(signed_data)} bytes")
    details.append(f"Signature blob: {len(signature_der)} bytes")

    # ── 2. Parse the SignedData ──────────────────────────────────
    parsed = toolkit.parse_signed_data(signature_der)
    signer = _signer_info(parsed.signer_certificate)
    signer_out.append(signer)
    if signer and signer.get("name"):
        details.append(f"Signer: {signer['name']}")

    # ── 3. Signature over the authenticated attributes ───────────
    signed_attrs = toolkit.der_encode_attribute_set(parsed.authenticated_attributes)
    cert_pem = asn1_pem.armor("CERTIFICATE", parsed.signer_certificate.dump())
    if not toolkit.verify_signature(
        parsed.digest_algorithm, cert_pem, parsed.signature, signed_attrs
    ):
        raise VerificationError(WRONG_AUTHENTICATED_ATTRIBUTES)
    algo_upper = parsed.digest_algorithm.upper()
    details.append(f"Authenticated attributes OK -- {algo_upper} signature verifies")

    # ── 4. Content digest over the signed spans ──────────────────
    attr_digest = find_message_digest(parsed.authenticated_attributes)
    data_digest = toolkit.compute_digest(parsed.digest_algorithm, signed_data)
    if data_digest != attr_digest:
        details.append(
            f"Digest MISMATCH!\n"
            f"  ByteRange {algo_upper}:   {data_digest.hex()}\n"
            f"  Message digest:    {attr_digest.hex()}"
        )
        raise VerificationError(WRONG_CONTENT_DIGEST)
    details.append(f"Content digest OK -- {algo_upper}: {data_digest.hex()}")


def verify_signature(pdf_bytes: bytes, toolkit: CryptoToolkit) -> VerificationResult:
    """
    Verify the last embedded signature of a PDF.

    Checks:
    1. Authenticated attributes -- the signature value verifies against
       the DER SET of attributes with the embedded certificate's key.
    2. Content digest -- the digest of the ByteRange spans equals the
       message-digest attribute.

    Returns:
        VerificationResult; ``reason`` is "Wrong authenticated attributes",
        "Wrong content digest", the message of another recognized failure,
        or "couldn't verify file signature".
    """
    details: list[str] = []
    signer_out: list[dict[str, str | None] | None] = []

    try:
        pdf_bytes = ensure_bytes(pdf_bytes, "PDF expected as bytes.")
    except SignPdfError as e:
        return {"verified": False, "reason": str(e), "details": [str(e)], "signer": None}

    reason: str | None = None
    try:
        _check(pdf_bytes, toolkit, details, signer_out)
    except SignPdfError as e:
        reason = str(e)
    except Exception:  # noqa: BLE001 -- any parse failure becomes an unverified result
        _logger.debug("Signature verification failed unexpectedly", exc_info=True)
        reason = GENERIC_FAILURE

    if reason is not None:
        details.append(f"Verification failed: {reason}")
    details.append(_structure_detail(pdf_bytes))

    return {
        "verified": reason is None,
        "reason": reason,
        "details": details,
        "signer": signer_out[0] if signer_out else None,
    }
