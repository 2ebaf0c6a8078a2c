"""Tests for signpdf.core.pdf.verify -- decision logic against a stub toolkit."""

from __future__ import annotations

import hashlib
from unittest.mock import Mock, patch

import pytest
from asn1crypto import cms as asn1_cms
from asn1crypto import x509 as asn1_x509
from cryptography.hazmat.primitives import serialization

from signpdf.core.pdf import (
    GENERIC_FAILURE,
    WRONG_AUTHENTICATED_ATTRIBUTES,
    WRONG_CONTENT_DIGEST,
    extract_signature,
    verify_signature,
)
from signpdf.core.pdf.verify import find_message_digest
from signpdf.crypto import ParsedSignedData
from signpdf.errors import SignPdfError

from .conftest import FAKE_CMS, SIGNER_CN
from .test_pdf import _build_fake_signed_pdf


def _attributes(digest: bytes) -> asn1_cms.CMSAttributes:
    return asn1_cms.CMSAttributes(
        [
            asn1_cms.CMSAttribute({"type": "content_type", "values": ["data"]}),
            asn1_cms.CMSAttribute({"type": "message_digest", "values": [digest]}),
        ]
    )


@pytest.fixture
def fake_signed_pdf():
    return _build_fake_signed_pdf()


@pytest.fixture
def signer_asn1_cert(rsa_cert):
    return asn1_x509.Certificate.load(rsa_cert.public_bytes(serialization.Encoding.DER))


def _toolkit(signer_asn1_cert, digest: bytes, signature_ok: bool = True) -> Mock:
    toolkit = Mock()
    toolkit.parse_signed_data.return_value = ParsedSignedData(
        certificates=[signer_asn1_cert],
        signer_certificate=signer_asn1_cert,
        digest_algorithm="sha256",
        signature=b"sig",
        authenticated_attributes=_attributes(digest),
    )
    toolkit.der_encode_attribute_set.return_value = b"\x31attrs"
    toolkit.verify_signature.return_value = signature_ok
    toolkit.compute_digest.side_effect = lambda algo, data: hashlib.new(algo, data).digest()
    return toolkit


def _content_digest(pdf: bytes) -> bytes:
    signed_data, _ = extract_signature(pdf)
    return hashlib.sha256(signed_data).digest()


# ── find_message_digest ─────────────────────────────────────────────


def test_find_message_digest():
    assert find_message_digest(_attributes(b"\x01\x02")) == b"\x01\x02"


def test_find_message_digest_missing():
    attrs = asn1_cms.CMSAttributes(
        [asn1_cms.CMSAttribute({"type": "content_type", "values": ["data"]})]
    )
    with pytest.raises(ValueError, match="no message digest"):
        find_message_digest(attrs)


# ── verify_signature ────────────────────────────────────────────────


def test_verified(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, _content_digest(fake_signed_pdf))

    result = verify_signature(fake_signed_pdf, toolkit)

    assert result["verified"] is True
    assert result["reason"] is None
    assert result["signer"]["name"] == SIGNER_CN
    assert result["signer"]["organization"] == "Example Org"
    assert any("Content digest OK" in d for d in result["details"])
    toolkit.parse_signed_data.assert_called_once_with(FAKE_CMS)
    toolkit.der_encode_attribute_set.assert_called_once()

    algo, cert_pem, signature, signed_bytes = toolkit.verify_signature.call_args.args
    assert algo == "sha256"
    assert cert_pem.startswith(b"-----BEGIN CERTIFICATE-----")
    assert signature == b"sig"
    assert signed_bytes == b"\x31attrs"


def test_wrong_authenticated_attributes(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, _content_digest(fake_signed_pdf), signature_ok=False)

    result = verify_signature(fake_signed_pdf, toolkit)

    assert result["verified"] is False
    assert result["reason"] == WRONG_AUTHENTICATED_ATTRIBUTES
    toolkit.compute_digest.assert_not_called()


def test_wrong_content_digest(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, b"\x00" * 32)

    result = verify_signature(fake_signed_pdf, toolkit)

    assert result["verified"] is False
    assert result["reason"] == WRONG_CONTENT_DIGEST
    assert any("Digest MISMATCH" in d for d in result["details"])


def test_parse_failure_is_generic(fake_signed_pdf):
    toolkit = Mock()
    toolkit.parse_signed_data.side_effect = ValueError("bad asn1")

    result = verify_signature(fake_signed_pdf, toolkit)

    assert result["verified"] is False
    assert result["reason"] == GENERIC_FAILURE
    assert result["signer"] is None


def test_missing_digest_attribute_is_generic(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, b"")
    toolkit.parse_signed_data.return_value.authenticated_attributes = asn1_cms.CMSAttributes(
        [asn1_cms.CMSAttribute({"type": "content_type", "values": ["data"]})]
    )

    result = verify_signature(fake_signed_pdf, toolkit)

    assert result["reason"] == GENERIC_FAILURE


def test_unsigned_document_keeps_message():
    result = verify_signature(b"%PDF-1.4\n%%EOF", Mock())

    assert result["verified"] is False
    assert "No /ByteRange found" in result["reason"]


def test_non_bytes_input():
    result = verify_signature("not bytes", Mock())  # type: ignore[arg-type]

    assert result == {
        "verified": False,
        "reason": "PDF expected as bytes.",
        "details": ["PDF expected as bytes."],
        "signer": None,
    }


@pytest.mark.parametrize("garbage", [b"", b"\x00" * 64, b"/ByteRange [0 1 2 3]"])
def test_garbage_never_raises(garbage):
    result = verify_signature(garbage, Mock())
    assert result["verified"] is False
    assert result["reason"]


def test_bytearray_accepted(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, _content_digest(fake_signed_pdf))
    assert verify_signature(bytearray(fake_signed_pdf), toolkit)["verified"] is True


def test_missing_pikepdf_does_not_raise(fake_signed_pdf, signer_asn1_cert):
    toolkit = _toolkit(signer_asn1_cert, _content_digest(fake_signed_pdf))
    with patch(
        "signpdf.core.pdf.verify._require_pikepdf",
        side_effect=SignPdfError("pikepdf is required for this operation."),
    ):
        result = verify_signature(fake_signed_pdf, toolkit)

    assert result["verified"] is True
    assert result["details"][-1] == "pikepdf: unavailable -- structural check skipped"
