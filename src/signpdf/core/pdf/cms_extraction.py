"""ByteRange and signature extraction from signed PDFs."""

from __future__ import annotations

import re

from ...errors import ParseError
from .asn1 import extract_der_from_padded_hex
from .byterange import ByteRange

# Real (numeric) ByteRange arrays only -- placeholders never match.
BYTERANGE_PATTERN = rb"/ByteRange\s*\[\s*(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s*\]"


def find_byteranges(pdf_bytes: bytes) -> list[ByteRange]:
    """Return every numeric ByteRange in document order."""
    return [
        ByteRange(*(int(g) for g in m.groups())) for m in re.finditer(BYTERANGE_PATTERN, pdf_bytes)
    ]


def extract_signature_hex(pdf_bytes: bytes, byte_range: ByteRange) -> bytes:
    """Return the DER signature stored between the two signed spans.

    Raises:
        ParseError: If the brackets are not where the ByteRange says,
            or the hex does not hold a DER SEQUENCE.
    """
    hex_start = byte_range.len0 + 1  # first hex char, after "<"
    hex_end = byte_range.start1 - 1  # position of ">"

    if pdf_bytes[byte_range.len0 : hex_start] != b"<":
        raise ParseError(
            f"Expected '<' at offset {byte_range.len0}, "
            f"got {pdf_bytes[byte_range.len0 : hex_start]!r}"
        )
    if pdf_bytes[hex_end : byte_range.start1] != b">":
        raise ParseError(
            f"Expected '>' at offset {hex_end}, got {pdf_bytes[hex_end : byte_range.start1]!r}"
        )

    try:
        hex_str = pdf_bytes[hex_start:hex_end].decode("ascii").strip()
        return extract_der_from_padded_hex(hex_str)
    except ValueError as e:
        raise ParseError(f"Invalid hex in signature field: {e}") from e


def extract_signature_data(pdf_bytes: bytes, byte_range: ByteRange) -> tuple[bytes, bytes]:
    """Extract the signed bytes and the DER signature for one ByteRange.

    Returns:
        (signed_data, signature_der) -- the two spans concatenated, and the signature.

    Raises:
        ParseError: If the ByteRange is inconsistent with the document.
    """
    if byte_range.start0 != 0:
        raise ParseError(f"ByteRange offset1 should be 0, got {byte_range.start0}")
    if byte_range.len0 <= 0:
        raise ParseError(f"ByteRange len1 must be positive, got {byte_range.len0}")
    if byte_range.start1 <= byte_range.len0 + 1:
        raise ParseError(
            f"ByteRange offset2 ({byte_range.start1}) must lie after len1 ({byte_range.len0})"
        )
    end = byte_range.start1 + byte_range.len1
    if end > len(pdf_bytes):
        raise ParseError(
            f"ByteRange extends beyond EOF: {byte_range.start1}+{byte_range.len1} > {len(pdf_bytes)}"
        )

    signed_data = pdf_bytes[: byte_range.len0] + pdf_bytes[byte_range.start1 : end]
    signature_der = extract_signature_hex(pdf_bytes, byte_range)
    return signed_data, signature_der


def extract_signature(pdf_bytes: bytes) -> tuple[bytes, bytes]:
    """Extract the signed bytes and signature of the last signature in a PDF.

    Raises:
        ParseError: If the PDF has no usable embedded signature.
    """
    byte_ranges = find_byteranges(pdf_bytes)
    if not byte_ranges:
        raise ParseError("No /ByteRange found in PDF -- not a signed PDF?")
    return extract_signature_data(pdf_bytes, byte_ranges[-1])
