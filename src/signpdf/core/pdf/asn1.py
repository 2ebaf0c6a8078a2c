"""DER helpers for the signature field and the signed attribute SET."""

from __future__ import annotations

__all__ = [
    "ASN1_SEQUENCE_TAG",
    "ASN1_SET_TAG",
    "encode_length",
    "encode_set",
    "extract_der_from_padded_hex",
    "read_der_header",
    "retag_as_set",
]

ASN1_SEQUENCE_TAG = 0x30

# Universal constructed SET tag. Signed attributes are stored with an
# implicit [0] tag and signed with this one.
ASN1_SET_TAG = 0x31

# Upper bound for one embedded CMS blob (16 MB of DER).
_MAX_DER_BYTES = 16 * 1024 * 1024

# Long-form lengths with more octets than this are rejected.
_MAX_LENGTH_OCTETS = 4


def encode_length(length: int) -> bytes:
    """DER length octets for *length* (short form below 128)."""
    if length < 0x80:
        return bytes([length])
    octets = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(octets)]) + octets


def read_der_header(data: bytes) -> tuple[int, int]:
    """Return ``(header_size, content_size)`` of the DER value starting *data*.

    Raises:
        ValueError: On a truncated header, indefinite length, or a length
            field wider than four octets.
    """
    if len(data) < 2:
        raise ValueError("Data too short for ASN.1 TLV header")
    first = data[1]
    if first < 0x80:
        return 2, first
    if first == 0x80:
        raise ValueError("Indefinite length encoding is not valid in DER")

    n_octets = first & 0x7F
    if n_octets > _MAX_LENGTH_OCTETS:
        raise ValueError(f"ASN.1 length field too large: {n_octets} bytes")
    if len(data) < 2 + n_octets:
        raise ValueError("Data too short for ASN.1 length field")
    return 2 + n_octets, int.from_bytes(data[2 : 2 + n_octets], "big")


def extract_der_from_padded_hex(hex_str: str) -> bytes:
    """Recover the DER SEQUENCE from a zero-padded hex signature field.

    The size comes from the DER header rather than from stripping zeros,
    so a value ending in 0x00 is returned intact.

    Raises:
        ValueError: If the hex is invalid, not a SEQUENCE, or shorter
            than its header claims.
    """
    if len(hex_str) < 4:
        raise ValueError("Hex string too short for ASN.1 TLV header")
    head = bytes.fromhex(hex_str[: 2 * (2 + _MAX_LENGTH_OCTETS)])
    if head[0] != ASN1_SEQUENCE_TAG:
        raise ValueError(f"Expected ASN.1 SEQUENCE (0x30), got 0x{head[0]:02x}")

    header_size, content_size = read_der_header(head)
    total = header_size + content_size
    if total > _MAX_DER_BYTES:
        raise ValueError(f"ASN.1 claims {total} bytes, exceeds maximum ({_MAX_DER_BYTES} bytes)")
    if 2 * total > len(hex_str):
        raise ValueError(
            f"ASN.1 length ({total} bytes) exceeds available hex data ({len(hex_str) // 2} bytes)"
        )
    return bytes.fromhex(hex_str[: 2 * total])


def encode_set(members: list[bytes]) -> bytes:
    """Wrap already encoded members in a universal SET, keeping their order."""
    body = b"".join(members)
    return bytes([ASN1_SET_TAG]) + encode_length(len(body)) + body


def retag_as_set(der: bytes) -> bytes:
    """Replace the outer tag of an implicitly tagged SET OF with the universal SET tag."""
    if not der:
        raise ValueError("Cannot retag an empty DER value")
    return bytes([ASN1_SET_TAG]) + der[1:]
