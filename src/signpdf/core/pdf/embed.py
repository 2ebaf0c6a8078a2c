"""Insertion of the hex-encoded signature into the excised document."""

from __future__ import annotations

from ...errors import InputError


def pad_signature_hex(signature: bytes, placeholder_length: int) -> str:
    """Hex-encode *signature* and right-pad it with zero bytes to the capacity.

    Raises:
        InputError: If the hex form is longer than *placeholder_length*.
    """
    signature_hex = signature.hex()
    if len(signature_hex) > placeholder_length:
        raise InputError(
            f"Signature exceeds placeholder length: {len(signature_hex)} > {placeholder_length}"
        )
    return signature_hex + "0" * (placeholder_length - len(signature_hex))


def embed_signature(
    pdf_bytes: bytes, signature: bytes, placeholder_length: int, insert_at: int
) -> bytes:
    """Splice ``<hex>`` back into the document where the placeholder was removed.

    Args:
        pdf_bytes: The document with the hex field excised.
        signature: DER signature bytes.
        placeholder_length: Hex-character capacity of the reserved field.
        insert_at: Offset of the excised field (``ByteRange.len0``).

    Returns:
        The signed document, ``placeholder_length + 2`` bytes longer.
    """
    padded = pad_signature_hex(signature, placeholder_length)
    return pdf_bytes[:insert_at] + f"<{padded}>".encode("ascii") + pdf_bytes[insert_at:]
