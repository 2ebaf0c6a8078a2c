"""Public signing and verification API.

:class:`SignPdf` runs the full pipeline::

    locate placeholder -> rewrite ByteRange -> excise field
        -> build PKCS#7 signature -> embed hex at the same offset

and its reverse for verification.  :func:`sign` and :func:`verify` are
one-shot wrappers that use a fresh instance per call.
"""

from __future__ import annotations

__all__ = ["SignPdf", "sign", "verify"]

import logging
from typing import TYPE_CHECKING

from .constants import DEFAULT_BYTE_RANGE_PLACEHOLDER
from .core import ensure_bytes
from .core.pdf import (
    compute_byterange,
    embed_signature,
    locate_placeholder,
    pad_signature_hex,
    remove_placeholder,
    remove_trailing_newline,
    rewrite_byterange,
    verify_signature,
)
from .core.signing import SignOptions, build_signature, resolve_options
from .crypto import DefaultCryptoToolkit

if TYPE_CHECKING:
    from .core.pdf import VerificationResult
    from .crypto import CryptoToolkit

_logger = logging.getLogger(__name__)


class SignPdf:
    """Signs prepared PDFs and verifies signed ones.

    Args:
        byte_range_placeholder: Sentinel used in the ``/ByteRange``
            placeholder of the documents this instance signs.
        toolkit: Cryptographic primitives; defaults to
            :class:`~signpdf.crypto.DefaultCryptoToolkit`.

    Attributes:
        last_signature: Hex of the most recent signature produced by this
            instance (without padding), for diagnostics.
    """

    def __init__(
        self,
        byte_range_placeholder: str = DEFAULT_BYTE_RANGE_PLACEHOLDER,
        toolkit: CryptoToolkit | None = None,
    ) -> None:
        self.byte_range_placeholder = byte_range_placeholder
        self.toolkit: CryptoToolkit = toolkit if toolkit is not None else DefaultCryptoToolkit()
        self.last_signature: str | None = None

    def sign(
        self,
        pdf_bytes: bytes,
        p12_bytes: bytes,
        options: SignOptions | None = None,
        **kwargs: object,
    ) -> bytes:
        """
        Sign a PDF that contains a signature placeholder.

        Args:
            pdf_bytes: PDF with ``/ByteRange [0 /p /p /p]`` and a
                ``/Contents <...>`` placeholder after it.
            p12_bytes: PKCS#12 container with the key and certificates.
            options: Signing options. Keyword arguments (strict_parsing,
                passphrase, signing_time) override its fields.

        Returns:
            The signed PDF.

        Raises:
            InputError: Wrong argument types, unusable container, no
                matching certificate, or a signature too large for the
                placeholder.
            ParseError: Missing EOF line or placeholder.
        """
        pdf = ensure_bytes(pdf_bytes, "PDF expected as bytes.")
        container = ensure_bytes(p12_bytes, "PKCS#12 container expected as bytes.")
        opts = resolve_options(options, kwargs)

        _logger.info("Signing PDF: %d bytes", len(pdf))
        pdf = remove_trailing_newline(pdf)

        location = locate_placeholder(pdf, self.byte_range_placeholder)
        byte_range = compute_byterange(location, len(pdf))
        _logger.debug("Computed ByteRange: %s", list(byte_range))

        pdf = rewrite_byterange(pdf, location, byte_range)
        signed_content = remove_placeholder(pdf, byte_range)
        _logger.debug("Content to sign: %d bytes", len(signed_content))

        signature = build_signature(signed_content, container, opts, self.toolkit)

        # Capacity is checked before last_signature is recorded.
        pad_signature_hex(signature, location.placeholder_length)
        self.last_signature = signature.hex()

        signed = embed_signature(
            signed_content, signature, location.placeholder_length, byte_range.len0
        )
        _logger.info(
            "Signed PDF complete: %d bytes, signature %d of %d hex chars",
            len(signed),
            len(signature) * 2,
            location.placeholder_length,
        )
        return signed

    def verify(self, pdf_bytes: bytes) -> VerificationResult:
        """Verify the embedded signature; never raises."""
        return verify_signature(pdf_bytes, self.toolkit)


def sign(
    pdf_bytes: bytes,
    p12_bytes: bytes,
    options: SignOptions | None = None,
    **kwargs: object,
) -> bytes:
    """Sign with a fresh :class:`SignPdf` using the default placeholder."""
    return SignPdf().sign(pdf_bytes, p12_bytes, options, **kwargs)


def verify(pdf_bytes: bytes) -> VerificationResult:
    """Verify with a fresh :class:`SignPdf`."""
    return SignPdf().verify(pdf_bytes)
