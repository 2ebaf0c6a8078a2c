"""
signpdf -- detached PKCS#7 signatures for PDF documents.

Fills a pre-reserved ``/ByteRange`` and ``/Contents`` placeholder with a
signature made from a PKCS#12 container, and verifies such signatures.
"""

from __future__ import annotations

from .api import SignPdf, sign, verify
from .config import options_from_env
from .constants import DEFAULT_BYTE_RANGE_PLACEHOLDER, DEFAULT_SIGNATURE_LENGTH, __version__
from .core.pdf import VerificationResult, add_placeholder
from .core.signing import SignOptions
from .errors import InputError, ParseError, SignPdfError, VerificationError

__all__ = [
    "DEFAULT_BYTE_RANGE_PLACEHOLDER",
    "DEFAULT_SIGNATURE_LENGTH",
    "InputError",
    "ParseError",
    "SignOptions",
    "SignPdf",
    "SignPdfError",
    "VerificationError",
    "VerificationResult",
    "__version__",
    "add_placeholder",
    "options_from_env",
    "sign",
    "verify",
]
