"""signpdf error types."""

from __future__ import annotations

__all__ = [
    "InputError",
    "ParseError",
    "SignPdfError",
    "VerificationError",
]


class SignPdfError(Exception):
    """Base error for signpdf operations."""


class InputError(SignPdfError):
    """Caller supplied unusable input.

    Wrong argument types, an unreadable PKCS#12 container, a container
    without a certificate matching its key, or a signature that does not
    fit the reserved placeholder.
    """


class ParseError(SignPdfError):
    """Document structure required for signing or extraction was not found."""


class VerificationError(SignPdfError):
    """A signature check failed.

    The message is the human-readable reason reported in the
    verification result.
    """
