"""Cryptographic toolkit boundary and its default implementation."""

from .keys import key_matches_certificate
from .protocol import CryptoToolkit, ParsedSignedData, Pkcs12Bundle, SignedAttributeValues
from .toolkit import DefaultCryptoToolkit

__all__ = [
    "CryptoToolkit",
    "DefaultCryptoToolkit",
    "ParsedSignedData",
    "Pkcs12Bundle",
    "SignedAttributeValues",
    "key_matches_certificate",
]
