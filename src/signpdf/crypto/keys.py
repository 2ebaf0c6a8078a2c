"""
Per-algorithm key capabilities.

Each capability dispatches on the key type, so supporting another
public-key algorithm means registering one more implementation of each
function rather than subclassing anything.
"""

from __future__ import annotations

__all__ = [
    "hash_for",
    "key_matches_certificate",
    "sign_with_key",
    "signature_algorithm_name",
    "verify_with_public_key",
]

from functools import singledispatch
from typing import Any

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from ..errors import InputError

_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def hash_for(algorithm: str) -> hashes.HashAlgorithm:
    """Map a hashlib algorithm name to a ``cryptography`` hash instance."""
    try:
        return _HASHES[algorithm.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported digest algorithm: {algorithm}") from None


def _unsupported(key: object) -> InputError:
    return InputError(f"Unsupported key type: {type(key).__name__}")


# ── Key-pair matching ────────────────────────────────────────────────


@singledispatch
def key_matches_certificate(private_key: Any, public_key: Any) -> bool:
    """Return True if *public_key* (from a certificate) belongs to *private_key*."""
    raise _unsupported(private_key)


@key_matches_certificate.register(rsa.RSAPrivateKey)
def _rsa_matches(private_key: rsa.RSAPrivateKey, public_key: Any) -> bool:
    if not isinstance(public_key, rsa.RSAPublicKey):
        return False
    own = private_key.private_numbers().public_numbers
    other = public_key.public_numbers()
    return own.n == other.n and own.e == other.e


@key_matches_certificate.register(ec.EllipticCurvePrivateKey)
def _ec_matches(private_key: ec.EllipticCurvePrivateKey, public_key: Any) -> bool:
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        return False
    own = private_key.public_key().public_numbers()
    other = public_key.public_numbers()
    return own.curve.name == other.curve.name and own.x == other.x and own.y == other.y


# ── Signing ──────────────────────────────────────────────────────────


@singledispatch
def sign_with_key(private_key: Any, data: bytes, algorithm: str) -> bytes:
    """Sign *data* (hashing it with *algorithm*) using *private_key*."""
    raise _unsupported(private_key)


@sign_with_key.register(rsa.RSAPrivateKey)
def _rsa_sign(private_key: rsa.RSAPrivateKey, data: bytes, algorithm: str) -> bytes:
    return private_key.sign(data, padding.PKCS1v15(), hash_for(algorithm))


@sign_with_key.register(ec.EllipticCurvePrivateKey)
def _ec_sign(private_key: ec.EllipticCurvePrivateKey, data: bytes, algorithm: str) -> bytes:
    return private_key.sign(data, ec.ECDSA(hash_for(algorithm)))


@singledispatch
def signature_algorithm_name(private_key: Any, algorithm: str) -> str:
    """asn1crypto name of the SignerInfo signature algorithm for this key."""
    raise _unsupported(private_key)


@signature_algorithm_name.register(rsa.RSAPrivateKey)
def _rsa_algorithm_name(private_key: rsa.RSAPrivateKey, algorithm: str) -> str:
    return "rsassa_pkcs1v15"


@signature_algorithm_name.register(ec.EllipticCurvePrivateKey)
def _ec_algorithm_name(private_key: ec.EllipticCurvePrivateKey, algorithm: str) -> str:
    return f"{algorithm.lower()}_ecdsa"


# ── Verification ─────────────────────────────────────────────────────


@singledispatch
def verify_with_public_key(public_key: Any, signature: bytes, data: bytes, algorithm: str) -> None:
    """Verify *signature* over *data*.

    Raises:
        cryptography.exceptions.InvalidSignature: If the signature does not verify.
    """
    raise _unsupported(public_key)


@verify_with_public_key.register(rsa.RSAPublicKey)
def _rsa_verify(public_key: rsa.RSAPublicKey, signature: bytes, data: bytes, algorithm: str) -> None:
    public_key.verify(signature, data, padding.PKCS1v15(), hash_for(algorithm))


@verify_with_public_key.register(ec.EllipticCurvePublicKey)
def _ec_verify(
    public_key: ec.EllipticCurvePublicKey, signature: bytes, data: bytes, algorithm: str
) -> None:
    public_key.verify(signature, data, ec.ECDSA(hash_for(algorithm)))
