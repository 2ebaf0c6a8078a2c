"""Shared test fixtures for the signpdf test suite."""

from __future__ import annotations

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from signpdf.constants import DEFAULT_BYTE_RANGE_PLACEHOLDER

# Fake CMS blob that satisfies the DER header checks (~1792 bytes).
FAKE_CMS = b"\x30\x82\x06\xfc" + b"\xab" * 1788

SIGNER_CN = "signpdf test signer"
P12_PASSPHRASE = "correct horse"


def make_cert(key, common_name: str = SIGNER_CN) -> x509.Certificate:
    """Self-signed certificate for *key* with CN, O and email set."""
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Org"),
            x509.NameAttribute(NameOID.EMAIL_ADDRESS, "signer@example.com"),
        ]
    )
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )


def make_p12(key, cert=None, cas=None, passphrase: str = "") -> bytes:
    encryption = (
        serialization.BestAvailableEncryption(passphrase.encode())
        if passphrase
        else serialization.NoEncryption()
    )
    return pkcs12.serialize_key_and_certificates(b"signer", key, cert, cas, encryption)


def make_placeholder_pdf(
    hex_len: int = 16, placeholder: str = DEFAULT_BYTE_RANGE_PLACEHOLDER
) -> bytes:
    """Minimal byte layout with a ByteRange and Contents placeholder.

    Not a parseable PDF -- only the markers the signer looks for.
    """
    byte_range = f"/ByteRange [0 /{placeholder} /{placeholder} /{placeholder}]"
    return (
        b"%PDF-1.3\n1 0 obj\n<< /Type /Sig "
        + byte_range.encode("ascii")
        + b" /Contents <"
        + b"0" * hex_len
        + b"> /Reason (test) >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF"
    )


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_cert(rsa_key):
    return make_cert(rsa_key)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_cert(other_rsa_key):
    return make_cert(other_rsa_key, "someone else")


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_cert(ec_key):
    return make_cert(ec_key, "signpdf ec signer")


@pytest.fixture(scope="session")
def rsa_p12(rsa_key, rsa_cert):
    return make_p12(rsa_key, rsa_cert)


@pytest.fixture(scope="session")
def protected_p12(rsa_key, rsa_cert):
    return make_p12(rsa_key, rsa_cert, passphrase=P12_PASSPHRASE)


@pytest.fixture(scope="session")
def ec_p12(ec_key, ec_cert):
    return make_p12(ec_key, ec_cert)


@pytest.fixture(scope="session")
def mismatched_p12(rsa_key, other_rsa_cert):
    """Container whose only certificate belongs to a different key."""
    return make_p12(rsa_key, None, [other_rsa_cert])


@pytest.fixture
def valid_pdf_bytes():
    """Create a minimal valid PDF using pikepdf."""
    import io

    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


@pytest.fixture
def prepared_pdf(valid_pdf_bytes):
    """A valid PDF with an invisible signature placeholder appended."""
    from signpdf import add_placeholder

    return add_placeholder(valid_pdf_bytes)
