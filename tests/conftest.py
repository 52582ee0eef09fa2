"""Shared fixtures for crypsi tests."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import rsa as provider_rsa


def _public_pem(key: provider_rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey) -> str:
    return (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


def _private_pem(
    key: provider_rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey,
    fmt: serialization.PrivateFormat = serialization.PrivateFormat.PKCS8,
) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=fmt,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_private_key() -> provider_rsa.RSAPrivateKey:
    """A 2048-bit RSA key generated once per test session."""
    return provider_rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_pem(rsa_private_key: provider_rsa.RSAPrivateKey) -> str:
    """PKCS8 PEM of the session RSA key."""
    return _private_pem(rsa_private_key)


@pytest.fixture(scope="session")
def public_pem(rsa_private_key: provider_rsa.RSAPrivateKey) -> str:
    """SPKI PEM of the session RSA key."""
    return _public_pem(rsa_private_key)


@pytest.fixture(scope="session")
def other_public_pem() -> str:
    """SPKI PEM of an unrelated RSA key."""
    return _public_pem(provider_rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def other_private_pem() -> str:
    """PKCS8 PEM of an unrelated RSA key."""
    return _private_pem(provider_rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def pkcs1_private_pem(rsa_private_key: provider_rsa.RSAPrivateKey) -> str:
    """PKCS#1 (BEGIN RSA PRIVATE KEY) PEM of the session RSA key."""
    return _private_pem(rsa_private_key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def ec_public_pem() -> str:
    """SPKI PEM of a P-256 key, valid DER but not RSA."""
    return _public_pem(ec.generate_private_key(ec.SECP256R1()))
