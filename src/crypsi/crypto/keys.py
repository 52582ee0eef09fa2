"""PEM key loading and usage-scoped key handles for crypsi."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import TracebackType
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..constants import (
    PEM_PRIVATE_FOOTER,
    PEM_PRIVATE_HEADER,
    PEM_PUBLIC_FOOTER,
    PEM_PUBLIC_HEADER,
)
from ..errors import MalformedKeyError, ProviderImportError, UnknownAlgorithmError
from ..types import Digest, KeyAlgorithm, KeyUsage
from .utils import from_base64

logger = logging.getLogger("crypsi")

_PUBLIC_USAGES = frozenset({KeyUsage.ENCRYPT, KeyUsage.VERIFY})

# Usages each algorithm may be bound to
_ALLOWED_USAGES: dict[KeyAlgorithm, frozenset[KeyUsage]] = {
    KeyAlgorithm.AES_CBC: frozenset({KeyUsage.ENCRYPT, KeyUsage.DECRYPT}),
    KeyAlgorithm.AES_GCM: frozenset({KeyUsage.ENCRYPT, KeyUsage.DECRYPT}),
    KeyAlgorithm.HMAC: frozenset({KeyUsage.SIGN, KeyUsage.VERIFY}),
    KeyAlgorithm.RSA_OAEP: frozenset({KeyUsage.ENCRYPT, KeyUsage.DECRYPT}),
    KeyAlgorithm.RSA_PSS: frozenset({KeyUsage.SIGN, KeyUsage.VERIFY}),
}

_PROVIDER_LOAD_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


class BoundKey:
    """A key imported for one algorithm and a fixed set of usages.

    Handles are created per call and never shared. Use as a context manager
    so the provider key is released when the operation completes:

        with import_for_usage(der, KeyAlgorithm.RSA_PSS, Digest.SHA256, KeyUsage.SIGN) as key:
            private_key = key.require(KeyUsage.SIGN)
    """

    __slots__ = ("algorithm", "digest", "usages", "_material")

    def __init__(
        self,
        algorithm: KeyAlgorithm,
        usages: Iterable[KeyUsage],
        material: Any,
        digest: Digest | None = None,
    ) -> None:
        self.algorithm = algorithm
        self.digest = digest
        self.usages = frozenset(usages)
        self._material = material

    def require(self, usage: KeyUsage) -> Any:
        """Return the provider key for a usage this handle was imported for.

        Raises:
            ProviderImportError: If the handle was released or is not scoped
                to the usage.
        """
        if self._material is None:
            raise ProviderImportError(f"{self.algorithm.value} key handle has been released")
        if usage not in self.usages:
            scoped = ", ".join(sorted(u.value for u in self.usages))
            raise ProviderImportError(
                f"{self.algorithm.value} key imported for [{scoped}] cannot be used to "
                f"{usage.value}"
            )
        return self._material

    def release(self) -> None:
        self._material = None

    @property
    def released(self) -> bool:
        return self._material is None

    def __enter__(self) -> BoundKey:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        """Representation without key material."""
        usages = ",".join(sorted(u.value for u in self.usages))
        digest = self.digest.value if self.digest else None
        return f"BoundKey(algorithm={self.algorithm.value}, digest={digest}, usages={usages})"


def _strip_armor(pem: str | bytes, header: str, footer: str) -> bytes:
    if isinstance(pem, (bytes, bytearray)):
        try:
            pem = bytes(pem).decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedKeyError("PEM key must be ASCII text") from e
    if not isinstance(pem, str):
        raise MalformedKeyError(f"PEM key must be text, got {type(pem).__name__}")

    text = pem.strip()
    if not text.startswith(header):
        raise MalformedKeyError(f"PEM key must begin with {header}")
    if not text.endswith(footer):
        raise MalformedKeyError(f"PEM key must end with {footer}")

    try:
        der = from_base64(text[len(header) : len(text) - len(footer)])
    except ValueError as e:
        raise MalformedKeyError(f"PEM body is not valid base64: {e}") from e
    if not der:
        raise MalformedKeyError("PEM body is empty")
    return der


def load_public_der(pem: str | bytes) -> bytes:
    """Decode a ``BEGIN PUBLIC KEY`` PEM into SPKI DER bytes.

    Args:
        pem: The PEM text.

    Returns:
        The DER-encoded SubjectPublicKeyInfo.

    Raises:
        MalformedKeyError: If the armor or base64 body is invalid.
    """
    return _strip_armor(pem, PEM_PUBLIC_HEADER, PEM_PUBLIC_FOOTER)


def load_private_der(pem: str | bytes) -> bytes:
    """Decode a ``BEGIN PRIVATE KEY`` PEM into PKCS8 DER bytes.

    PKCS#1 (``BEGIN RSA PRIVATE KEY``) armor is not accepted.

    Args:
        pem: The PEM text.

    Returns:
        The DER-encoded PKCS8 PrivateKeyInfo.

    Raises:
        MalformedKeyError: If the armor or base64 body is invalid.
    """
    return _strip_armor(pem, PEM_PRIVATE_HEADER, PEM_PRIVATE_FOOTER)


def _parses_as(der: bytes, public: bool) -> bool:
    try:
        if public:
            serialization.load_der_public_key(der)
        else:
            serialization.load_der_private_key(der, password=None)
    except _PROVIDER_LOAD_ERRORS:
        return False
    return True


def _is_pkcs1(key: Any, der: bytes, public: bool) -> bool:
    # The provider loaders also accept bare PKCS#1 bodies.
    if public:
        pkcs1 = key.public_bytes(serialization.Encoding.DER, serialization.PublicFormat.PKCS1)
    else:
        pkcs1 = key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    return der == pkcs1


def _check_usage(algorithm: KeyAlgorithm, usages: frozenset[KeyUsage]) -> None:
    allowed = _ALLOWED_USAGES[algorithm]
    invalid = usages - allowed
    if invalid or not usages:
        names = ", ".join(sorted(u.value for u in invalid)) or "<none>"
        raise ProviderImportError(f"{algorithm.value} keys cannot be imported for: {names}")


def import_for_usage(
    der: bytes,
    algorithm: KeyAlgorithm,
    digest: Digest,
    usage: KeyUsage,
) -> BoundKey:
    """Import RSA DER key material bound to one algorithm, digest and usage.

    Encrypt and verify take SPKI public keys; decrypt and sign take PKCS8
    private keys.

    Args:
        der: The DER-encoded key.
        algorithm: RSA-OAEP or RSA-PSS.
        digest: The hash function the key is bound to.
        usage: The single operation the handle may perform.

    Returns:
        A BoundKey scoped to ``usage``.

    Raises:
        UnknownAlgorithmError: If the algorithm is not an RSA algorithm.
        ProviderImportError: If the DER is the wrong structure for the usage
            (including a bare PKCS#1 body), is not an RSA key, or the usage
            does not fit the algorithm.
        MalformedKeyError: If the DER is not a key structure at all.
    """
    if algorithm not in (KeyAlgorithm.RSA_OAEP, KeyAlgorithm.RSA_PSS):
        raise UnknownAlgorithmError(f"Not an RSA algorithm: {algorithm.value}")
    _check_usage(algorithm, frozenset({usage}))

    public = usage in _PUBLIC_USAGES
    key: Any
    try:
        if public:
            key = serialization.load_der_public_key(der)
        else:
            key = serialization.load_der_private_key(der, password=None)
    except _PROVIDER_LOAD_ERRORS as e:
        if _parses_as(der, not public):
            expected, found = ("SPKI", "PKCS8") if public else ("PKCS8", "SPKI")
            raise ProviderImportError(
                f"{algorithm.value} {usage.value} requires a {expected} key, got {found}"
            ) from e
        logger.debug("DER key rejected by provider: %s", type(e).__name__)
        raise MalformedKeyError(f"Key is not valid DER: {e}") from e

    expected_type = rsa.RSAPublicKey if public else rsa.RSAPrivateKey
    if not isinstance(key, expected_type):
        raise ProviderImportError(f"{algorithm.value} requires an RSA key")
    if _is_pkcs1(key, der, public):
        expected = "SPKI" if public else "PKCS8"
        raise ProviderImportError(
            f"{algorithm.value} {usage.value} requires a {expected} key, got PKCS#1"
        )

    return BoundKey(algorithm, (usage,), key, digest=digest)


def import_raw_key(
    raw: bytes,
    algorithm: KeyAlgorithm,
    usages: Iterable[KeyUsage],
    digest: Digest | None = None,
) -> BoundKey:
    """Import raw symmetric key bytes for AES or HMAC.

    Callers validate the key length before importing.

    Args:
        raw: The raw key bytes.
        algorithm: AES-CBC, AES-GCM or HMAC.
        usages: The operations the handle may perform.
        digest: The hash function for HMAC keys.

    Returns:
        A BoundKey scoped to ``usages``.

    Raises:
        UnknownAlgorithmError: If the algorithm does not take raw keys.
        ProviderImportError: If the provider rejects the key.
    """
    scoped = frozenset(usages)
    material: Any
    if algorithm is KeyAlgorithm.AES_GCM:
        _check_usage(algorithm, scoped)
        try:
            material = AESGCM(raw)
        except ValueError as e:
            raise ProviderImportError(f"AES-GCM rejected key: {e}") from e
    elif algorithm is KeyAlgorithm.AES_CBC:
        _check_usage(algorithm, scoped)
        try:
            material = algorithms.AES(raw)
        except ValueError as e:
            raise ProviderImportError(f"AES-CBC rejected key: {e}") from e
    elif algorithm is KeyAlgorithm.HMAC:
        _check_usage(algorithm, scoped)
        if digest is None:
            raise ProviderImportError("HMAC keys must be bound to a digest")
        material = bytes(raw)
    else:
        raise UnknownAlgorithmError(f"{algorithm.value} does not take raw keys")
    return BoundKey(algorithm, scoped, material, digest=digest)
