"""RSA-OAEP encryption and RSA-PSS signatures for crypsi.

Public keys are PEM-armored SPKI, private keys PEM-armored PKCS8. Every call
imports its own key handle scoped to the single operation it performs.
"""

from __future__ import annotations

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import padding

from ..errors import (
    DecryptionFailedError,
    PlaintextTooLargeError,
    ProviderImportError,
    ValidationError,
)
from ..types import BytesLike, Digest, KeyAlgorithm, KeyUsage
from ..utils import run_provider
from .keys import import_for_usage, load_private_der, load_public_der
from .utils import ensure_bytes

logger = logging.getLogger("crypsi")


def _oaep(alg: Digest) -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(alg.hash_algorithm()),
        algorithm=alg.hash_algorithm(),
        label=None,
    )


def _pss(alg: Digest) -> padding.PSS:
    # Salt length is fixed to the digest output length
    return padding.PSS(mgf=padding.MGF1(alg.hash_algorithm()), salt_length=alg.salt_length)


def oaep_capacity(modulus_bits: int, alg: Digest) -> int:
    """Maximum RSA-OAEP plaintext length in bytes for a key size and digest."""
    return (modulus_bits + 7) // 8 - 2 * alg.digest_size - 2


def _encrypt_oaep(der: bytes, alg: Digest, data: bytes) -> bytes:
    with import_for_usage(der, KeyAlgorithm.RSA_OAEP, alg, KeyUsage.ENCRYPT) as handle:
        key = handle.require(KeyUsage.ENCRYPT)
        capacity = oaep_capacity(key.key_size, alg)
        if len(data) > capacity:
            raise PlaintextTooLargeError(len(data), max(capacity, 0))
        return key.encrypt(data, _oaep(alg))


def _decrypt_oaep(der: bytes, alg: Digest, data: bytes) -> bytes:
    with import_for_usage(der, KeyAlgorithm.RSA_OAEP, alg, KeyUsage.DECRYPT) as handle:
        key = handle.require(KeyUsage.DECRYPT)
        try:
            return key.decrypt(data, _oaep(alg))
        except ValueError:
            raise DecryptionFailedError("Decryption failed") from None


def _sign_pss(der: bytes, alg: Digest, data: bytes) -> bytes:
    with import_for_usage(der, KeyAlgorithm.RSA_PSS, alg, KeyUsage.SIGN) as handle:
        key = handle.require(KeyUsage.SIGN)
        try:
            return key.sign(data, _pss(alg), alg.hash_algorithm())
        except ValueError as e:
            raise ProviderImportError(
                f"{key.key_size}-bit key is too small for RSA-PSS with {alg.value}"
            ) from e


def _verify_pss(der: bytes, alg: Digest, signature: bytes, data: bytes) -> bool:
    with import_for_usage(der, KeyAlgorithm.RSA_PSS, alg, KeyUsage.VERIFY) as handle:
        key = handle.require(KeyUsage.VERIFY)
        try:
            key.verify(signature, data, _pss(alg), alg.hash_algorithm())
        except InvalidSignature:
            return False
        return True


async def encrypt_oaep(digest: Digest | str, public_key: str | bytes, data: BytesLike) -> bytes:
    """Encrypt with RSA-OAEP.

    Args:
        digest: Hash used for OAEP and MGF1.
        public_key: PEM ``BEGIN PUBLIC KEY`` text (SPKI).
        data: The plaintext, text is UTF-8 encoded.

    Returns:
        The raw ciphertext, as long as the key modulus.

    Raises:
        UnknownAlgorithmError: If the digest is not supported.
        MalformedKeyError: If the PEM or DER is invalid.
        ProviderImportError: If the key is not an RSA public key.
        PlaintextTooLargeError: If data exceeds modulus - 2 * digest - 2 bytes.
    """
    alg = Digest.parse(digest)
    der = load_public_der(public_key)
    plaintext = ensure_bytes(data)
    logger.debug("RSA-OAEP-%s encrypt: %d bytes", alg.value, len(plaintext))
    return await run_provider(_encrypt_oaep, der, alg, plaintext)


async def decrypt_oaep(digest: Digest | str, private_key: str | bytes, data: BytesLike) -> bytes:
    """Decrypt with RSA-OAEP.

    Every padding or key mismatch raises the same DecryptionFailedError with
    the same message.

    Args:
        digest: Hash used at encryption.
        private_key: PEM ``BEGIN PRIVATE KEY`` text (PKCS8).
        data: The raw ciphertext.

    Returns:
        The plaintext bytes.

    Raises:
        UnknownAlgorithmError: If the digest is not supported.
        MalformedKeyError: If the PEM or DER is invalid.
        ProviderImportError: If the key is not an RSA private key.
        DecryptionFailedError: If decryption fails for any reason.
    """
    alg = Digest.parse(digest)
    der = load_private_der(private_key)
    return await run_provider(_decrypt_oaep, der, alg, ensure_bytes(data))


async def sign_pss(digest: Digest | str, private_key: str | bytes, data: BytesLike) -> bytes:
    """Sign with RSA-PSS, salt length equal to the digest length.

    Args:
        digest: Hash for the message and MGF1.
        private_key: PEM ``BEGIN PRIVATE KEY`` text (PKCS8).
        data: The message, text is UTF-8 encoded.

    Returns:
        The raw signature bytes.
    """
    alg = Digest.parse(digest)
    der = load_private_der(private_key)
    return await run_provider(_sign_pss, der, alg, ensure_bytes(data))


async def verify_pss(
    digest: Digest | str,
    public_key: str | bytes,
    signature: bytes | bytearray | memoryview,
    data: BytesLike,
) -> bool:
    """Verify an RSA-PSS signature.

    An invalid signature returns False. A malformed key or a signature that is
    not bytes raises.

    Args:
        digest: Hash the signature was made with.
        public_key: PEM ``BEGIN PUBLIC KEY`` text (SPKI).
        signature: The raw signature.
        data: The message, text is UTF-8 encoded.

    Returns:
        True if the signature is valid, False otherwise.

    Raises:
        ValidationError: If the signature is not bytes.
        MalformedKeyError: If the PEM or DER is invalid.
        ProviderImportError: If the key is not an RSA public key.
    """
    alg = Digest.parse(digest)
    if not isinstance(signature, (bytes, bytearray, memoryview)):
        raise ValidationError(f"Signature must be bytes, got {type(signature).__name__}")
    der = load_public_der(public_key)
    return await run_provider(_verify_pss, der, alg, bytes(signature), ensure_bytes(data))


# encryption
async def encrypt_with_oaep_sha1(public_key: str | bytes, data: BytesLike) -> bytes:
    return await encrypt_oaep(Digest.SHA1, public_key, data)


async def encrypt_with_oaep_sha256(public_key: str | bytes, data: BytesLike) -> bytes:
    return await encrypt_oaep(Digest.SHA256, public_key, data)


async def encrypt_with_oaep_sha384(public_key: str | bytes, data: BytesLike) -> bytes:
    return await encrypt_oaep(Digest.SHA384, public_key, data)


async def encrypt_with_oaep_sha512(public_key: str | bytes, data: BytesLike) -> bytes:
    return await encrypt_oaep(Digest.SHA512, public_key, data)


# decryption
async def decrypt_with_oaep_sha1(private_key: str | bytes, data: BytesLike) -> bytes:
    return await decrypt_oaep(Digest.SHA1, private_key, data)


async def decrypt_with_oaep_sha256(private_key: str | bytes, data: BytesLike) -> bytes:
    return await decrypt_oaep(Digest.SHA256, private_key, data)


async def decrypt_with_oaep_sha384(private_key: str | bytes, data: BytesLike) -> bytes:
    return await decrypt_oaep(Digest.SHA384, private_key, data)


async def decrypt_with_oaep_sha512(private_key: str | bytes, data: BytesLike) -> bytes:
    return await decrypt_oaep(Digest.SHA512, private_key, data)


# digital signature
async def sign_with_pss_sha1(private_key: str | bytes, data: BytesLike) -> bytes:
    return await sign_pss(Digest.SHA1, private_key, data)


async def sign_with_pss_sha256(private_key: str | bytes, data: BytesLike) -> bytes:
    return await sign_pss(Digest.SHA256, private_key, data)


async def sign_with_pss_sha384(private_key: str | bytes, data: BytesLike) -> bytes:
    return await sign_pss(Digest.SHA384, private_key, data)


async def sign_with_pss_sha512(private_key: str | bytes, data: BytesLike) -> bytes:
    return await sign_pss(Digest.SHA512, private_key, data)


async def verify_signature_with_pss_sha1(
    public_key: str | bytes, signature: bytes, data: BytesLike
) -> bool:
    return await verify_pss(Digest.SHA1, public_key, signature, data)


async def verify_signature_with_pss_sha256(
    public_key: str | bytes, signature: bytes, data: BytesLike
) -> bool:
    return await verify_pss(Digest.SHA256, public_key, signature, data)


async def verify_signature_with_pss_sha384(
    public_key: str | bytes, signature: bytes, data: BytesLike
) -> bool:
    return await verify_pss(Digest.SHA384, public_key, signature, data)


async def verify_signature_with_pss_sha512(
    public_key: str | bytes, signature: bytes, data: BytesLike
) -> bool:
    return await verify_pss(Digest.SHA512, public_key, signature, data)
