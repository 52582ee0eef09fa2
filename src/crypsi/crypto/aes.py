"""AES-CBC and AES-GCM encryption for crypsi.

Encrypted data is returned as a hex envelope: ``hex(iv) || hex(ciphertext)``.
The IV is 16 bytes for CBC and 12 bytes for GCM and a fresh random IV is
drawn for every encryption. GCM ciphertexts carry a 16-byte tag at the end.
"""

from __future__ import annotations

import logging
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from ..constants import AES_BLOCK_SIZE_BITS, KEY_BYTE_SIZE
from ..errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    InvalidKeyLengthError,
    UnsupportedVariantError,
)
from ..types import AesMode, AesVariant, BytesLike, KeyAlgorithm, KeyUsage
from ..utils import run_provider
from .keys import BoundKey, import_raw_key
from .utils import ensure_bytes, from_hex, to_hex

logger = logging.getLogger("crypsi")

_KEY_USAGES = (KeyUsage.ENCRYPT, KeyUsage.DECRYPT)


def validate_key_and_mode(
    mode: AesMode | str,
    key: BytesLike,
    bit_size: int | None = None,
) -> tuple[AesMode, AesVariant, bytes]:
    """Validate a mode and raw key before any provider call.

    Args:
        mode: CBC or GCM.
        key: The raw key, text is UTF-8 encoded.
        bit_size: If given, the key must be exactly this AES size.

    Returns:
        The resolved mode, variant and raw key bytes.

    Raises:
        InvalidKeyLengthError: If the key is not 16, 24 or 32 bytes, or does
            not match ``bit_size``.
        UnknownAlgorithmError: If the mode does not exist.
        UnsupportedVariantError: If the key selects AES-192.
    """
    raw = ensure_bytes(key)
    variant = AesVariant.from_key_size(len(raw))

    if bit_size is not None and len(raw) != KEY_BYTE_SIZE.get(bit_size):
        raise InvalidKeyLengthError(
            f"invalid key length, AES {bit_size} key length should be "
            f"{KEY_BYTE_SIZE.get(bit_size)} bytes length",
            key_size=len(raw),
        )

    resolved = AesMode.parse(mode)

    if not variant.supported:
        raise UnsupportedVariantError(
            f"AES-{variant.value}-{resolved.value} is not supported, use a 16 or 32 byte key"
        )
    return resolved, variant, raw


def _encrypt(handle: BoundKey, mode: AesMode, iv: bytes, data: bytes) -> bytes:
    with handle:
        key = handle.require(KeyUsage.ENCRYPT)
        if mode is AesMode.GCM:
            return key.encrypt(iv, data, None)

        padder = padding.PKCS7(AES_BLOCK_SIZE_BITS).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = Cipher(key, modes.CBC(iv)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()


def _decrypt(handle: BoundKey, mode: AesMode, iv: bytes, cipher_data: bytes) -> bytes:
    with handle:
        key = handle.require(KeyUsage.DECRYPT)
        if mode is AesMode.GCM:
            try:
                return key.decrypt(iv, cipher_data, None)
            except InvalidTag as e:
                raise AuthenticationFailedError(
                    "AES-GCM authentication failed - data may be tampered or the key is wrong"
                ) from e

        try:
            decryptor = Cipher(key, modes.CBC(iv)).decryptor()
            padded = decryptor.update(cipher_data) + decryptor.finalize()
            unpadder = padding.PKCS7(AES_BLOCK_SIZE_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionFailedError("AES-CBC decryption failed") from None


def parse_encrypted_data(envelope: bytes, mode: AesMode) -> tuple[bytes, bytes]:
    """Split a decoded envelope into ``(iv, cipher_data)``.

    Raises:
        DecryptionFailedError: If the envelope is shorter than the IV.
    """
    if len(envelope) < mode.iv_size:
        raise DecryptionFailedError(
            f"Encrypted data too short: {len(envelope)} bytes, "
            f"{mode.algorithm_name} IV is {mode.iv_size} bytes"
        )
    return envelope[: mode.iv_size], envelope[mode.iv_size :]


async def encrypt(
    key: BytesLike,
    mode: AesMode | str,
    data: BytesLike,
    bit_size: int | None = None,
) -> str:
    """Encrypt data and return the hex envelope.

    Args:
        key: Raw key of 16 or 32 bytes, text is UTF-8 encoded.
        mode: CBC or GCM.
        data: The plaintext, text is UTF-8 encoded.
        bit_size: If given, the key must be exactly this AES size.

    Returns:
        ``hex(iv) || hex(ciphertext)``.

    Raises:
        ValidationError: If the mode or key is invalid (see
            ``validate_key_and_mode``).
    """
    resolved, variant, raw = validate_key_and_mode(mode, key, bit_size)
    plaintext = ensure_bytes(data)
    handle = import_raw_key(raw, KeyAlgorithm.for_mode(resolved), _KEY_USAGES)

    # The IV must never be reused with a given key.
    iv = secrets.token_bytes(resolved.iv_size)

    logger.debug("AES-%d-%s encrypt: %d bytes", variant.value, resolved.value, len(plaintext))
    cipher_data = await run_provider(_encrypt, handle, resolved, iv, plaintext)
    return to_hex(iv + cipher_data)


async def decrypt(
    key: BytesLike,
    mode: AesMode | str,
    encrypted_data: str,
    bit_size: int | None = None,
    strict_hex: bool = False,
) -> bytes:
    """Decrypt a hex envelope produced by ``encrypt``.

    Args:
        key: The raw key used for encryption.
        mode: The mode used for encryption.
        encrypted_data: ``hex(iv) || hex(ciphertext)``.
        bit_size: If given, the key must be exactly this AES size.
        strict_hex: Reject invalid hex instead of truncating.

    Returns:
        The plaintext bytes.

    Raises:
        ValidationError: If the mode or key is invalid.
        AuthenticationFailedError: If the GCM tag does not verify.
        DecryptionFailedError: If the envelope is too short or CBC padding is
            invalid.
    """
    resolved, variant, raw = validate_key_and_mode(mode, key, bit_size)
    iv, cipher_data = parse_encrypted_data(from_hex(encrypted_data, strict=strict_hex), resolved)
    handle = import_raw_key(raw, KeyAlgorithm.for_mode(resolved), _KEY_USAGES)

    logger.debug("AES-%d-%s decrypt: %d bytes", variant.value, resolved.value, len(cipher_data))
    return await run_provider(_decrypt, handle, resolved, iv, cipher_data)


# CBC encrypt
async def encrypt_with_aes128_cbc(key: BytesLike, data: BytesLike) -> str:
    return await encrypt(key, AesMode.CBC, data, bit_size=128)


async def encrypt_with_aes192_cbc(key: BytesLike, data: BytesLike) -> str:
    """AES-192 is validated but not supported; raises UnsupportedVariantError for a 24-byte key."""
    return await encrypt(key, AesMode.CBC, data, bit_size=192)


async def encrypt_with_aes256_cbc(key: BytesLike, data: BytesLike) -> str:
    return await encrypt(key, AesMode.CBC, data, bit_size=256)


# CBC decrypt
async def decrypt_with_aes128_cbc(key: BytesLike, encrypted_data: str) -> bytes:
    return await decrypt(key, AesMode.CBC, encrypted_data, bit_size=128)


async def decrypt_with_aes192_cbc(key: BytesLike, encrypted_data: str) -> bytes:
    """AES-192 is validated but not supported; raises UnsupportedVariantError for a 24-byte key."""
    return await decrypt(key, AesMode.CBC, encrypted_data, bit_size=192)


async def decrypt_with_aes256_cbc(key: BytesLike, encrypted_data: str) -> bytes:
    return await decrypt(key, AesMode.CBC, encrypted_data, bit_size=256)


# GCM encrypt
async def encrypt_with_aes128_gcm(key: BytesLike, data: BytesLike) -> str:
    return await encrypt(key, AesMode.GCM, data, bit_size=128)


async def encrypt_with_aes192_gcm(key: BytesLike, data: BytesLike) -> str:
    """AES-192 is validated but not supported; raises UnsupportedVariantError for a 24-byte key."""
    return await encrypt(key, AesMode.GCM, data, bit_size=192)


async def encrypt_with_aes256_gcm(key: BytesLike, data: BytesLike) -> str:
    return await encrypt(key, AesMode.GCM, data, bit_size=256)


# GCM decrypt
async def decrypt_with_aes128_gcm(key: BytesLike, encrypted_data: str) -> bytes:
    return await decrypt(key, AesMode.GCM, encrypted_data, bit_size=128)


async def decrypt_with_aes192_gcm(key: BytesLike, encrypted_data: str) -> bytes:
    """AES-192 is validated but not supported; raises UnsupportedVariantError for a 24-byte key."""
    return await decrypt(key, AesMode.GCM, encrypted_data, bit_size=192)


async def decrypt_with_aes256_gcm(key: BytesLike, encrypted_data: str) -> bytes:
    return await decrypt(key, AesMode.GCM, encrypted_data, bit_size=256)
