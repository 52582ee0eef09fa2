"""Keyed message authentication (HMAC) for crypsi."""

from __future__ import annotations

from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import hmac as provider_hmac

from ..constants import HMAC_MIN_KEY_SIZE
from ..errors import KeyTooShortError
from ..types import BytesLike, Digest, KeyAlgorithm, KeyUsage
from ..utils import run_provider
from .keys import BoundKey, import_raw_key
from .utils import ensure_bytes, from_hex, to_hex


def _validate_key(key: BytesLike, min_key_size: int) -> bytes:
    raw = ensure_bytes(key)
    if len(raw) < min_key_size:
        raise KeyTooShortError(f"min key length must be {min_key_size} bytes length")
    return raw


def _sign(handle: BoundKey, alg: Digest, data: bytes) -> bytes:
    with handle:
        h = provider_hmac.HMAC(handle.require(KeyUsage.SIGN), alg.hash_algorithm())
        h.update(data)
        return h.finalize()


async def mac_bytes(
    key: BytesLike,
    alg: Digest | str,
    data: BytesLike,
    min_key_size: int = HMAC_MIN_KEY_SIZE,
) -> bytes:
    """Compute a raw HMAC tag.

    Raises:
        KeyTooShortError: If the key is shorter than ``min_key_size`` bytes.
        UnknownAlgorithmError: If the digest name is not supported.
    """
    raw = _validate_key(key, min_key_size)
    resolved = Digest.parse(alg)
    handle = import_raw_key(raw, KeyAlgorithm.HMAC, (KeyUsage.SIGN,), digest=resolved)
    return await run_provider(_sign, handle, resolved, ensure_bytes(data))


async def mac(
    key: BytesLike,
    alg: Digest | str,
    data: BytesLike,
    min_key_size: int = HMAC_MIN_KEY_SIZE,
) -> str:
    """Compute a hex HMAC tag.

    The key length is checked before anything reaches the provider. The
    floor of 32 bytes is stricter than HMAC itself requires.

    Args:
        key: The secret key, text is UTF-8 encoded.
        alg: SHA-1, SHA-256, SHA-384 or SHA-512.
        data: The message, text is UTF-8 encoded.
        min_key_size: Minimum key length in bytes.

    Returns:
        Lower-case hex of the tag (digest output length).

    Raises:
        KeyTooShortError: If the key is shorter than ``min_key_size`` bytes.
        UnknownAlgorithmError: If the digest name is not supported.
    """
    return to_hex(await mac_bytes(key, alg, data, min_key_size))


async def verify(
    key: BytesLike,
    alg: Digest | str,
    data: BytesLike,
    tag: str | bytes,
    min_key_size: int = HMAC_MIN_KEY_SIZE,
) -> bool:
    """Check a tag by recomputing it and comparing in constant time.

    Args:
        key: The secret key.
        alg: The digest the tag was computed with.
        data: The message.
        tag: The expected tag, as hex text or raw bytes.
        min_key_size: Minimum key length in bytes.

    Returns:
        True if the tag matches, False otherwise.

    Raises:
        KeyTooShortError: If the key is shorter than ``min_key_size`` bytes.
        UnknownAlgorithmError: If the digest name is not supported.
    """
    expected = from_hex(tag) if isinstance(tag, str) else bytes(tag)
    actual = await mac_bytes(key, alg, data, min_key_size)
    return constant_time.bytes_eq(actual, expected)


async def sha1(key: BytesLike, data: BytesLike) -> str:
    return await mac(key, Digest.SHA1, data)


async def sha256(key: BytesLike, data: BytesLike) -> str:
    return await mac(key, Digest.SHA256, data)


async def sha384(key: BytesLike, data: BytesLike) -> str:
    return await mac(key, Digest.SHA384, data)


async def sha512(key: BytesLike, data: BytesLike) -> str:
    return await mac(key, Digest.SHA512, data)
