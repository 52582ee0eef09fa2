"""Unkeyed SHA-family digests for crypsi."""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes

from ..types import BytesLike, Digest
from ..utils import run_provider
from .utils import ensure_bytes, to_hex


def _compute(alg: Digest, data: bytes) -> bytes:
    h = hashes.Hash(alg.hash_algorithm())
    h.update(data)
    return h.finalize()


async def digest_bytes(alg: Digest | str, data: BytesLike) -> bytes:
    """Compute the raw digest of bytes or UTF-8 text.

    Raises:
        UnknownAlgorithmError: If the digest name is not supported.
    """
    resolved = Digest.parse(alg)
    return await run_provider(_compute, resolved, ensure_bytes(data))


async def digest(alg: Digest | str, data: BytesLike) -> str:
    """Compute the hex digest of bytes or UTF-8 text.

    Args:
        alg: SHA-1, SHA-256, SHA-384 or SHA-512.
        data: The input. Text is UTF-8 encoded before hashing.

    Returns:
        Lower-case hex of the raw digest (40, 64, 96 or 128 characters).

    Raises:
        UnknownAlgorithmError: If the digest name is not supported.
    """
    return to_hex(await digest_bytes(alg, data))


async def sha1(data: BytesLike) -> str:
    return await digest(Digest.SHA1, data)


async def sha256(data: BytesLike) -> str:
    return await digest(Digest.SHA256, data)


async def sha384(data: BytesLike) -> str:
    return await digest(Digest.SHA384, data)


async def sha512(data: BytesLike) -> str:
    return await digest(Digest.SHA512, data)
