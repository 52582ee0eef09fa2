"""Crypsi - Main entry point for crypsi."""

from __future__ import annotations

import logging

from .crypto import aes, digest, hmac, rsa
from .crypto.utils import from_hex, to_hex
from .types import AesMode, BytesLike, CrypsiConfig, Digest

logger = logging.getLogger("crypsi")


class Crypsi:
    """Uniform facade over digests, HMAC, AES and RSA.

    The facade holds only its configuration. It never holds key material, so a
    single instance can be shared by any number of concurrent callers.

    Example:
        ```python
        crypsi = Crypsi()
        envelope = await crypsi.aes_encrypt("GCM", key256, "secret")
        plaintext = await crypsi.aes_decrypt("GCM", key256, envelope)
        ```
    """

    def __init__(self, config: CrypsiConfig | None = None) -> None:
        """Initialize the facade.

        Args:
            config: Optional configuration, defaults to ``CrypsiConfig()``.
        """
        self.config = config or CrypsiConfig()

    async def digest(self, alg: Digest | str, data: BytesLike) -> str:
        """Hex digest of bytes or UTF-8 text."""
        return await digest.digest(alg, data)

    async def hmac(self, alg: Digest | str, key: BytesLike, data: BytesLike) -> str:
        """Hex HMAC tag, enforcing the configured minimum key length."""
        return await hmac.mac(key, alg, data, min_key_size=self.config.hmac_min_key_size)

    async def verify_hmac(
        self, alg: Digest | str, key: BytesLike, data: BytesLike, tag: str | bytes
    ) -> bool:
        """Recompute a tag and compare it in constant time."""
        return await hmac.verify(key, alg, data, tag, min_key_size=self.config.hmac_min_key_size)

    async def aes_encrypt(self, mode: AesMode | str, key: BytesLike, data: BytesLike) -> str:
        """Encrypt and return the hex envelope ``hex(iv) || hex(ciphertext)``."""
        return await aes.encrypt(key, mode, data)

    async def aes_decrypt(self, mode: AesMode | str, key: BytesLike, envelope: str) -> bytes:
        """Decrypt a hex envelope produced by ``aes_encrypt``."""
        return await aes.decrypt(key, mode, envelope, strict_hex=self.config.strict_hex)

    async def rsa_encrypt_oaep(
        self, digest: Digest | str, public_key: str | bytes, data: BytesLike
    ) -> bytes:
        return await rsa.encrypt_oaep(digest, public_key, data)

    async def rsa_decrypt_oaep(
        self, digest: Digest | str, private_key: str | bytes, data: BytesLike
    ) -> bytes:
        return await rsa.decrypt_oaep(digest, private_key, data)

    async def rsa_sign_pss(
        self, digest: Digest | str, private_key: str | bytes, data: BytesLike
    ) -> bytes:
        return await rsa.sign_pss(digest, private_key, data)

    async def rsa_verify_pss(
        self,
        digest: Digest | str,
        public_key: str | bytes,
        signature: bytes,
        data: BytesLike,
    ) -> bool:
        valid = await rsa.verify_pss(digest, public_key, signature, data)
        if not valid:
            logger.debug("RSA-PSS signature did not verify")
        return valid

    def to_hex(self, data: bytes | bytearray | memoryview | None) -> str:
        return to_hex(data)

    def from_hex(self, text: str | None) -> bytes:
        """Decode hex, truncating or raising per ``config.strict_hex``."""
        return from_hex(text, strict=self.config.strict_hex)
