"""crypsi Python library.

A uniform, string-and-byte oriented facade over AES, RSA, HMAC and SHA
digests, backed by the ``cryptography`` package.

Example:
    ```python
    import asyncio
    from crypsi import aes, digest, rsa

    async def main():
        print(await digest.sha256("wuriyanto"))

        envelope = await aes.encrypt_with_aes256_gcm(key256, "secret")
        plaintext = await aes.decrypt_with_aes256_gcm(key256, envelope)

        signature = await rsa.sign_with_pss_sha256(private_key_pem, b"data")
        assert await rsa.verify_signature_with_pss_sha256(public_key_pem, signature, b"data")

    asyncio.run(main())
    ```
"""

from .client import Crypsi
from .constants import HMAC_MIN_KEY_SIZE
from .crypto import (
    aes,
    binary_string_to_bytes,
    bytes_to_binary_string,
    bytes_to_text,
    digest,
    from_hex,
    hmac,
    rsa,
    text_to_bytes,
    to_hex,
)
from .errors import (
    AuthenticationFailedError,
    CrypsiError,
    DecryptionFailedError,
    InvalidKeyLengthError,
    KeyTooShortError,
    MalformedKeyError,
    PlaintextTooLargeError,
    ProviderImportError,
    UnknownAlgorithmError,
    UnsupportedVariantError,
    ValidationError,
)
from .types import AesMode, AesVariant, CrypsiConfig, Digest, KeyAlgorithm, KeyUsage

__version__ = "0.1.0"

__all__ = [
    "HMAC_MIN_KEY_SIZE",
    "AesMode",
    "AesVariant",
    "AuthenticationFailedError",
    "Crypsi",
    "CrypsiConfig",
    "CrypsiError",
    "DecryptionFailedError",
    "Digest",
    "InvalidKeyLengthError",
    "KeyAlgorithm",
    "KeyTooShortError",
    "KeyUsage",
    "MalformedKeyError",
    "PlaintextTooLargeError",
    "ProviderImportError",
    "UnknownAlgorithmError",
    "UnsupportedVariantError",
    "ValidationError",
    "aes",
    "binary_string_to_bytes",
    "bytes_to_binary_string",
    "bytes_to_text",
    "digest",
    "from_hex",
    "hmac",
    "rsa",
    "text_to_bytes",
    "to_hex",
]
