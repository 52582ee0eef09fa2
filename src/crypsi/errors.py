"""Error hierarchy for crypsi."""

from __future__ import annotations


class CrypsiError(Exception):
    """Base exception for all crypsi errors."""

    pass


class ValidationError(CrypsiError):
    """Invalid parameter detected before any provider call."""

    pass


class InvalidKeyLengthError(ValidationError):
    """Symmetric key length does not match a known AES variant.

    Attributes:
        key_size: The offending key length in bytes.
    """

    def __init__(self, message: str, key_size: int) -> None:
        self.key_size = key_size
        super().__init__(message)


class UnsupportedVariantError(ValidationError):
    """AES variant is recognised but has no working mode table (AES-192)."""

    pass


class UnknownAlgorithmError(ValidationError):
    """Unknown mode, digest or algorithm name."""

    pass


class KeyTooShortError(ValidationError):
    """HMAC key is shorter than the enforced minimum."""

    pass


class MalformedKeyError(CrypsiError):
    """PEM armor, base64 body or DER structure is invalid."""

    pass


class ProviderImportError(CrypsiError):
    """Key material does not match the requested algorithm or usage."""

    pass


class AuthenticationFailedError(CrypsiError):
    """AEAD tag mismatch on decrypt.

    CRITICAL: This error indicates the ciphertext, IV or key was tampered with
    or does not belong together. The plaintext is never returned.
    """

    pass


class DecryptionFailedError(CrypsiError):
    """Decryption failed.

    The message is intentionally generic so that callers cannot distinguish
    padding errors from key mismatches.
    """

    pass


class PlaintextTooLargeError(CrypsiError):
    """Plaintext exceeds the RSA-OAEP capacity of the key.

    Attributes:
        size: The plaintext length in bytes.
        capacity: The maximum plaintext length for the key and digest.
    """

    def __init__(self, size: int, capacity: int) -> None:
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"Plaintext too large for RSA-OAEP: {size} bytes, maximum is {capacity} bytes"
        )
