"""Type definitions for crypsi."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from cryptography.hazmat.primitives import hashes

from .constants import (
    AES_IV_SIZE,
    AES_MODES,
    AES_SUPPORTED_BITS,
    DIGEST_SALT_LENGTH,
    DIGEST_SIZE,
    HMAC_MIN_KEY_SIZE,
    KEY_BIT_SIZE,
    KEY_BYTE_SIZE,
)
from .errors import InvalidKeyLengthError, UnknownAlgorithmError

# Byte-bearing parameters accept raw bytes or UTF-8 text
BytesLike = Union[bytes, bytearray, memoryview, str]

_HASH_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA-1": hashes.SHA1,
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
}


class Digest(str, Enum):
    """SHA-family digest algorithms."""

    SHA1 = "SHA-1"
    SHA256 = "SHA-256"
    SHA384 = "SHA-384"
    SHA512 = "SHA-512"

    @property
    def digest_size(self) -> int:
        """Digest output length in bytes."""
        return DIGEST_SIZE[self.value]

    @property
    def salt_length(self) -> int:
        """RSA-PSS salt length in bytes."""
        return DIGEST_SALT_LENGTH[self.value]

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Create a fresh provider hash algorithm instance."""
        return _HASH_ALGORITHMS[self.value]()

    @classmethod
    def parse(cls, value: Digest | str) -> Digest:
        """Resolve a digest from an enum member or a name.

        Names are case-insensitive and the dash is optional, so "SHA-256",
        "sha256" and "Sha-256" all resolve to ``Digest.SHA256``.

        Args:
            value: The digest or its name.

        Returns:
            The matching Digest member.

        Raises:
            UnknownAlgorithmError: If the name is not a supported digest.
        """
        if isinstance(value, Digest):
            return value
        normalized = str(value).strip().upper().replace("-", "").replace("_", "")
        for member in cls:
            if member.value.replace("-", "") == normalized:
                return member
        raise UnknownAlgorithmError(f"Unknown digest algorithm: {value!r}")


class AesMode(str, Enum):
    """AES block cipher modes."""

    CBC = "CBC"
    GCM = "GCM"

    @property
    def algorithm_name(self) -> str:
        return AES_MODES[self.value]

    @property
    def iv_size(self) -> int:
        return AES_IV_SIZE[self.value]

    @classmethod
    def parse(cls, value: AesMode | str) -> AesMode:
        """Resolve a mode from an enum member or a name like "GCM" or "AES-GCM".

        Raises:
            UnknownAlgorithmError: If the mode does not exist.
        """
        if isinstance(value, AesMode):
            return value
        name = str(value).strip().upper()
        if name.startswith("AES-"):
            name = name[4:]
        if name not in AES_MODES:
            raise UnknownAlgorithmError(f"invalid mode, mode {value} does not exist")
        return cls(name)


class AesVariant(int, Enum):
    """AES key sizes in bits."""

    AES_128 = 128
    AES_192 = 192
    AES_256 = 256

    @property
    def key_size(self) -> int:
        """Key length in bytes."""
        return KEY_BYTE_SIZE[self.value]

    @property
    def supported(self) -> bool:
        """Whether the variant is wired to a working mode table."""
        return self.value in AES_SUPPORTED_BITS

    @classmethod
    def from_key_size(cls, key_size: int) -> AesVariant:
        """Look up the variant for a key length in bytes.

        Raises:
            InvalidKeyLengthError: If the length is not 16, 24 or 32.
        """
        if key_size not in KEY_BIT_SIZE:
            raise InvalidKeyLengthError(
                "invalid key AES key length, key length should be 16, 24 or 32 bytes",
                key_size=key_size,
            )
        return cls(KEY_BIT_SIZE[key_size])


class KeyUsage(str, Enum):
    """Operations a bound key may be used for."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    SIGN = "sign"
    VERIFY = "verify"


class KeyAlgorithm(str, Enum):
    """Algorithms a key can be bound to."""

    AES_CBC = "AES-CBC"
    AES_GCM = "AES-GCM"
    HMAC = "HMAC"
    RSA_OAEP = "RSA-OAEP"
    RSA_PSS = "RSA-PSS"

    @classmethod
    def for_mode(cls, mode: AesMode) -> KeyAlgorithm:
        return cls(mode.algorithm_name)


@dataclass(frozen=True)
class CrypsiConfig:
    """Configuration for the Crypsi facade.

    Attributes:
        hmac_min_key_size: Minimum HMAC key length in bytes. May be raised but
            never lowered below 32.
        strict_hex: If True, ``from_hex`` raises on non-hex input instead of
            returning the bytes decoded so far.
    """

    hmac_min_key_size: int = HMAC_MIN_KEY_SIZE
    strict_hex: bool = False

    def __post_init__(self) -> None:
        if self.hmac_min_key_size < HMAC_MIN_KEY_SIZE:
            raise ValueError(
                f"hmac_min_key_size cannot be lower than {HMAC_MIN_KEY_SIZE}, "
                f"got {self.hmac_min_key_size}"
            )
