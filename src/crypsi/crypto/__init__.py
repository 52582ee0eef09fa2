"""Cryptographic operations for crypsi."""

from . import aes, digest, hmac, rsa
from .keys import BoundKey, import_for_usage, import_raw_key, load_private_der, load_public_der
from .utils import (
    binary_string_to_bytes,
    bytes_to_binary_string,
    bytes_to_text,
    ensure_bytes,
    from_base64,
    from_hex,
    text_to_bytes,
    to_hex,
)

__all__ = [
    "BoundKey",
    "aes",
    "binary_string_to_bytes",
    "bytes_to_binary_string",
    "bytes_to_text",
    "digest",
    "ensure_bytes",
    "from_base64",
    "from_hex",
    "hmac",
    "import_for_usage",
    "import_raw_key",
    "load_private_der",
    "load_public_der",
    "rsa",
    "text_to_bytes",
    "to_hex",
]
