"""Hex, base64 and text encoding utilities for crypsi."""

from __future__ import annotations

import base64
import binascii
import re

from ..errors import ValidationError
from ..types import BytesLike

_HEX_VALUES = {c: int(c, 16) for c in "0123456789abcdefABCDEF"}

_WHITESPACE_PATTERN = re.compile(r"\s+")


def to_hex(data: bytes | bytearray | memoryview | None) -> str:
    """Encode bytes as lower-case hex, two characters per byte.

    Args:
        data: The bytes to encode. None is treated as empty.

    Returns:
        The hex string, empty for empty or absent input.
    """
    if not data:
        return ""
    return bytes(data).hex()


def from_hex(text: str | None, strict: bool = False) -> bytes:
    """Decode a hex string, case-insensitive.

    Pairs are decoded left to right. Decoding stops at the first pair that is
    not two valid hex digits and returns the bytes decoded so far. A trailing
    odd character is ignored.

    Args:
        text: The hex string to decode. None is treated as empty.
        strict: Raise instead of truncating on invalid or odd-length input.

    Returns:
        The decoded bytes.

    Raises:
        ValidationError: If strict is set and the input is not valid hex.
    """
    text = text or ""
    if strict and len(text) % 2:
        raise ValidationError(f"Hex string has odd length: {len(text)}")

    out = bytearray()
    for i in range(len(text) // 2):
        high = _HEX_VALUES.get(text[i * 2])
        low = _HEX_VALUES.get(text[i * 2 + 1])
        if high is None or low is None:
            if strict:
                raise ValidationError(f"Invalid hex character pair at position {i * 2}")
            break
        out.append((high << 4) | low)
    return bytes(out)


def text_to_bytes(text: str) -> bytes:
    """Encode text as UTF-8."""
    return text.encode("utf-8")


def bytes_to_text(data: bytes | bytearray | memoryview) -> str:
    """Decode UTF-8 bytes to text."""
    return bytes(data).decode("utf-8")


def binary_string_to_bytes(binary: str) -> bytes:
    """Convert a binary string (one character per byte) to bytes.

    Each character's code point is truncated to its low 8 bits.
    """
    return bytes(ord(c) & 0xFF for c in binary)


def bytes_to_binary_string(data: bytes | bytearray | memoryview) -> str:
    """Convert bytes to a binary string, one character per byte."""
    return "".join(chr(b) for b in bytes(data))


def ensure_bytes(data: BytesLike) -> bytes:
    """Normalize byte-bearing input, UTF-8 encoding text.

    Raises:
        ValidationError: If the value is neither bytes-like nor text.
    """
    if isinstance(data, str):
        return text_to_bytes(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise ValidationError(f"Expected bytes or str, got {type(data).__name__}")


def from_base64(s: str) -> bytes:
    """Decode a standard base64 string, ignoring line breaks and spaces.

    Args:
        s: The base64 string to decode.

    Returns:
        The decoded bytes.

    Raises:
        ValueError: If the string contains non-base64 characters or bad padding.
    """
    try:
        return base64.b64decode(_WHITESPACE_PATTERN.sub("", s), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64: {e}") from e
