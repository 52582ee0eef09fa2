"""Tests for AES-CBC and AES-GCM encryption."""

import asyncio
import os

import pytest

from crypsi.crypto import aes
from crypsi.crypto.utils import from_hex, to_hex
from crypsi.errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    InvalidKeyLengthError,
    UnknownAlgorithmError,
    UnsupportedVariantError,
    ValidationError,
)
from crypsi.types import AesMode

KEY_128 = "abc$#128djdyAgbj"
KEY_192 = "abc$#128djdyAgbjau&YAnmc"
KEY_256 = "abc$#128djdyAgbjau&YAnmcbagryt5x"

# "wuriyanto" under AES-CBC with IV 000102..0f, produced with openssl enc
KNOWN_IV = "000102030405060708090a0b0c0d0e0f"
CBC_128_WURIYANTO = KNOWN_IV + "9d5f38c56d18f102a01ac4f2a0547ae6"
CBC_256_WURIYANTO = KNOWN_IV + "70f274eac942ada631d9123f393a9022"


def flip_bit(envelope: str, index: int, bit: int = 0) -> str:
    """Flip one bit of the byte at ``index`` of a hex envelope."""
    data = bytearray(from_hex(envelope))
    data[index] ^= 1 << bit
    return to_hex(data)


class TestRoundTrip:
    """Tests for encrypt/decrypt round trips."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["CBC", "GCM"])
    @pytest.mark.parametrize("key", [KEY_128, KEY_256])
    async def test_round_trip(self, mode: str, key: str) -> None:
        """Test that decrypting an encryption returns the plaintext."""
        for size in (0, 1, 15, 16, 17, 1000):
            plaintext = os.urandom(size)
            envelope = await aes.encrypt(key, mode, plaintext)
            assert await aes.decrypt(key, mode, envelope) == plaintext

    @pytest.mark.asyncio
    async def test_text_plaintext(self) -> None:
        """Test that text plaintext is UTF-8 encoded."""
        envelope = await aes.encrypt_with_aes256_gcm(KEY_256, "héllo wuriyanto")
        assert await aes.decrypt_with_aes256_gcm(KEY_256, envelope) == "héllo wuriyanto".encode()

    @pytest.mark.asyncio
    async def test_variant_functions(self) -> None:
        """Test every supported per-variant function pair."""
        pairs = [
            (aes.encrypt_with_aes128_cbc, aes.decrypt_with_aes128_cbc, KEY_128),
            (aes.encrypt_with_aes256_cbc, aes.decrypt_with_aes256_cbc, KEY_256),
            (aes.encrypt_with_aes128_gcm, aes.decrypt_with_aes128_gcm, KEY_128),
            (aes.encrypt_with_aes256_gcm, aes.decrypt_with_aes256_gcm, KEY_256),
        ]
        for encrypt, decrypt, key in pairs:
            assert await decrypt(key, await encrypt(key, "wuriyanto")) == b"wuriyanto"

    @pytest.mark.asyncio
    async def test_bytes_key(self) -> None:
        """Test that keys given as bytes work the same as text."""
        envelope = await aes.encrypt(KEY_128.encode(), AesMode.GCM, b"data")
        assert await aes.decrypt(KEY_128, AesMode.GCM, envelope) == b"data"

    @pytest.mark.asyncio
    async def test_upper_case_envelope(self) -> None:
        """Test that hex envelopes decode case-insensitively."""
        envelope = await aes.encrypt(KEY_256, "CBC", b"data")
        assert await aes.decrypt(KEY_256, "CBC", envelope.upper()) == b"data"


class TestKnownAnswer:
    """Tests decrypting envelopes produced by another implementation."""

    @pytest.mark.asyncio
    async def test_cbc_128(self) -> None:
        """Test AES-128-CBC known answer."""
        assert await aes.decrypt_with_aes128_cbc(KEY_128, CBC_128_WURIYANTO) == b"wuriyanto"

    @pytest.mark.asyncio
    async def test_cbc_256(self) -> None:
        """Test AES-256-CBC known answer."""
        assert await aes.decrypt_with_aes256_cbc(KEY_256, CBC_256_WURIYANTO) == b"wuriyanto"


class TestEnvelope:
    """Tests for the IV-prefixed hex envelope."""

    @pytest.mark.asyncio
    async def test_gcm_layout(self) -> None:
        """Test GCM envelope is 12-byte IV, ciphertext and 16-byte tag."""
        envelope = await aes.encrypt(KEY_128, "GCM", b"wuriyanto")
        assert envelope == envelope.lower()
        assert len(from_hex(envelope)) == 12 + 9 + 16

    @pytest.mark.asyncio
    async def test_cbc_layout(self) -> None:
        """Test CBC envelope is 16-byte IV and padded ciphertext."""
        envelope = await aes.encrypt(KEY_128, "CBC", b"wuriyanto")
        assert len(from_hex(envelope)) == 16 + 16
        envelope = await aes.encrypt(KEY_128, "CBC", b"x" * 16)
        assert len(from_hex(envelope)) == 16 + 32

    def test_parse_encrypted_data(self) -> None:
        """Test splitting an envelope at the mode's IV size."""
        data = bytes(range(40))
        assert aes.parse_encrypted_data(data, AesMode.GCM) == (data[:12], data[12:])
        assert aes.parse_encrypted_data(data, AesMode.CBC) == (data[:16], data[16:])

    @pytest.mark.asyncio
    async def test_fresh_iv_per_call(self) -> None:
        """Test that repeated encryptions use different IVs."""
        first = await aes.encrypt(KEY_256, "GCM", b"same")
        second = await aes.encrypt(KEY_256, "GCM", b"same")
        assert first[:24] != second[:24]
        assert first != second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["CBC", "GCM"])
    async def test_concurrent_encryptions_never_share_iv(self, mode: str) -> None:
        """Test that concurrent encryptions under one key draw distinct IVs."""
        iv_hex_len = AesMode.parse(mode).iv_size * 2
        envelopes = await asyncio.gather(
            *(aes.encrypt(KEY_256, mode, f"message {i}") for i in range(64))
        )
        ivs = {envelope[:iv_hex_len] for envelope in envelopes}
        assert len(ivs) == len(envelopes)


class TestTampering:
    """Tests for integrity failures."""

    @pytest.mark.asyncio
    async def test_gcm_bit_flip_fails_authentication(self) -> None:
        """Test that flipping any ciphertext or tag bit fails authentication."""
        envelope = await aes.encrypt(KEY_256, "GCM", b"wuriyanto")
        total = len(from_hex(envelope))
        for index in range(12, total):
            for bit in (0, 7):
                with pytest.raises(AuthenticationFailedError):
                    await aes.decrypt(KEY_256, "GCM", flip_bit(envelope, index, bit))

    @pytest.mark.asyncio
    async def test_gcm_iv_flip_fails_authentication(self) -> None:
        """Test that a modified IV fails authentication."""
        envelope = await aes.encrypt(KEY_128, "GCM", b"wuriyanto")
        with pytest.raises(AuthenticationFailedError):
            await aes.decrypt(KEY_128, "GCM", flip_bit(envelope, 0))

    @pytest.mark.asyncio
    async def test_gcm_wrong_key(self) -> None:
        """Test that a different key fails authentication."""
        envelope = await aes.encrypt(KEY_128, "GCM", b"wuriyanto")
        with pytest.raises(AuthenticationFailedError):
            await aes.decrypt("x" * 16, "GCM", envelope)

    @pytest.mark.asyncio
    async def test_gcm_missing_tag(self) -> None:
        """Test that an envelope with only the IV fails authentication."""
        envelope = await aes.encrypt(KEY_128, "GCM", b"wuriyanto")
        with pytest.raises(AuthenticationFailedError):
            await aes.decrypt(KEY_128, "GCM", envelope[:24])

    @pytest.mark.asyncio
    async def test_envelope_shorter_than_iv(self) -> None:
        """Test that an envelope shorter than the IV fails."""
        with pytest.raises(DecryptionFailedError, match="too short"):
            await aes.decrypt(KEY_128, "GCM", "00" * 11)
        with pytest.raises(DecryptionFailedError, match="too short"):
            await aes.decrypt(KEY_128, "CBC", "00" * 15)

    @pytest.mark.asyncio
    async def test_cbc_bad_length(self) -> None:
        """Test that CBC ciphertext not a multiple of the block size fails."""
        with pytest.raises(DecryptionFailedError, match="^AES-CBC decryption failed$"):
            await aes.decrypt(KEY_128, "CBC", CBC_128_WURIYANTO[:-2])

    @pytest.mark.asyncio
    async def test_cbc_wrong_key_does_not_return_plaintext(self) -> None:
        """Test that a wrong CBC key never yields the original plaintext."""
        try:
            result = await aes.decrypt("x" * 16, "CBC", CBC_128_WURIYANTO)
        except DecryptionFailedError:
            return
        assert result != b"wuriyanto"

    @pytest.mark.asyncio
    async def test_invalid_hex_truncates(self) -> None:
        """Test that an envelope with invalid hex is decoded up to the bad pair."""
        with pytest.raises(DecryptionFailedError, match="too short"):
            await aes.decrypt(KEY_128, "CBC", "zz" + CBC_128_WURIYANTO)

    @pytest.mark.asyncio
    async def test_strict_hex(self) -> None:
        """Test that strict hex decoding rejects bad envelopes."""
        with pytest.raises(ValidationError):
            await aes.decrypt(KEY_128, "CBC", CBC_128_WURIYANTO + "z", strict_hex=True)


class TestValidation:
    """Tests for key and mode validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "short", "k" * 15, "k" * 17, "k" * 33])
    async def test_invalid_key_length(self, key: str) -> None:
        """Test that keys of unknown length are rejected."""
        with pytest.raises(InvalidKeyLengthError, match="16, 24 or 32 bytes"):
            await aes.encrypt(key, "GCM", b"data")

    @pytest.mark.asyncio
    async def test_key_does_not_match_variant(self) -> None:
        """Test that a 256-bit key is rejected by a 128-bit function."""
        with pytest.raises(InvalidKeyLengthError, match="AES 128 key length should be 16"):
            await aes.encrypt_with_aes128_gcm(KEY_256, b"data")
        with pytest.raises(InvalidKeyLengthError, match="AES 256 key length should be 32"):
            await aes.decrypt_with_aes256_cbc(KEY_128, CBC_128_WURIYANTO)

    @pytest.mark.asyncio
    async def test_unknown_mode(self) -> None:
        """Test that unknown modes are rejected."""
        with pytest.raises(UnknownAlgorithmError, match="mode CTR does not exist"):
            await aes.encrypt(KEY_128, "CTR", b"data")

    @pytest.mark.asyncio
    async def test_aes192_unsupported(self) -> None:
        """Test that every AES-192 entry point fails distinctly."""
        calls = [
            aes.encrypt_with_aes192_cbc(KEY_192, b"data"),
            aes.encrypt_with_aes192_gcm(KEY_192, b"data"),
            aes.decrypt_with_aes192_cbc(KEY_192, CBC_128_WURIYANTO),
            aes.decrypt_with_aes192_gcm(KEY_192, CBC_128_WURIYANTO),
            aes.encrypt(KEY_192, "GCM", b"data"),
        ]
        for call in calls:
            with pytest.raises(UnsupportedVariantError, match="AES-192"):
                await call

    @pytest.mark.asyncio
    async def test_aes192_function_rejects_other_lengths(self) -> None:
        """Test that the 192-bit functions still validate the key length first."""
        with pytest.raises(InvalidKeyLengthError, match="AES 192 key length should be 24"):
            await aes.encrypt_with_aes192_gcm(KEY_128, b"data")

    def test_validate_returns_resolved_values(self) -> None:
        """Test the resolved mode, variant and raw key."""
        mode, variant, raw = aes.validate_key_and_mode("gcm", KEY_256)
        assert mode is AesMode.GCM
        assert variant.value == 256
        assert raw == KEY_256.encode()
