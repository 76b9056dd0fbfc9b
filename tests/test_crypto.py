"""
Tests for the encrypted value envelope.

Tests cover:
- Round-trip for every AES key size
- Tamper sensitivity of ciphertext and tag
- No-key policy and plain value pass-through
- Malformed envelopes
- Compatibility with values produced by the envbee CLI
"""
import base64
import hashlib
import os

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from envbee_sdk import DecryptionError, ENC_PREFIX, decrypt, encrypt, is_encrypted

KEY = b"0123456789abcdef0123456789abcdef"


def flip_bit(envelope: str, index: int) -> str:
    raw = bytearray(base64.b64decode(envelope[len(ENC_PREFIX):]))
    raw[index] ^= 0x01
    return ENC_PREFIX + base64.b64encode(bytes(raw)).decode("ascii")


class TestRoundTrip:
    """Tests for encrypt/decrypt symmetry."""

    @pytest.mark.parametrize("size", [16, 24, 32])
    @pytest.mark.parametrize("plaintext", ["", "SuperSecretValue", "ñandú ✓ 🐝", "x" * 4096])
    def test_round_trip(self, size, plaintext):
        """Test decrypt(encrypt(p, k), k) == p."""
        key = os.urandom(size)
        assert decrypt(encrypt(plaintext, key), key) == plaintext

    def test_envelope_layout(self):
        """Test the envelope is prefix + base64(nonce | ciphertext | tag)."""
        envelope = encrypt("abc", KEY)
        assert envelope.startswith(ENC_PREFIX)
        raw = base64.b64decode(envelope[len(ENC_PREFIX):])
        assert len(raw) == 12 + 3 + 16

    def test_fresh_nonce_per_call(self):
        """Test encrypting twice yields different envelopes."""
        assert encrypt("same", KEY) != encrypt("same", KEY)

    def test_interop_with_raw_aesgcm(self):
        """Test envelopes built directly with AES-GCM decrypt."""
        nonce = os.urandom(12)
        ct = AESGCM(KEY).encrypt(nonce, b"SuperSecretValue", None)
        envelope = ENC_PREFIX + base64.b64encode(nonce + ct).decode("ascii")
        assert decrypt(envelope, KEY) == "SuperSecretValue"

    def test_cli_generated_value(self):
        """Test a value produced by the envbee CLI with a text key."""
        key = hashlib.sha256(b"0123456789abcdef0123456789abcdef").digest()
        envelope = (
            f"{ENC_PREFIX}d0ktKfDJB4CIPbRmXfOmVlCU8ZCx4fl/"
            "2eZtkjgbqJy3g569ZGDEqnVOP94pDfw2Jg=="
        )
        assert decrypt(envelope, key) == "super-secret-password"


class TestTamperSensitivity:
    """Tests that altered envelopes never decrypt."""

    def test_every_bit_of_ciphertext_and_tag(self):
        """Test flipping a bit anywhere after the nonce fails."""
        envelope = encrypt("tamper-me", KEY)
        total = 12 + len("tamper-me") + 16
        for index in range(12, total):
            with pytest.raises(DecryptionError):
                decrypt(flip_bit(envelope, index), KEY)

    def test_nonce_bit_flip(self):
        """Test flipping a nonce bit fails too."""
        with pytest.raises(DecryptionError):
            decrypt(flip_bit(encrypt("value", KEY), 0), KEY)

    def test_wrong_key(self):
        """Test decrypting with another key fails."""
        envelope = encrypt("value", KEY)
        with pytest.raises(DecryptionError, match="Invalid key or corrupted data"):
            decrypt(envelope, os.urandom(32))

    def test_truncated_envelope(self):
        """Test dropping the last tag byte fails."""
        raw = base64.b64decode(encrypt("value", KEY)[len(ENC_PREFIX):])
        envelope = ENC_PREFIX + base64.b64encode(raw[:-1]).decode("ascii")
        with pytest.raises(DecryptionError):
            decrypt(envelope, KEY)


class TestNoKeyPolicy:
    """Tests for the behavior without an encryption key."""

    @pytest.mark.parametrize("key", [None, b""])
    def test_encrypted_without_key_fails(self, key):
        """Test a well-formed envelope without key raises DecryptionError."""
        with pytest.raises(DecryptionError, match="no key configured"):
            decrypt(encrypt("value", KEY), key)

    @pytest.mark.parametrize("key", [None, KEY])
    def test_plain_value_passes_through(self, key):
        """Test non-prefixed values are returned unchanged."""
        assert decrypt("plain value", key) == "plain value"
        assert decrypt("", key) == ""

    def test_prefix_must_be_at_start(self):
        """Test the prefix only counts at the start of the value."""
        value = f"x{ENC_PREFIX}abc"
        assert not is_encrypted(value)
        assert decrypt(value, None) == value


class TestMalformedEnvelope:
    """Tests for envelopes that cannot be parsed."""

    def test_too_short(self):
        """Test payloads below 28 bytes are rejected."""
        envelope = ENC_PREFIX + base64.b64encode(b"\x00" * 27).decode("ascii")
        with pytest.raises(DecryptionError, match="too short"):
            decrypt(envelope, KEY)

    def test_minimum_length_is_parsed(self):
        """Test a 28-byte payload reaches authentication and fails there."""
        envelope = ENC_PREFIX + base64.b64encode(b"\x00" * 28).decode("ascii")
        with pytest.raises(DecryptionError, match="Invalid key or corrupted data"):
            decrypt(envelope, KEY)

    def test_invalid_base64(self):
        """Test non-base64 payloads are rejected."""
        with pytest.raises(DecryptionError, match="base64"):
            decrypt(ENC_PREFIX + "not*base64!", KEY)
