"""Unit tests for hashing utilities."""

import hashlib

import pytest

from dupfinder.utils.hashing import HASH_ALGORITHMS, digest_bits_for, digest_hex


class TestDigestBitsFor:
    """Tests for digest_bits_for function."""

    @pytest.mark.parametrize("algorithm", sorted(HASH_ALGORITHMS))
    def test_default_width(self, algorithm):
        """Test that every algorithm resolves to its full width by default."""
        assert digest_bits_for(algorithm) == HASH_ALGORITHMS[algorithm]

    def test_fixed_width_matching_request(self):
        """Test that requesting the native width of a fixed algorithm is allowed."""
        assert digest_bits_for("sha256", 256) == 256

    def test_fixed_width_mismatch_rejected(self):
        """Test that fixed-width algorithms reject other widths."""
        with pytest.raises(ValueError, match="fixed 256-bit digest"):
            digest_bits_for("sha256", 128)

    def test_blake2_width_must_be_byte_multiple(self):
        """Test that blake2 widths must be multiples of 8."""
        with pytest.raises(ValueError, match="multiple of 8"):
            digest_bits_for("blake2b", 100)

    def test_blake2s_width_capped(self):
        """Test that blake2s cannot exceed 256 bits."""
        with pytest.raises(ValueError):
            digest_bits_for("blake2s", 512)

    def test_unknown_algorithm(self):
        """Test that unknown algorithms are rejected."""
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            digest_bits_for("crc32")


class TestDigestHex:
    """Tests for digest_hex function."""

    def test_sha256_default(self):
        """Test that SHA-256 is the default."""
        assert digest_hex(b"hello") == hashlib.sha256(b"hello").hexdigest()

    def test_sha3(self):
        """Test a SHA-3 digest."""
        assert digest_hex(b"hello", "sha3_256") == hashlib.sha3_256(b"hello").hexdigest()

    def test_blake2b_truncated(self):
        """Test that blake2b uses the requested digest size, not a truncation."""
        expected = hashlib.blake2b(b"hello", digest_size=8).hexdigest()
        assert digest_hex(b"hello", "blake2b", 64) == expected
        assert len(expected) == 16
