"""Utility functions for hashing and time handling."""

from .hashing import HASH_ALGORITHMS, digest_bits_for, digest_hex
from .timestamps import elapsed_seconds, ensure_utc, format_timestamp, utc_now

__all__ = [
    # Hashing
    "HASH_ALGORITHMS",
    "digest_bits_for",
    "digest_hex",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "elapsed_seconds",
]
