"""Key normalization: map raw lines to bounded-size comparison keys.

Short lines are their own key. Lines of ``long_line_threshold`` bytes or more
are replaced by the hex digest of their bytes, so the aggregation map never
stores more than one digest per long distinct line no matter how long the
line is.

Known limitation: two distinct long lines with the same digest are merged
into one entry. Nothing detects or reports this; with a 256-bit digest the
probability is negligible for any realistic input. Ruling collisions out
completely would take a second pass that stores full strings for the
candidate keys.
"""

from typing import Optional, Tuple

from dupfinder.config.models import KeyConfig
from dupfinder.utils.hashing import DEFAULT_HASH_ALGORITHM, digest_bits_for, digest_hex

DEFAULT_LONG_LINE_THRESHOLD = 32


class KeyNormalizer:
    """Turns raw lines into NormalizedKeys.

    Lengths are measured in encoded bytes, and digests are computed over the
    same bytes. Lines are encoded with ``surrogateescape`` so lines decoded
    with that handler (undecodable input bytes) round-trip to their original
    bytes.
    """

    def __init__(
        self,
        long_line_threshold: int = DEFAULT_LONG_LINE_THRESHOLD,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
        digest_bits: Optional[int] = None,
        encoding: str = "utf-8",
    ):
        """Initialize the normalizer.

        Args:
            long_line_threshold: Lines of at least this many bytes are hashed
            hash_algorithm: Digest used for long lines
            digest_bits: Digest width for the blake2 family
            encoding: Encoding used to turn lines back into bytes

        Raises:
            ValueError: If the threshold, algorithm or width is invalid
        """
        if long_line_threshold < 1:
            raise ValueError("long_line_threshold must be at least 1")

        self.long_line_threshold = long_line_threshold
        self.hash_algorithm = hash_algorithm
        self.digest_bits = digest_bits_for(hash_algorithm, digest_bits)
        self.encoding = encoding

    @classmethod
    def from_config(cls, key_config: KeyConfig, encoding: str = "utf-8") -> "KeyNormalizer":
        return cls(
            long_line_threshold=key_config.long_line_threshold,
            hash_algorithm=key_config.hash_algorithm,
            digest_bits=key_config.digest_bits,
            encoding=encoding,
        )

    @property
    def digest_length(self) -> int:
        """Length of a digest key in hex characters."""
        return self.digest_bits // 4

    def normalize(self, line: str) -> str:
        """Return the NormalizedKey for ``line``."""
        return self.normalize_with_flag(line)[0]

    def normalize_with_flag(self, line: str) -> Tuple[str, bool]:
        """Return ``(key, hashed)`` for ``line``.

        Example:
            >>> KeyNormalizer().normalize_with_flag("short line")
            ('short line', False)
        """
        # Every character encodes to at least one byte
        if len(line) < self.long_line_threshold:
            data = line.encode(self.encoding, "surrogateescape")
            if len(data) < self.long_line_threshold:
                return line, False
        else:
            data = line.encode(self.encoding, "surrogateescape")

        return digest_hex(data, self.hash_algorithm, self.digest_bits), True


_default_normalizer = KeyNormalizer()


def normalize_key(line: str) -> str:
    """Normalize ``line`` with the default settings (32 bytes, SHA-256).

    Example:
        >>> normalize_key("x" * 31) == "x" * 31
        True
        >>> len(normalize_key("x" * 32))
        64
    """
    return _default_normalizer.normalize(line)
