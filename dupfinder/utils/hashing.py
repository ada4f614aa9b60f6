"""Hashing helpers used to build fixed-size comparison keys.

Only algorithms from the SHA-2, SHA-3 and BLAKE2 families are offered: a
NormalizedKey digest is compared for equality and never for security, but a
weak or short hash would make key collisions between distinct long lines
likely.
"""

import hashlib
from typing import Dict, Optional

# Digest sizes in bits; blake2 sizes are the maximum and may be lowered.
HASH_ALGORITHMS: Dict[str, int] = {
    "sha256": 256,
    "sha512": 512,
    "sha3_256": 256,
    "sha3_512": 512,
    "blake2b": 512,
    "blake2s": 256,
}

VARIABLE_WIDTH_ALGORITHMS = frozenset({"blake2b", "blake2s"})

DEFAULT_HASH_ALGORITHM = "sha256"


def digest_bits_for(algorithm: str, digest_bits: Optional[int] = None) -> int:
    """Resolve the effective digest width of an algorithm.

    Args:
        algorithm: One of HASH_ALGORITHMS
        digest_bits: Requested width; only honoured by the blake2 family

    Returns:
        Digest width in bits

    Raises:
        ValueError: If the algorithm is unknown or the width is not supported
    """
    if algorithm not in HASH_ALGORITHMS:
        raise ValueError(
            f"Unsupported hash algorithm '{algorithm}'. "
            f"Choose one of: {', '.join(sorted(HASH_ALGORITHMS))}"
        )

    max_bits = HASH_ALGORITHMS[algorithm]
    if digest_bits is None:
        return max_bits

    if algorithm not in VARIABLE_WIDTH_ALGORITHMS:
        if digest_bits != max_bits:
            raise ValueError(
                f"{algorithm} has a fixed {max_bits}-bit digest; "
                "use blake2b or blake2s for a custom width"
            )
        return max_bits

    if digest_bits % 8 != 0 or not 8 <= digest_bits <= max_bits:
        raise ValueError(
            f"digest_bits for {algorithm} must be a multiple of 8 between 8 and {max_bits}"
        )
    return digest_bits


def digest_hex(data: bytes, algorithm: str = DEFAULT_HASH_ALGORITHM, digest_bits: Optional[int] = None) -> str:
    """Hex digest of ``data``.

    Args:
        data: Bytes to hash
        algorithm: One of HASH_ALGORITHMS
        digest_bits: Optional width for the blake2 family

    Returns:
        Lowercase hexadecimal digest, ``digest_bits // 4`` characters long

    Example:
        >>> len(digest_hex(b"hello"))
        64
    """
    bits = digest_bits_for(algorithm, digest_bits)

    if algorithm in VARIABLE_WIDTH_ALGORITHMS:
        hash_obj = getattr(hashlib, algorithm)(data, digest_size=bits // 8)
    else:
        hash_obj = hashlib.new(algorithm, data)
    return hash_obj.hexdigest()
