"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

from dupfinder.utils.hashing import DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS

# Above this the hashed key saves little compared with storing the line
LARGE_LONG_LINE_THRESHOLD = 4096


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    detection = config_dict.get("detection", {})
    if isinstance(detection, dict):
        threshold = detection.get("threshold")
        if threshold == 0:
            warning_messages.append(
                "detection.threshold is 0: every distinct line will be reported"
            )

        queue_size = detection.get("queue_size")
        if queue_size == 0:
            warning_messages.append(
                "detection.queue_size is 0 (unbounded): memory grows if readers "
                "outpace the aggregator"
            )

    keys = config_dict.get("keys", {})
    if isinstance(keys, dict):
        long_line_threshold = keys.get("long_line_threshold")
        if isinstance(long_line_threshold, int) and long_line_threshold > LARGE_LONG_LINE_THRESHOLD:
            warning_messages.append(
                f"Large keys.long_line_threshold ({long_line_threshold}) keeps most lines "
                "verbatim in memory"
            )

        digest_bits = keys.get("digest_bits")
        if not isinstance(digest_bits, int):
            digest_bits = HASH_ALGORITHMS.get(str(keys.get("hash_algorithm", DEFAULT_HASH_ALGORITHM)))
        if isinstance(digest_bits, int) and isinstance(long_line_threshold, int):
            if digest_bits // 4 < long_line_threshold:
                warning_messages.append(
                    f"{digest_bits}-bit digests are shorter than "
                    f"long_line_threshold ({long_line_threshold}): a short line made of hex "
                    "digits can share a key with a hashed long line"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
