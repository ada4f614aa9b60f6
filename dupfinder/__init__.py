"""dupfinder: concurrent duplicate-line detection across files and stdin."""

from .detection import (
    DetectionResult,
    DuplicateDetector,
    SortedDetectionResult,
    SortedDetector,
    detect_duplicates,
    detect_sorted,
    normalize_key,
)

__version__ = "0.1.0"

__all__ = [
    "DuplicateDetector",
    "SortedDetector",
    "DetectionResult",
    "SortedDetectionResult",
    "detect_duplicates",
    "detect_sorted",
    "normalize_key",
    "__version__",
]
