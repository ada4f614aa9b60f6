"""Duplicate-line detection engine: key normalization, readers, aggregation."""

from .aggregator import Aggregator, aggregate, select_duplicates
from .detector import DuplicateDetector, detect_duplicates
from .exceptions import (
    AggregationError,
    DetectionError,
    SourceError,
    SourceOpenError,
    SourceReadError,
)
from .keys import KeyNormalizer, normalize_key
from .models import (
    DetectionResult,
    Duplicate,
    OccurrenceEntry,
    RawRecord,
    SortedDetectionResult,
    SortedRunEntry,
    SourceReadStats,
)
from .reader import SourceReader, read_source
from .sorted_path import RunTracker, SortedDetector, detect_sorted

__all__ = [
    # Entry points
    "DuplicateDetector",
    "detect_duplicates",
    "SortedDetector",
    "detect_sorted",
    # Building blocks
    "KeyNormalizer",
    "normalize_key",
    "SourceReader",
    "read_source",
    "Aggregator",
    "aggregate",
    "select_duplicates",
    "RunTracker",
    # Models
    "RawRecord",
    "OccurrenceEntry",
    "Duplicate",
    "SortedRunEntry",
    "SourceReadStats",
    "DetectionResult",
    "SortedDetectionResult",
    # Exceptions
    "DetectionError",
    "SourceError",
    "SourceOpenError",
    "SourceReadError",
    "AggregationError",
]
