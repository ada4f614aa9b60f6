"""Build plain report payloads from detection results.

Both renderers (text templates and JSON) work from these dictionaries so
that ordering rules live in one place.
"""

from typing import Any, Dict, List

from dupfinder.detection.models import (
    DetectionResult,
    Duplicate,
    SortedDetectionResult,
    SortedRunEntry,
)
from dupfinder.utils.timestamps import format_timestamp

SORT_ORDERS = ("none", "count", "key")


def order_duplicates(duplicates: List[Duplicate], sort: str = "none") -> List[Duplicate]:
    """Order multi-source entries.

    ``none`` keeps the aggregator's order, which is unspecified.
    ``count`` is highest count first, ties broken by key.
    """
    _check_sort(sort)
    if sort == "count":
        return sorted(duplicates, key=lambda d: (-d.count, d.key))
    if sort == "key":
        return sorted(duplicates, key=lambda d: d.key)
    return list(duplicates)


def order_runs(runs: List[SortedRunEntry], sort: str = "none") -> List[SortedRunEntry]:
    """Order sorted-path runs. ``none`` keeps input order."""
    _check_sort(sort)
    if sort == "count":
        return sorted(runs, key=lambda r: (-r.count, r.start_line))
    if sort == "key":
        return sorted(runs, key=lambda r: (r.line, r.start_line))
    return list(runs)


def build_detection_payload(result: DetectionResult, sort: str = "none") -> Dict[str, Any]:
    """Build the report payload for a multi-source run.

    Locations of each entry are listed in the order the sources were given
    to the run, not in the order their records happened to arrive.

    Returns:
        Dictionary with keys:
        - mode: "multi-source"
        - threshold, started_at, finished_at, duration_seconds
        - total_records, distinct_keys, had_errors
        - entries: list of {key, count, hashed, locations: [{source, line_numbers}]}
        - sources: list of {source, lines_read, opened, error}
    """
    source_order = {stats.source_id: index for index, stats in enumerate(result.source_stats)}

    entries = []
    for duplicate in order_duplicates(result.duplicates, sort):
        source_ids = sorted(
            duplicate.locations,
            key=lambda source_id: (source_order.get(source_id, len(source_order)), source_id),
        )
        entries.append(
            {
                "key": duplicate.key,
                "count": duplicate.count,
                "hashed": duplicate.hashed,
                "locations": [
                    {"source": source_id, "line_numbers": duplicate.locations[source_id]}
                    for source_id in source_ids
                ],
            }
        )

    return {
        "mode": "multi-source",
        "threshold": result.threshold,
        "started_at": format_timestamp(result.started_at),
        "finished_at": format_timestamp(result.finished_at),
        "duration_seconds": round(result.duration_seconds, 6),
        "total_records": result.total_records,
        "distinct_keys": result.distinct_keys,
        "had_errors": result.had_errors,
        "entries": entries,
        "sources": [
            {
                "source": stats.source_id,
                "lines_read": stats.lines_read,
                "opened": stats.opened,
                "error": stats.error_message,
            }
            for stats in result.source_stats
        ],
    }


def build_sorted_payload(result: SortedDetectionResult, sort: str = "none") -> Dict[str, Any]:
    """Build the report payload for a sorted fast-path run."""
    return {
        "mode": "sorted",
        "source": result.source_id,
        "threshold": result.threshold,
        "started_at": format_timestamp(result.started_at),
        "finished_at": format_timestamp(result.finished_at),
        "duration_seconds": round(result.duration_seconds, 6),
        "lines_read": result.lines_read,
        "distinct_runs": result.distinct_runs,
        "entries": [
            {
                "line": run.line,
                "count": run.count,
                "start_line": run.start_line,
                "end_line": run.end_line,
            }
            for run in order_runs(result.runs, sort)
        ],
    }


def _check_sort(sort: str) -> None:
    if sort not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order: {sort}. Must be one of: {', '.join(SORT_ORDERS)}")
