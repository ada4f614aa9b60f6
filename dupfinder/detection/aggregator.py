"""Aggregation of RawRecords into per-key occurrence entries.

The aggregator is the only writer of its mapping. Readers never touch it;
they hand records over through a queue, so no lock guards the mapping.
"""

import queue
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from dupfinder.logging import get_logger

from .models import Duplicate, OccurrenceEntry, RawRecord

logger = get_logger(__name__, component="aggregator")

# Put on the handoff queue once every reader has finished
END_OF_INPUT = None


class Aggregator:
    """
    Owns the NormalizedKey -> OccurrenceEntry mapping for one run.

    Entries are created on first sighting and updated on every later one;
    none is removed before the run ends.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, OccurrenceEntry] = {}
        self.records_consumed = 0

    def add(self, record: RawRecord) -> None:
        """Count one record."""
        entry = self._entries.get(record.key)
        if entry is None:
            entry = OccurrenceEntry(hashed=record.hashed)
            self._entries[record.key] = entry
        entry.record(record.source_id, record.line_number)
        self.records_consumed += 1

    def consume(self, records: "queue.Queue[Optional[RawRecord]]") -> Dict[str, OccurrenceEntry]:
        """
        Add records from ``records`` until END_OF_INPUT arrives.

        Returns:
            The mapping, owned by this aggregator
        """
        while True:
            record = records.get()
            if record is END_OF_INPUT:
                break
            self.add(record)
        return self._entries

    @property
    def entries(self) -> Dict[str, OccurrenceEntry]:
        return self._entries

    def duplicates(self, threshold: int) -> List[Duplicate]:
        """Entries whose count is strictly greater than ``threshold``.

        Order is unspecified.
        """
        return [
            Duplicate.from_entry(key, entry)
            for key, entry in select_duplicates(self._entries, threshold)
        ]


def select_duplicates(
    entries: Dict[str, OccurrenceEntry], threshold: int
) -> Iterator[Tuple[str, OccurrenceEntry]]:
    """Yield ``(key, entry)`` pairs whose count exceeds ``threshold``."""
    for key, entry in entries.items():
        if entry.count > threshold:
            yield key, entry


def drain(records: "queue.Queue[Optional[RawRecord]]") -> int:
    """
    Discard records until END_OF_INPUT so blocked readers can finish.

    Used after the aggregator has failed; without it a reader waiting on a
    full queue would never return and the run would hang.

    Returns:
        Number of records discarded
    """
    discarded = 0
    while records.get() is not END_OF_INPUT:
        discarded += 1
    return discarded


def aggregate(records: Iterable[RawRecord], threshold: int) -> List[Duplicate]:
    """
    Aggregate an already-collected stream of records in the calling thread.

    Example:
        >>> records = [RawRecord("x", "a.txt", 1), RawRecord("x", "a.txt", 3)]
        >>> [d.count for d in aggregate(records, threshold=1)]
        [2]
    """
    aggregator = Aggregator()
    for record in records:
        aggregator.add(record)

    logger.debug(
        "Aggregation completed",
        extra={
            "event": "aggregation.completed",
            "records": aggregator.records_consumed,
            "distinct_keys": len(aggregator.entries),
        },
    )
    return aggregator.duplicates(threshold)
