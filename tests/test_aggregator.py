"""Unit tests for the aggregator."""

import queue
import threading

import pytest

from dupfinder.detection.aggregator import (
    END_OF_INPUT,
    Aggregator,
    aggregate,
    drain,
    select_duplicates,
)
from dupfinder.detection.models import Duplicate, OccurrenceEntry, RawRecord


@pytest.fixture
def two_source_records():
    """Records for A = [x, y, x] and B = [x], interleaved."""
    return [
        RawRecord("x", "A", 1),
        RawRecord("x", "B", 1),
        RawRecord("y", "A", 2),
        RawRecord("x", "A", 3),
    ]


class TestOccurrenceEntry:
    """Tests for OccurrenceEntry bookkeeping."""

    def test_record_creates_source_list_lazily(self):
        """Test that a source's list appears on its first occurrence."""
        entry = OccurrenceEntry()
        entry.record("A", 4)

        assert entry.count == 1
        assert entry.locations == {"A": [4]}

    def test_record_appends_in_order(self):
        """Test that line numbers are appended in arrival order."""
        entry = OccurrenceEntry()
        for line_number in (1, 5, 9):
            entry.record("A", line_number)
        entry.record("B", 2)

        assert entry.count == 4
        assert entry.locations == {"A": [1, 5, 9], "B": [2]}
        assert entry.location_count == entry.count


class TestAggregator:
    """Tests for the Aggregator class."""

    def test_first_sighting_creates_entry(self):
        """Test that an unseen key gets an entry with count 1."""
        aggregator = Aggregator()
        aggregator.add(RawRecord("x", "A", 7))

        entry = aggregator.entries["x"]
        assert entry.count == 1
        assert entry.locations == {"A": [7]}

    def test_counts_and_locations(self, two_source_records):
        """Test the two-source scenario from the detector contract."""
        aggregator = Aggregator()
        for record in two_source_records:
            aggregator.add(record)

        assert aggregator.entries["x"].count == 3
        assert aggregator.entries["x"].locations == {"A": [1, 3], "B": [1]}
        assert aggregator.entries["y"].count == 1
        assert aggregator.records_consumed == 4

    def test_duplicates_strictly_above_threshold(self, two_source_records):
        """Test that only counts strictly greater than the threshold qualify."""
        aggregator = Aggregator()
        for record in two_source_records:
            aggregator.add(record)

        assert [d.key for d in aggregator.duplicates(1)] == ["x"]
        assert aggregator.duplicates(3) == []
        assert sorted(d.key for d in aggregator.duplicates(0)) == ["x", "y"]

    def test_hashed_flag_carried_to_duplicates(self):
        """Test that a digest key is reported as hashed."""
        aggregator = Aggregator()
        aggregator.add(RawRecord("f" * 64, "A", 1, hashed=True))
        aggregator.add(RawRecord("f" * 64, "A", 2, hashed=True))

        (duplicate,) = aggregator.duplicates(1)
        assert duplicate.hashed is True

    def test_duplicates_are_snapshots(self):
        """Test that reported duplicates do not alias the live mapping."""
        aggregator = Aggregator()
        aggregator.add(RawRecord("x", "A", 1))
        aggregator.add(RawRecord("x", "A", 2))

        (duplicate,) = aggregator.duplicates(1)
        aggregator.add(RawRecord("x", "A", 3))

        assert duplicate.locations == {"A": [1, 2]}

    def test_consume_stops_at_end_of_input(self, two_source_records):
        """Test that consume returns the mapping once END_OF_INPUT arrives."""
        records = queue.Queue()
        for record in two_source_records:
            records.put(record)
        records.put(END_OF_INPUT)

        entries = Aggregator().consume(records)

        assert set(entries) == {"x", "y"}
        assert records.empty()

    def test_consume_from_concurrent_producers(self):
        """Test that consume sees every record from several producer threads."""
        records = queue.Queue(maxsize=1)
        aggregator = Aggregator()
        consumer = threading.Thread(target=aggregator.consume, args=(records,))
        consumer.start()

        def produce(source_id):
            for line_number in range(1, 201):
                records.put(RawRecord("same", source_id, line_number))

        producers = [threading.Thread(target=produce, args=(f"s{i}",)) for i in range(5)]
        for producer in producers:
            producer.start()
        for producer in producers:
            producer.join()
        records.put(END_OF_INPUT)
        consumer.join(timeout=10)

        entry = aggregator.entries["same"]
        assert entry.count == 1000
        for i in range(5):
            assert entry.locations[f"s{i}"] == list(range(1, 201))


def test_select_duplicates():
    """Test filtering a mapping by threshold."""
    entries = {"a": OccurrenceEntry(count=3), "b": OccurrenceEntry(count=1)}

    assert [key for key, _ in select_duplicates(entries, 1)] == ["a"]


def test_aggregate_function(two_source_records):
    """Test the single-threaded aggregate entry point."""
    duplicates = aggregate(two_source_records, threshold=1)

    assert duplicates == [Duplicate(key="x", count=3, locations={"A": [1, 3], "B": [1]})]


def test_drain_discards_until_end_of_input():
    """Test that drain consumes records up to and including END_OF_INPUT."""
    records = queue.Queue()
    records.put(RawRecord("x", "A", 1))
    records.put(RawRecord("x", "A", 2))
    records.put(END_OF_INPUT)
    records.put(RawRecord("after", "A", 3))

    assert drain(records) == 2
    assert records.get_nowait().key == "after"
