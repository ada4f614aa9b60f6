"""Data models for duplicate detection runs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from dupfinder.utils.timestamps import elapsed_seconds


@dataclass(frozen=True)
class RawRecord:
    """
    One scanned line, as handed from a source reader to the aggregator.

    Attributes:
        key: NormalizedKey of the line (verbatim text or digest)
        source_id: Identifier of the source the line came from
        line_number: 1-based line number within that source
        hashed: Whether ``key`` is a digest rather than the line itself
    """

    key: str
    source_id: str
    line_number: int
    hashed: bool = False


@dataclass
class OccurrenceEntry:
    """
    Everything known about one NormalizedKey during a run.

    Attributes:
        count: Number of records seen with this key
        locations: Line numbers per source, in scan order
        hashed: Whether the key is a digest
    """

    count: int = 0
    locations: Dict[str, List[int]] = field(default_factory=dict)
    hashed: bool = False

    def record(self, source_id: str, line_number: int) -> None:
        """Count one more occurrence at ``source_id``:``line_number``."""
        self.count += 1
        line_numbers = self.locations.get(source_id)
        if line_numbers is None:
            self.locations[source_id] = [line_number]
        else:
            line_numbers.append(line_number)

    @property
    def location_count(self) -> int:
        """Total number of line numbers recorded across all sources."""
        return sum(len(line_numbers) for line_numbers in self.locations.values())


@dataclass(frozen=True)
class Duplicate:
    """A key whose count exceeded the threshold, as reported to callers."""

    key: str
    count: int
    locations: Dict[str, List[int]]
    hashed: bool = False

    @classmethod
    def from_entry(cls, key: str, entry: OccurrenceEntry) -> "Duplicate":
        return cls(
            key=key,
            count=entry.count,
            locations={source_id: list(lines) for source_id, lines in entry.locations.items()},
            hashed=entry.hashed,
        )


@dataclass(frozen=True)
class SortedRunEntry:
    """
    One contiguous run of identical lines from sorted input.

    Attributes:
        line: The line text
        count: Number of lines in the run
        start_line: Line number of the first line in the run
        end_line: Line number of the last line in the run
    """

    line: str
    count: int
    start_line: int
    end_line: int


@dataclass
class SourceReadStats:
    """
    Outcome of reading a single source.

    Attributes:
        source_id: Identifier of the source (path or stdin sentinel)
        lines_read: Number of lines read and handed to the aggregator
        opened: Whether the source could be opened
        had_errors: Whether opening or reading failed
        error_message: Error description if the source failed
        duration_seconds: Time spent reading this source
    """

    source_id: str
    lines_read: int = 0
    opened: bool = False
    had_errors: bool = False
    error_message: Optional[str] = None
    duration_seconds: float = 0.0


@dataclass
class DetectionResult:
    """
    Results of a multi-source detection run.

    Attributes:
        threshold: Threshold the duplicates were filtered with
        started_at: UTC timestamp when the run began
        finished_at: UTC timestamp when the run completed
        duplicates: Entries whose count exceeded the threshold (unordered)
        source_stats: Per-source read statistics, in the order sources were given
        distinct_keys: Number of distinct NormalizedKeys seen
        total_records: Total lines read across all sources
        had_errors: Whether any source failed
        duration_seconds: Total run time
    """

    threshold: int
    started_at: datetime
    finished_at: datetime
    duplicates: List[Duplicate] = field(default_factory=list)
    source_stats: List[SourceReadStats] = field(default_factory=list)
    distinct_keys: int = 0
    total_records: int = 0
    had_errors: bool = False
    duration_seconds: float = 0.0

    def __post_init__(self):
        """Derive totals from the per-source stats."""
        if self.source_stats:
            self.total_records = sum(s.lines_read for s in self.source_stats)
            self.had_errors = any(s.had_errors for s in self.source_stats)

        if self.duration_seconds == 0.0:
            self.duration_seconds = elapsed_seconds(self.started_at, self.finished_at)

    @property
    def failed_sources(self) -> List[SourceReadStats]:
        return [s for s in self.source_stats if s.had_errors]


@dataclass
class SortedDetectionResult:
    """
    Results of a sorted fast-path run.

    Attributes:
        source_id: The single source that was scanned
        threshold: Threshold the runs were filtered with
        started_at: UTC timestamp when the run began
        finished_at: UTC timestamp when the run completed
        runs: Runs whose count exceeded the threshold, in input order
        lines_read: Number of lines scanned
        distinct_runs: Number of runs seen, qualifying or not
        duration_seconds: Total run time
    """

    source_id: str
    threshold: int
    started_at: datetime
    finished_at: datetime
    runs: List[SortedRunEntry] = field(default_factory=list)
    lines_read: int = 0
    distinct_runs: int = 0
    duration_seconds: float = 0.0

    def __post_init__(self):
        if self.duration_seconds == 0.0:
            self.duration_seconds = elapsed_seconds(self.started_at, self.finished_at)
