"""Duplicate detection for a single, already sorted source.

When identical lines are contiguous, a duplicate is fully described by the
first and last line number of its run, so only one run is held open at a
time and only qualifying runs are kept. Sortedness is the caller's
responsibility and is not checked: on unsorted input each contiguous run is
reported on its own, and the same line may appear in several entries.

Unlike the multi-source path, failing to open or read the source is fatal:
runs from a partially read sorted file say nothing reliable about the file.
"""

from typing import List, Optional, TextIO
from uuid import uuid4

from dupfinder.config.models import AppConfig, DetectionConfig
from dupfinder.logging import get_logger
from dupfinder.logging.context import log_context
from dupfinder.utils.timestamps import utc_now

from .models import SortedDetectionResult, SortedRunEntry
from .reader import SourceReader

logger = get_logger(__name__, component="sorted")


class RunTracker:
    """
    State machine over consecutive lines.

    States are "no run open" and "run open (line, start_line)". Every line
    either extends the open run or closes it at the previous line number and
    opens a new one. ``finish`` must be called after the last line to close
    the final run.
    """

    def __init__(self, threshold: int) -> None:
        self.threshold = threshold
        self.runs: List[SortedRunEntry] = []
        self.distinct_runs = 0
        self._open = False
        self._line = ""
        self._start_line = 0
        self._count = 0

    def feed(self, line_number: int, line: str) -> None:
        if self._open and line == self._line:
            self._count += 1
            return

        self._close(end_line=line_number - 1)
        self._open = True
        self._line = line
        self._start_line = line_number
        self._count = 1

    def finish(self, last_line_number: int) -> List[SortedRunEntry]:
        """Close the open run, if any, and return the qualifying runs."""
        self._close(end_line=last_line_number)
        return self.runs

    def _close(self, end_line: int) -> None:
        if not self._open:
            return

        self.distinct_runs += 1
        if self._count > self.threshold:
            self.runs.append(
                SortedRunEntry(
                    line=self._line,
                    count=self._count,
                    start_line=self._start_line,
                    end_line=end_line,
                )
            )
        self._open = False


class SortedDetector:
    """Runs the sorted fast path over one source."""

    def __init__(
        self,
        detection_config: Optional[DetectionConfig] = None,
        stdin: Optional[TextIO] = None,
    ):
        self.detection_config = detection_config or DetectionConfig()
        self.reader = SourceReader(
            stdin_sentinel=self.detection_config.stdin_sentinel,
            encoding=self.detection_config.encoding,
            stdin=stdin,
        )

    @classmethod
    def from_config(cls, app_config: AppConfig, stdin: Optional[TextIO] = None) -> "SortedDetector":
        return cls(app_config.detection, stdin=stdin)

    def detect(self, source_id: str, threshold: Optional[int] = None) -> SortedDetectionResult:
        """
        Scan ``source_id`` once and report runs longer than ``threshold``.

        Lines are compared verbatim; no key hashing is needed since only
        the current run's line is held.

        Raises:
            SourceOpenError: If the source cannot be opened
            SourceReadError: If reading fails part-way through
        """
        if threshold is None:
            threshold = self.detection_config.threshold
        if threshold < 0:
            raise ValueError("threshold must be >= 0")

        started_at = utc_now()
        tracker = RunTracker(threshold)
        line_number = 0

        with log_context(run_id=uuid4().hex, mode="sorted", source_id=source_id):
            logger.info(
                f"Sorted detection started on {source_id}",
                extra={"event": "sorted.run.started", "threshold": threshold},
            )

            with self.reader.open_source(source_id) as handle:
                for line_number, line in self.reader.scan_lines(handle, source_id):
                    tracker.feed(line_number, line)

            result = SortedDetectionResult(
                source_id=source_id,
                threshold=threshold,
                started_at=started_at,
                finished_at=utc_now(),
                runs=tracker.finish(line_number),
                lines_read=line_number,
                distinct_runs=tracker.distinct_runs,
            )

            logger.info(
                f"Sorted detection completed: {len(result.runs)} duplicated lines",
                extra={
                    "event": "sorted.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "lines_read": result.lines_read,
                    "distinct_runs": result.distinct_runs,
                    "duplicates": len(result.runs),
                },
            )
            return result


def detect_sorted(source_id: str, threshold: int = 1, **kwargs) -> SortedDetectionResult:
    """
    Sorted fast path with default settings.

    Example:
        >>> result = detect_sorted("sorted.txt", threshold=1)
        >>> [(r.line, r.count, r.start_line, r.end_line) for r in result.runs]
        [('a', 3, 1, 3), ('b', 2, 4, 5)]
    """
    return SortedDetector(**kwargs).detect(source_id, threshold=threshold)
