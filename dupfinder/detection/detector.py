"""Multi-source duplicate detection.

One reader thread per source feeds a single aggregator thread through a
bounded queue. With the default capacity of one record, a reader hands each
record over almost directly; aggregation is much cheaper than file I/O, so a
larger buffer would only hold records longer without raising throughput.

There is no cancellation or timeout: a run reads every source to the end.
"""

import queue
import threading
from typing import List, Optional, Sequence, TextIO
from uuid import uuid4

from dupfinder.config.models import AppConfig, DetectionConfig, KeyConfig
from dupfinder.logging import get_logger
from dupfinder.logging.context import log_context, run_in_context
from dupfinder.utils.timestamps import utc_now

from .aggregator import END_OF_INPUT, Aggregator, drain
from .exceptions import AggregationError
from .keys import KeyNormalizer
from .models import DetectionResult, RawRecord, SourceReadStats
from .reader import SourceReader

logger = get_logger(__name__, component="detector")


class DuplicateDetector:
    """
    Finds lines that occur more than ``threshold`` times across sources.

    A source that cannot be opened or read is reported in the result's
    ``source_stats`` and skipped; the remaining sources are still counted.
    """

    def __init__(
        self,
        detection_config: Optional[DetectionConfig] = None,
        key_config: Optional[KeyConfig] = None,
        stdin: Optional[TextIO] = None,
    ):
        """
        Initialize the detector.

        Args:
            detection_config: Threshold, stdin sentinel, queue size, encoding
            key_config: Long-line threshold and hash settings
            stdin: Stream read for the stdin sentinel (defaults to sys.stdin)
        """
        self.detection_config = detection_config or DetectionConfig()
        self.key_config = key_config or KeyConfig()

        encoding = self.detection_config.encoding
        self.reader = SourceReader(
            normalizer=KeyNormalizer.from_config(self.key_config, encoding=encoding),
            stdin_sentinel=self.detection_config.stdin_sentinel,
            encoding=encoding,
            stdin=stdin,
        )

    @classmethod
    def from_config(cls, app_config: AppConfig, stdin: Optional[TextIO] = None) -> "DuplicateDetector":
        return cls(app_config.detection, app_config.keys, stdin=stdin)

    def detect(self, sources: Sequence[str], threshold: Optional[int] = None) -> DetectionResult:
        """
        Run detection over ``sources``.

        Args:
            sources: File paths and/or the stdin sentinel. An empty sequence
                reads standard input. Repeated identifiers are read once.
            threshold: Overrides the configured threshold

        Returns:
            DetectionResult with the qualifying duplicates (unordered) and
            per-source stats in the order the sources were given

        Raises:
            AggregationError: If the aggregator failed; no result is returned
        """
        if threshold is None:
            threshold = self.detection_config.threshold
        if threshold < 0:
            raise ValueError("threshold must be >= 0")

        source_ids = self._unique_sources(sources)
        started_at = utc_now()

        with log_context(run_id=uuid4().hex, mode="multi-source"):
            logger.info(
                f"Detection started over {len(source_ids)} sources",
                extra={
                    "event": "detection.run.started",
                    "source_count": len(source_ids),
                    "threshold": threshold,
                },
            )

            records: "queue.Queue[Optional[RawRecord]]" = queue.Queue(
                maxsize=self.detection_config.queue_size
            )
            aggregator = Aggregator()
            failures: List[BaseException] = []

            aggregator_thread = threading.Thread(
                target=run_in_context(self._run_aggregator),
                args=(aggregator, records, failures),
                name="dupfinder-aggregator",
                daemon=True,
            )
            aggregator_thread.start()

            source_stats: List[Optional[SourceReadStats]] = [None] * len(source_ids)
            reader_threads = []
            for index, source_id in enumerate(source_ids):
                thread = threading.Thread(
                    target=run_in_context(self._run_reader),
                    args=(index, source_id, records, source_stats),
                    name=f"dupfinder-reader-{index}",
                    daemon=True,
                )
                thread.start()
                reader_threads.append(thread)

            for thread in reader_threads:
                thread.join()

            # Every reader is done; nothing else will be put on the queue
            records.put(END_OF_INPUT)
            aggregator_thread.join()

            if failures:
                raise AggregationError(f"Aggregation failed: {failures[0]}") from failures[0]

            result = DetectionResult(
                threshold=threshold,
                started_at=started_at,
                finished_at=utc_now(),
                duplicates=aggregator.duplicates(threshold),
                source_stats=[s for s in source_stats if s is not None],
                distinct_keys=len(aggregator.entries),
            )

            logger.info(
                f"Detection completed: {len(result.duplicates)} duplicated lines",
                extra={
                    "event": "detection.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "total_records": result.total_records,
                    "distinct_keys": result.distinct_keys,
                    "duplicates": len(result.duplicates),
                    "failed_sources": len(result.failed_sources),
                    "had_errors": result.had_errors,
                },
            )
            return result

    def _unique_sources(self, sources: Sequence[str]) -> List[str]:
        if not sources:
            return [self.detection_config.stdin_sentinel]

        unique: List[str] = []
        for source_id in sources:
            if source_id in unique:
                logger.warning(
                    f"Source {source_id} given more than once, reading it once",
                    extra={"event": "detection.source.repeated", "source_id": source_id},
                )
                continue
            unique.append(source_id)
        return unique

    def _run_reader(
        self,
        index: int,
        source_id: str,
        records: "queue.Queue[Optional[RawRecord]]",
        source_stats: List[Optional[SourceReadStats]],
    ) -> None:
        try:
            source_stats[index] = self.reader.read_into(source_id, records)
        except Exception as e:
            # Anything read_into does not contain itself is a bug, but it
            # still only costs this source
            logger.error(
                f"Unexpected error reading {source_id}: {e}",
                extra={"event": "source.read.failed", "source_id": source_id, "error": str(e)},
                exc_info=True,
            )
            source_stats[index] = SourceReadStats(
                source_id=source_id, had_errors=True, error_message=str(e)
            )

    def _run_aggregator(
        self,
        aggregator: Aggregator,
        records: "queue.Queue[Optional[RawRecord]]",
        failures: List[BaseException],
    ) -> None:
        try:
            aggregator.consume(records)
        except Exception as e:
            failures.append(e)
            logger.error(
                f"Aggregation failed: {e}",
                extra={"event": "aggregation.failed", "error": str(e)},
                exc_info=True,
            )
            drain(records)
            return

        logger.debug(
            "Aggregation completed",
            extra={
                "event": "aggregation.completed",
                "records": aggregator.records_consumed,
                "distinct_keys": len(aggregator.entries),
            },
        )


def detect_duplicates(threshold: int, *sources: str, **kwargs) -> DetectionResult:
    """
    Detect duplicated lines across ``sources`` with default settings.

    Keyword arguments are passed to DuplicateDetector.

    Example:
        >>> result = detect_duplicates(1, "a.txt", "b.txt")
        >>> [(d.key, d.count) for d in result.duplicates]
        [('x', 3)]
    """
    return DuplicateDetector(**kwargs).detect(list(sources), threshold=threshold)
