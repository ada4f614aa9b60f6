"""Source readers: scan one file or standard input into RawRecords."""

import queue
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO, Tuple

from dupfinder.logging import get_logger
from dupfinder.logging.context import log_context

from .exceptions import SourceOpenError, SourceReadError
from .keys import KeyNormalizer
from .models import RawRecord, SourceReadStats

logger = get_logger(__name__, component="reader")

DEFAULT_STDIN_SENTINEL = "-"


def strip_line_ending(raw: str) -> str:
    """Drop a trailing ``\\n`` and at most one ``\\r`` before it."""
    if raw.endswith("\n"):
        raw = raw[:-1]
    if raw.endswith("\r"):
        raw = raw[:-1]
    return raw


class SourceReader:
    """
    Opens sources and turns their lines into RawRecords.

    A source identifier equal to ``stdin_sentinel`` reads standard input;
    anything else is a file path. Files are decoded with ``surrogateescape``
    so arbitrary bytes survive into the key, and split on ``\\n`` only.
    """

    def __init__(
        self,
        normalizer: Optional[KeyNormalizer] = None,
        stdin_sentinel: str = DEFAULT_STDIN_SENTINEL,
        encoding: str = "utf-8",
        stdin: Optional[TextIO] = None,
    ):
        """
        Initialize the reader.

        Args:
            normalizer: Key normalizer (defaults to 32 bytes / SHA-256)
            stdin_sentinel: Source identifier meaning standard input
            encoding: Text encoding of file sources
            stdin: Stream used for the stdin sentinel (defaults to sys.stdin)
        """
        self.normalizer = normalizer or KeyNormalizer(encoding=encoding)
        self.stdin_sentinel = stdin_sentinel
        self.encoding = encoding
        self._stdin = stdin

    def is_stdin(self, source_id: str) -> bool:
        return source_id == self.stdin_sentinel

    @contextmanager
    def open_source(self, source_id: str) -> Iterator[TextIO]:
        """
        Open a source for reading.

        Files are closed when the block exits, on success and on error.
        Standard input is never closed.

        Raises:
            SourceOpenError: If the file cannot be opened
        """
        if self.is_stdin(source_id):
            yield self._stdin if self._stdin is not None else sys.stdin
            return

        try:
            handle = open(
                source_id,
                "r",
                encoding=self.encoding,
                errors="surrogateescape",
                newline="\n",
            )
        except OSError as e:
            reason = e.strerror or str(e)
            raise SourceOpenError(f"Cannot open {source_id}: {reason}", source_id) from e

        with handle:
            yield handle

    def scan_lines(self, handle: TextIO, source_id: str) -> Iterator[Tuple[int, str]]:
        """
        Yield ``(line_number, line)`` pairs, numbering from 1.

        Raises:
            SourceReadError: If reading or decoding fails part-way through
        """
        line_number = 0
        try:
            for raw in handle:
                line_number += 1
                yield line_number, strip_line_ending(raw)
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(
                f"Error reading {source_id} after line {line_number}: {e}",
                source_id,
                line_number,
            ) from e

    def read_into(self, source_id: str, records: "queue.Queue[RawRecord]") -> SourceReadStats:
        """
        Scan a source and put one RawRecord per line onto ``records``.

        Failures are contained to this source: an open failure contributes
        no records, and a read failure ends the source after the records
        already emitted. Both are logged and recorded in the returned stats
        rather than raised.

        Blocks whenever ``records`` is full.

        Args:
            source_id: Path or stdin sentinel
            records: Handoff queue shared with the aggregator

        Returns:
            SourceReadStats for this source
        """
        stats = SourceReadStats(source_id=source_id)
        started = time.monotonic()
        normalize = self.normalizer.normalize_with_flag

        with log_context(source_id=source_id):
            logger.debug(
                f"Reading source {source_id}",
                extra={"event": "source.read.started", "stdin": self.is_stdin(source_id)},
            )

            try:
                with self.open_source(source_id) as handle:
                    stats.opened = True
                    for line_number, line in self.scan_lines(handle, source_id):
                        key, hashed = normalize(line)
                        records.put(RawRecord(key, source_id, line_number, hashed))
                        stats.lines_read = line_number

            except SourceOpenError as e:
                stats.had_errors = True
                stats.error_message = str(e)
                logger.error(
                    f"Error opening {source_id}, discarding it",
                    extra={"event": "source.open.failed", "error": str(e)},
                )

            except SourceReadError as e:
                stats.had_errors = True
                stats.error_message = str(e)
                logger.error(
                    f"Error reading {source_id}, keeping the first {stats.lines_read} lines",
                    extra={
                        "event": "source.read.failed",
                        "error": str(e),
                        "line_number": e.line_number,
                    },
                )

            finally:
                stats.duration_seconds = time.monotonic() - started

            if not stats.had_errors:
                logger.debug(
                    f"Finished reading {source_id}",
                    extra={
                        "event": "source.read.completed",
                        "lines_read": stats.lines_read,
                        "duration_seconds": round(stats.duration_seconds, 4),
                    },
                )

        return stats


def read_source(
    source_id: str,
    records: "queue.Queue[RawRecord]",
    normalizer: Optional[KeyNormalizer] = None,
    stdin_sentinel: str = DEFAULT_STDIN_SENTINEL,
) -> SourceReadStats:
    """Scan one source into ``records`` with a throwaway SourceReader."""
    reader = SourceReader(normalizer=normalizer, stdin_sentinel=stdin_sentinel)
    return reader.read_into(source_id, records)
