"""Exceptions raised by the detection engine."""


class DetectionError(Exception):
    """Base exception for all detection errors.

    Catching this catches every failure the engine reports, whether it came
    from a source or from aggregation.
    """

    pass


class SourceError(DetectionError):
    """A single source could not be read.

    In a multi-source run this is contained to the failing source: it is
    logged and recorded in that source's stats while the other sources carry
    on. On the sorted path it propagates to the caller.
    """

    def __init__(self, message: str, source_id: str) -> None:
        """Initialize with the identifier of the failing source.

        Args:
            message: Human-readable error message
            source_id: Identifier of the source (path or stdin sentinel)
        """
        super().__init__(message)
        self.source_id = source_id


class SourceOpenError(SourceError):
    """The source could not be opened (missing file, permissions, directory)."""

    pass


class SourceReadError(SourceError):
    """An I/O or decoding error happened part-way through a source."""

    def __init__(self, message: str, source_id: str, line_number: int) -> None:
        """Initialize with the last line successfully read before the failure.

        Args:
            message: Human-readable error message
            source_id: Identifier of the source
            line_number: Number of lines read before the error
        """
        super().__init__(message, source_id)
        self.line_number = line_number


class AggregationError(DetectionError):
    """The aggregator failed while consuming records."""

    pass
