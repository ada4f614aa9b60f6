"""Command-line entry point for dupfinder."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from dupfinder.config.environment import EnvironmentConfig
from dupfinder.config.exceptions import ConfigurationError
from dupfinder.config.loader import apply_overrides, load_config
from dupfinder.config.models import AppConfig
from dupfinder.detection import (
    AggregationError,
    DuplicateDetector,
    SortedDetector,
    SourceError,
)
from dupfinder.logging import get_logger
from dupfinder.logging.config import configure_logging
from dupfinder.reporting import ReportRenderError, ReportRenderer
from dupfinder.utils.hashing import HASH_ALGORITHMS

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_FAILURE = 1
# The run finished but at least one source could not be read
EXIT_PARTIAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dupfinder",
        description="Report lines that occur more than a threshold number of times, "
        "with every file and line number they occur at",
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="Files to scan; '-' (or the configured sentinel) reads standard input. "
        "Standard input is read when no source is given.",
    )
    parser.add_argument(
        "-n",
        "--threshold",
        type=int,
        default=None,
        help="Report lines occurring more than N times (default: 1)",
    )
    parser.add_argument(
        "--sorted",
        action="store_true",
        help="Input is a single sorted source: report [first,last] line of each run",
    )
    parser.add_argument(
        "--format",
        dest="report_format",
        default=None,
        choices=["text", "json"],
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--sort",
        default=None,
        choices=["none", "count", "key"],
        help="Order of report entries (default: none)",
    )
    parser.add_argument(
        "--long-line-threshold",
        type=int,
        default=None,
        help="Lines of at least this many bytes are compared by digest (default: 32)",
    )
    parser.add_argument(
        "--hash-algorithm",
        default=None,
        choices=sorted(HASH_ALGORITHMS),
        help="Digest used for long lines (default: sha256)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: dupfinder.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def load_runtime_config(args: argparse.Namespace) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply CLI overrides.

    Precedence: CLI > environment > config file > defaults.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(args.config)

    if args.sorted and len(args.sources) > 1:
        raise ConfigurationError(
            "--sorted takes exactly one source",
            errors=[f"Got {len(args.sources)} sources: {', '.join(args.sources)}"],
            suggestions=["Merge and sort the inputs first, e.g. sort a b > merged"],
        )

    app_config = apply_overrides(
        app_config,
        {
            "detection": {"threshold": args.threshold},
            "keys": {
                "long_line_threshold": args.long_line_threshold,
                "hash_algorithm": args.hash_algorithm,
            },
            "output": {"format": args.report_format, "sort": args.sort},
            "logging": {"level": args.log_level},
        },
    )
    return app_config, env_config


def write_report(report: str, stream: Optional[TextIO] = None) -> None:
    """
    Write a rendered report.

    Lines that were not valid in the input encoding carry surrogate escapes;
    they are written back as their original bytes when the stream exposes a
    binary buffer.
    """
    stream = stream if stream is not None else sys.stdout
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        stream.write(report)
        stream.flush()
        return

    stream.flush()
    encoding = getattr(stream, "encoding", None) or "utf-8"
    buffer.write(report.encode(encoding, "surrogateescape"))
    buffer.flush()


def prepare_stdin(encoding: str) -> None:
    """
    Decode standard input the way file sources are decoded.

    Must run before anything reads from stdin; streams without
    ``reconfigure`` (e.g. under test capture) are left alone.
    """
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(encoding=encoding, errors="surrogateescape", newline="\n")


def run(
    args: argparse.Namespace,
    app_config: AppConfig,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Execute the selected detection mode and write the report.

    Returns:
        Exit code
    """
    renderer = ReportRenderer()

    if args.sorted:
        source_id = args.sources[0] if args.sources else app_config.detection.stdin_sentinel
        try:
            result = SortedDetector.from_config(app_config, stdin=stdin).detect(source_id)
        except SourceError as e:
            logger.error(
                f"Sorted detection failed: {e}",
                extra={"event": "sorted.run.failed", "source_id": e.source_id, "error": str(e)},
            )
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_FAILURE

        write_report(
            renderer.render(result, app_config.output.format, app_config.output.sort), stdout
        )
        return EXIT_OK

    result = DuplicateDetector.from_config(app_config, stdin=stdin).detect(args.sources)
    write_report(renderer.render(result, app_config.output.format, app_config.output.sort), stdout)

    for stats in result.failed_sources:
        print(f"Warning: skipped {stats.source_id}: {stats.error_message}", file=sys.stderr)

    return EXIT_PARTIAL if result.had_errors else EXIT_OK


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Main entry point for dupfinder.

    Returns:
        Exit code: 0 on success, 1 on configuration or fatal detection
        errors, 2 when some sources could not be read.
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args)

        configure_logging(
            level=app_config.logging.level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.debug(
            "dupfinder starting",
            extra={
                "event": "cli.started",
                "config_path": str(args.config) if args.config else None,
                "source_count": len(args.sources),
                "sorted": args.sorted,
                "threshold": app_config.detection.threshold,
                "long_line_threshold": app_config.keys.long_line_threshold,
                "hash_algorithm": app_config.keys.hash_algorithm,
            },
        )

        if stdin is None:
            prepare_stdin(app_config.detection.encoding)

        exit_code = run(args, app_config, stdin=stdin, stdout=stdout)

        logger.debug(
            "dupfinder stopped",
            extra={
                "event": "cli.stopping",
                "exit_code": exit_code,
                "uptime_seconds": round(time.time() - start_time, 3),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except (AggregationError, ReportRenderError) as e:
        logger.error(
            f"Detection failed: {e}",
            extra={"event": "cli.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
