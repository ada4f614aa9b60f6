#!/usr/bin/env python3
"""Sample detection harness for manual end-to-end validation.

Writes the scenarios from tests/fixtures/sources.yaml to a scratch
directory, runs multi-source detection (and the sorted path for the
sorted_runs scenario) and prints a summary of each run. No pytest needed.

Usage:
    # Run every scenario
    python scripts/run_sample_detection.py

    # One scenario, with debug logs and a custom config
    python scripts/run_sample_detection.py --scenario two_sources --log-level DEBUG --config config.example.yaml

    # Keep the generated files
    python scripts/run_sample_detection.py --workdir /tmp/dupfinder-sample
"""

import argparse
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from dupfinder.config.exceptions import ConfigurationError
from dupfinder.config.loader import load_config
from dupfinder.detection import DuplicateDetector, SortedDetector
from dupfinder.logging.config import configure_logging
from dupfinder.reporting import ReportRenderer
from tests.helpers import load_fixture_sources, write_sources

SORTED_SCENARIOS = ("sorted_runs",)


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(result):
    """Print a formatted summary table of a multi-source run."""
    metrics = [
        ("Sources", len(result.source_stats)),
        ("Lines Read", result.total_records),
        ("Distinct Keys", result.distinct_keys),
        ("Duplicated Lines", len(result.duplicates)),
        ("Failed Sources", len(result.failed_sources)),
        ("Duration (seconds)", f"{result.duration_seconds:.4f}"),
    ]

    max_label_width = max(len(label) for label, _ in metrics)

    print("┌" + "─" * (max_label_width + 2) + "┬" + "─" * 22 + "┐")
    print(f"│ {'Metric':<{max_label_width}} │ {'Value':<20} │")
    print("├" + "─" * (max_label_width + 2) + "┼" + "─" * 22 + "┤")

    for label, value in metrics:
        print(f"│ {label:<{max_label_width}} │ {str(value):<20} │")

    print("└" + "─" * (max_label_width + 2) + "┴" + "─" * 22 + "┘")

    for stats in result.failed_sources:
        print(f"  Skipped {stats.source_id}: {stats.error_message}")


def run_scenario(name, sources, workdir, app_config, renderer):
    """Write one scenario to disk, detect duplicates and print the report."""
    print_header(f"Scenario: {name}")

    paths = write_sources(workdir / name, sources)
    for source_name, lines in sources.items():
        print(f"{source_name}: {len(lines)} lines")

    result = DuplicateDetector.from_config(app_config).detect(list(paths.values()))
    print_summary_table(result)
    print("\nReport (sorted by count):")
    print(renderer.render_text(result, sort="count"), end="")

    if name in SORTED_SCENARIOS:
        (path,) = paths.values()
        sorted_result = SortedDetector.from_config(app_config).detect(path)
        print("\nSorted path report:")
        print(renderer.render_text(sorted_result), end="")

    return result


def main():
    """Main entry point for the sample detection harness."""
    parser = argparse.ArgumentParser(
        description="Run sample detections for end-to-end validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--fixtures",
        type=Path,
        default=Path("tests/fixtures/sources.yaml"),
        help="Path to scenario YAML file (default: tests/fixtures/sources.yaml)",
    )
    parser.add_argument(
        "--scenario",
        default=None,
        help="Run only this scenario (default: all)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: built-in settings)",
    )
    parser.add_argument(
        "--workdir",
        type=Path,
        default=None,
        help="Directory for generated source files (default: a temporary directory)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )

    args = parser.parse_args()

    load_dotenv()

    print_header("dupfinder - Sample Detection Harness")

    if not args.fixtures.exists():
        print(f"❌ Error: Fixture file not found: {args.fixtures}")
        return 1

    try:
        app_config, env_config = load_config(args.config)
    except ConfigurationError as e:
        print(f"❌ Configuration error:\n{e}")
        return 1

    configure_logging(
        level=args.log_level,
        format_type=app_config.logging.format,
        environment="validation",
    )

    scenarios = load_fixture_sources(args.fixtures)
    if args.scenario:
        if args.scenario not in scenarios:
            print(f"❌ Unknown scenario: {args.scenario}")
            print(f"   Available: {', '.join(sorted(scenarios))}")
            return 1
        scenarios = {args.scenario: scenarios[args.scenario]}

    print(f"Fixtures: {args.fixtures}")
    print(f"Threshold: {app_config.detection.threshold}")
    print(f"Long-line threshold: {app_config.keys.long_line_threshold} bytes "
          f"({app_config.keys.hash_algorithm})")

    renderer = ReportRenderer()
    had_errors = False

    with tempfile.TemporaryDirectory(prefix="dupfinder-sample-") as scratch:
        workdir = args.workdir or Path(scratch)
        for name, sources in scenarios.items():
            result = run_scenario(name, sources, workdir, app_config, renderer)
            had_errors = had_errors or result.had_errors

        if args.workdir:
            print(f"\nGenerated files kept in {args.workdir.absolute()}")

    return 1 if had_errors else 0


if __name__ == "__main__":
    sys.exit(main())
