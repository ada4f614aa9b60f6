"""Tests for the command-line entry point."""

import io
import json
from unittest.mock import patch

import pytest

from dupfinder.main import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_PARTIAL,
    build_parser,
    main,
    prepare_stdin,
    write_report,
)


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """Run from an empty directory and keep configure_logging off the root logger."""
    monkeypatch.chdir(tmp_path)
    with patch("dupfinder.main.configure_logging") as configure:
        yield configure


def run_cli(argv, stdin_text=None):
    stdout = io.StringIO()
    stdin = io.StringIO(stdin_text or "")
    exit_code = main(argv, stdin=stdin, stdout=stdout)
    return exit_code, stdout.getvalue()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test that unset flags are None so config values apply."""
        args = build_parser().parse_args([])

        assert args.sources == []
        assert args.threshold is None
        assert args.sorted is False
        assert args.report_format is None

    def test_flags(self):
        """Test parsing of the main flags."""
        args = build_parser().parse_args(
            ["-n", "3", "--format", "json", "--sort", "count", "a.txt", "b.txt"]
        )

        assert args.threshold == 3
        assert args.report_format == "json"
        assert args.sort == "count"
        assert args.sources == ["a.txt", "b.txt"]


class TestMain:
    """Tests for main()."""

    def test_multi_source_text_report(self, write_lines):
        """Test the default text report over two files."""
        a = write_lines("a.txt", ["x", "y", "x"])
        b = write_lines("b.txt", ["x"])

        exit_code, output = run_cli([a, b])

        assert exit_code == EXIT_OK
        assert output == f"3\tx\n\t{a}: [1, 3]\n\t{b}: [1]\n"

    def test_threshold_flag(self, write_lines):
        """Test that -n raises the bar for reporting."""
        a = write_lines("a.txt", ["x", "x", "y", "y", "y"])

        exit_code, output = run_cli(["-n", "2", a])

        assert exit_code == EXIT_OK
        assert output.startswith("3\ty\n")
        assert "\tx\n" not in output

    def test_json_report(self, write_lines):
        """Test the JSON report format."""
        a = write_lines("a.txt", ["x", "x"])

        exit_code, output = run_cli(["--format", "json", a])

        document = json.loads(output)
        assert exit_code == EXIT_OK
        assert document["mode"] == "multi-source"
        assert document["entries"][0]["locations"] == [{"source": a, "line_numbers": [1, 2]}]

    def test_stdin_when_no_sources(self):
        """Test that standard input is read when no source is given."""
        exit_code, output = run_cli([], stdin_text="q\nq\n")

        assert exit_code == EXIT_OK
        assert output == "2\tq\n\t-: [1, 2]\n"

    def test_missing_source_is_partial(self, write_lines, tmp_path, capsys):
        """Test that an unreadable source gives exit code 2 and a warning."""
        a = write_lines("a.txt", ["x", "x"])
        missing = str(tmp_path / "missing.txt")

        exit_code, output = run_cli([a, missing])

        assert exit_code == EXIT_PARTIAL
        assert output == f"2\tx\n\t{a}: [1, 2]\n"
        assert f"Warning: skipped {missing}" in capsys.readouterr().err

    def test_sorted_mode(self, write_lines):
        """Test the sorted fast path report."""
        path = write_lines("s.txt", ["a", "a", "a", "b", "b", "c"])

        exit_code, output = run_cli(["--sorted", path])

        assert exit_code == EXIT_OK
        assert output == "3\ta\t[1,3]\n2\tb\t[4,5]\n"

    def test_sorted_missing_file_fails(self, tmp_path, capsys):
        """Test that the sorted path fails when its source cannot be opened."""
        exit_code, output = run_cli(["--sorted", str(tmp_path / "missing.txt")])

        assert exit_code == EXIT_FAILURE
        assert output == ""
        assert "Error: Cannot open" in capsys.readouterr().err

    def test_sorted_rejects_multiple_sources(self, write_lines, capsys):
        """Test that --sorted with two sources is a configuration error."""
        a = write_lines("a.txt", ["x"])
        b = write_lines("b.txt", ["x"])

        exit_code, _ = run_cli(["--sorted", a, b])

        assert exit_code == EXIT_FAILURE
        assert "--sorted takes exactly one source" in capsys.readouterr().err

    def test_negative_threshold_is_config_error(self, write_lines, capsys):
        """Test that an invalid override is reported as a configuration error."""
        a = write_lines("a.txt", ["x"])

        exit_code, _ = run_cli(["-n", "-1", a])

        assert exit_code == EXIT_FAILURE
        assert "Configuration Error" in capsys.readouterr().err

    def test_config_file_applies(self, write_lines, tmp_path):
        """Test that settings come from the config file unless overridden."""
        config = tmp_path / "custom.yaml"
        config.write_text("detection:\n  threshold: 2\noutput:\n  sort: key\n")
        a = write_lines("a.txt", ["b", "b", "b", "a", "a", "a", "c", "c"])

        exit_code, output = run_cli(["--config", str(config), a])

        assert exit_code == EXIT_OK
        assert [line.split("\t")[1] for line in output.splitlines() if not line.startswith("\t")] == [
            "a",
            "b",
        ]

    def test_cli_overrides_config(self, write_lines, tmp_path):
        """Test that flags win over the config file."""
        config = tmp_path / "custom.yaml"
        config.write_text("detection:\n  threshold: 5\n")
        a = write_lines("a.txt", ["x", "x"])

        exit_code, output = run_cli(["--config", str(config), "-n", "1", a])

        assert exit_code == EXIT_OK
        assert output.startswith("2\tx\n")

    def test_long_line_threshold_flag(self, write_lines):
        """Test that hashed keys are marked in the text report."""
        a = write_lines("a.txt", ["abcdef", "abcdef"])

        _, output = run_cli(["--long-line-threshold", "4", a])

        first_line = output.splitlines()[0]
        assert first_line.endswith("\t(digest)")

    def test_logging_configured_from_config(self, write_lines, isolated_cli):
        """Test that logging is configured with the resolved settings."""
        a = write_lines("a.txt", ["x"])

        run_cli(["--log-level", "DEBUG", a])

        isolated_cli.assert_called_once_with(
            level="DEBUG", format_type="key-value", environment="local"
        )

    def test_aggregation_error_fails(self, write_lines, capsys):
        """Test that an aggregator failure gives exit code 1."""
        a = write_lines("a.txt", ["x"])

        with patch(
            "dupfinder.detection.aggregator.Aggregator.add", side_effect=RuntimeError("corrupt")
        ):
            exit_code, output = run_cli([a])

        assert exit_code == EXIT_FAILURE
        assert output == ""
        assert "Aggregation failed" in capsys.readouterr().err


def test_prepare_stdin_keeps_undecodable_bytes(monkeypatch):
    """Test that stdin is reconfigured to carry invalid UTF-8 through."""
    stream = io.TextIOWrapper(io.BytesIO(b"\xffx\r\n"), encoding="utf-8")
    monkeypatch.setattr("sys.stdin", stream)

    prepare_stdin("utf-8")

    assert stream.readline() == "\udcffx\r\n"


class TestWriteReport:
    """Tests for write_report."""

    def test_text_stream(self):
        """Test writing to a stream without a binary buffer."""
        stream = io.StringIO()

        write_report("1\tx\n", stream)

        assert stream.getvalue() == "1\tx\n"

    def test_undecodable_bytes_round_trip(self):
        """Test that surrogate-escaped input is written back as the original bytes."""
        raw = io.BytesIO()
        stream = io.TextIOWrapper(raw, encoding="utf-8")
        line = b"\xff\xfeabc".decode("utf-8", "surrogateescape")

        write_report(f"2\t{line}\n", stream)

        assert raw.getvalue() == b"2\t\xff\xfeabc\n"
