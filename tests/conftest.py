"""Shared pytest fixtures for dupfinder tests."""

from pathlib import Path

import pytest

from dupfinder.logging.context import clear_log_context

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ENV_VARS = (
    "DUPFINDER_LOG_LEVEL",
    "DUPFINDER_LOG_FORMAT",
    "DUPFINDER_ENVIRONMENT",
    "DUPFINDER_THRESHOLD",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep DUPFINDER_* variables from the developer's shell out of tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sources_fixture() -> Path:
    return FIXTURES_DIR / "sources.yaml"


@pytest.fixture
def write_lines(tmp_path):
    """Factory writing ``lines`` to ``tmp_path / name``; returns the path as str."""

    def _write(name, lines, trailing_newline=True):
        path = tmp_path / name
        content = "\n".join(lines)
        if trailing_newline and lines:
            content += "\n"
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write
