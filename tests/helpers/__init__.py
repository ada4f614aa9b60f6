"""Test helper utilities for dupfinder tests."""

from .fixture_sources import load_fixture_sources, write_scenario, write_sources

__all__ = ["load_fixture_sources", "write_scenario", "write_sources"]
