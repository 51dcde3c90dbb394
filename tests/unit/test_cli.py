"""Tests for CLI entry point."""
from __future__ import annotations

import subprocess
import sys


def _run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run the CLI with the given arguments."""
    return subprocess.run(
        [sys.executable, "-m", "physlab", *args],
        capture_output=True, text=True, timeout=120,
    )


class TestCLI:
    def test_version(self):
        result = _run_cli("version")
        assert result.returncode == 0
        assert "physlab 0.1.0" in result.stdout

    def test_help(self):
        result = _run_cli("help")
        assert result.returncode == 0
        assert "demo" in result.stdout
        assert "formula" in result.stdout

    def test_no_args(self):
        result = _run_cli()
        assert result.returncode == 0
        assert "Usage:" in result.stdout

    def test_unknown_command(self):
        result = _run_cli("nonexistent")
        assert result.returncode == 1
        assert "Unknown command" in result.stdout

    def test_catalog(self):
        result = _run_cli("catalog", "pendulum")
        assert result.returncode == 0
        assert "length" in result.stdout
        assert "oscillationCount" in result.stdout
        assert result.stdout.count("FORMULA") == 3

    def test_catalog_unknown_experiment(self):
        result = _run_cli("catalog", "chemistry")
        assert result.returncode == 1
        assert "Error:" in result.stdout

    def test_formula(self):
        result = _run_cli("formula", "separation", "magnetic=2", "solvent=30", "evaporation=12.5")
        assert result.returncode == 0
        assert "Formula separation: 100.0000%" in result.stdout
        assert "formula_magnetic: 25.0000" in result.stdout

    def test_formula_bad_assignment(self):
        result = _run_cli("formula", "pendulum", "length")
        assert result.returncode == 1
        assert "key=value" in result.stdout
