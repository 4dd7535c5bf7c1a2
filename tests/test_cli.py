# SPDX-License-Identifier: MIT
"""Tests for mocbuild CLI."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import mocbuild
from mocbuild.cli import parse_variables, setup_logging


def run_cli(*args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "mocbuild.cli", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


class TestParseVariables:
    def test_splits_variables_from_inputs(self) -> None:
        variables, remaining = parse_variables(
            ["ui/widget.h", "MOCBUILD_QT_MOC=/opt/qt/bin/moc", "--flag=1", "=x"]
        )

        assert variables == {"MOCBUILD_QT_MOC": "/opt/qt/bin/moc"}
        assert remaining == ["ui/widget.h", "--flag=1", "=x"]


class TestSetupLogging:
    def test_setup_logging_normal(self) -> None:
        setup_logging(verbose=False, debug=False)

    def test_setup_logging_verbose(self) -> None:
        setup_logging(verbose=True, debug=False)

    def test_setup_logging_debug(self) -> None:
        setup_logging(verbose=False, debug=True)


class TestCLICommands:
    def test_help(self, tmp_path: Path) -> None:
        result = run_cli("--help", cwd=tmp_path)
        assert result.returncode == 0
        assert "hdrs" in result.stdout
        assert "srcs" in result.stdout

    def test_version(self, tmp_path: Path) -> None:
        result = run_cli("--version", cwd=tmp_path)
        assert result.returncode == 0
        assert mocbuild.__version__ in result.stdout

    def test_hdrs(self, tmp_path: Path, fake_moc: Path) -> None:
        (tmp_path / "ui").mkdir()
        (tmp_path / "ui" / "widget.h").write_text("class Widget {};\n")

        result = run_cli(
            "hdrs", "ui/widget.h", "--package", "ui", "--moc", str(fake_moc), cwd=tmp_path
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == [
            str(Path("build/ui/moc_widget.cpp")),
            str(Path("build/ui/moc_widget.json")),
        ]
        text = (tmp_path / "build" / "ui" / "moc_widget.cpp").read_text()
        assert '#include "ui/widget.h"' in text

    def test_srcs(self, tmp_path: Path, fake_moc: Path) -> None:
        (tmp_path / "thing.cpp").write_text("class Thing {};\n")

        result = run_cli("srcs", "thing.cpp", "--moc", str(fake_moc), cwd=tmp_path)

        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == [str(Path("build/thing.moc"))]
        assert (tmp_path / "build" / "thing.moc").exists()

    def test_moc_from_variable(self, tmp_path: Path, fake_moc: Path) -> None:
        (tmp_path / "thing.cpp").write_text("class Thing {};\n")

        result = run_cli(
            "srcs",
            "thing.cpp",
            f"MOCBUILD_QT_MOC={fake_moc}",
            "MOCBUILD_QT_INCLUDE_DIRS=",
            cwd=tmp_path,
        )

        assert result.returncode == 0, result.stderr
        assert (tmp_path / "build" / "mocbuild_config.json").exists()

    def test_ninja(self, tmp_path: Path) -> None:
        (tmp_path / "widget.h").write_text("class Widget {};\n")

        result = run_cli("hdrs", "widget.h", "--moc", "/opt/qt/bin/moc", "--ninja", cwd=tmp_path)

        assert result.returncode == 0, result.stderr
        assert (tmp_path / "build" / "build.ninja").exists()

    def test_generator_failure(self, tmp_path: Path, fake_moc: Path) -> None:
        (tmp_path / "broken.h").write_text("class Broken {};\n")

        result = run_cli("hdrs", "broken.h", "--moc", str(fake_moc), cwd=tmp_path)

        assert result.returncode == 1
        assert "moc failed for broken.h" in result.stderr
        assert "lacks Q_OBJECT macro" in result.stderr

    def test_bad_extension(self, tmp_path: Path) -> None:
        result = run_cli("hdrs", "thing.cpp", "--moc", "moc", cwd=tmp_path)

        assert result.returncode == 1
        assert "not allowed in 'hdrs'" in result.stderr

    def test_empty_inputs(self, tmp_path: Path) -> None:
        result = run_cli("srcs", "--moc", "moc", cwd=tmp_path)

        assert result.returncode == 1
        assert "must not be empty" in result.stderr
