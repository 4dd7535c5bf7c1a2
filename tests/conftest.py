# SPDX-License-Identifier: MIT
"""Shared fixtures: a stand-in for moc and a Qt toolchain around it."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

import mocbuild
from mocbuild.toolchains.qt import QtInfo

# Behaves like moc for what the rules rely on: -o, -i, -I, --output-json.
# Inputs named "broken*" fail like a moc parse error, "silent*" exit 0
# without writing anything.
FAKE_MOC = r'''#!@PYTHON@
import json
import os
import sys

args = sys.argv[1:]
if args == ["-v"]:
    print("moc 6.5.0")
    sys.exit(0)

out = None
self_include = False
json_out = False
includes = []
inputs = []
i = 0
while i < len(args):
    arg = args[i]
    if arg in ("-o", "-I"):
        if arg == "-o":
            out = args[i + 1]
        else:
            includes.append(args[i + 1])
        i += 2
        continue
    if arg == "-i":
        self_include = True
    elif arg == "--output-json":
        json_out = True
    elif arg != "--debug-includes":
        inputs.append(arg)
    i += 1

src = inputs[0]
log = os.environ.get("FAKE_MOC_LOG")
if log:
    with open(log, "a") as f:
        f.write(src + "\n")

name = src.replace("\\", "/").rsplit("/", 1)[-1]
if name.startswith("broken"):
    sys.stderr.write(src + ":3:1: error: Class declaration lacks Q_OBJECT macro.\n")
    sys.exit(1)
if name.startswith("silent"):
    sys.exit(0)

lines = ["/* Meta object code from reading C++ file '%s' */" % name]
if not self_include:
    lines.append('#include "%s"' % name)
with open(src) as f:
    for line in f:
        if line.startswith('#include "'):
            lines.append(line.rstrip("\n"))
lines.append("// include path: " + " ".join(includes))
with open(out, "w") as f:
    f.write("\n".join(lines) + "\n")
if json_out:
    with open(out + ".json", "w") as f:
        json.dump([{"inputFile": name, "classes": []}], f)
'''


def write_script(path: Path, text: str) -> Path:
    """Write an executable Python script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text.replace("@PYTHON@", sys.executable))
    path.chmod(0o755)
    return path


@pytest.fixture
def fake_moc(tmp_path: Path) -> Path:
    if sys.platform == "win32":
        pytest.skip("fake moc is a shebang script")
    return write_script(tmp_path / "qt" / "bin" / "moc", FAKE_MOC)


@pytest.fixture
def qtinfo(fake_moc: Path, tmp_path: Path) -> QtInfo:
    include_dir = tmp_path / "qt" / "include"
    include_dir.mkdir(parents=True, exist_ok=True)
    return QtInfo.from_paths(fake_moc, include_dirs=[include_dir])


@pytest.fixture
def clean_vars():
    """Isolate build variables from the surrounding environment."""
    mocbuild.set_vars({})
    yield
    mocbuild._cli_vars = None


@pytest.fixture
def make_script():
    """Return a helper that writes executable Python scripts."""
    if sys.platform == "win32":
        pytest.skip("scripts rely on a shebang line")
    return write_script
