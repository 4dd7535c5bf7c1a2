#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Build script running moc for a small Qt widgets application.

This example demonstrates:
- Resolving the Qt toolchain once and passing it to each rule
- moc_hdrs for headers, producing moc_*.cpp plus metatypes JSON
- moc_srcs for a Q_OBJECT declared in a .cpp file (self-include mode)
- Executing locally, or writing build.ninja with MOCBUILD_NINJA=1
"""

import os
from pathlib import Path

from mocbuild import (
    CcInfo,
    Configure,
    DefaultInfo,
    LocalExecutor,
    NinjaGenerator,
    RuleContext,
    find_qt_toolchain,
    get_var,
    moc_hdrs,
    moc_srcs,
)

# =============================================================================
# Build Script
# =============================================================================

root_dir = Path(__file__).parent / "src"
build_dir = Path(os.environ.get("MOCBUILD_BUILD_DIR", "build"))

# Resolve moc and the Qt include directories once
config = Configure(build_dir=build_dir)
qtinfo = find_qt_toolchain(config).qtinfo
config.save()

widgets = moc_hdrs(
    RuleContext("widgets", root_dir=root_dir, build_dir=build_dir, package="ui"),
    ["ui/mainwindow.h", "ui/counter.h"],
    qtinfo,
)
app = moc_srcs(
    RuleContext("app", root_dir=root_dir, build_dir=build_dir, package="app"),
    ["app/main.cpp"],
    qtinfo,
)

if get_var("MOCBUILD_NINJA") == "1":
    output = NinjaGenerator().generate([widgets, app], build_dir)
    print(f"Generated {output}")
else:
    LocalExecutor(build_dir).execute(widgets, app)
    for node in widgets.get(DefaultInfo).files:
        print(f"compile: {node.path}")
    context = app.get(CcInfo).compilation_context
    print(f"include path: {' '.join(context.get_variables()['includes'])}")
