# SPDX-License-Identifier: MIT
"""Toolchain definitions."""

from mocbuild.toolchains.qt import QtInfo, QtToolchain, find_qt_toolchain

__all__ = [
    "QtInfo",
    "QtToolchain",
    "find_qt_toolchain",
]
