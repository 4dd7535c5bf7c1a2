# SPDX-License-Identifier: MIT
"""Rules that run Qt's moc as part of a build graph."""

from mocbuild.rules.context import RuleContext
from mocbuild.rules.moc import (
    HDRS_EXTENSIONS,
    SRCS_EXTENSIONS,
    moc_hdrs,
    moc_srcs,
)

__all__ = [
    "RuleContext",
    "HDRS_EXTENSIONS",
    "SRCS_EXTENSIONS",
    "moc_hdrs",
    "moc_srcs",
]
