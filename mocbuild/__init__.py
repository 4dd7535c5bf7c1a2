# SPDX-License-Identifier: MIT
"""
mocbuild: run Qt's moc as cacheable build-graph actions.

Rules declare one moc invocation per input file, rewrite moc's flat
includes into root-relative ones, and return typed providers for
downstream compile rules. Actions are executed by LocalExecutor or written
to a Ninja file.
"""

from __future__ import annotations

import json
import os

__version__ = "0.1.0"

# Internal storage for CLI variables
_cli_vars: dict[str, str] | None = None


def get_var(name: str, default: str | None = None) -> str | None:
    """Get a build variable set on the command line or from environment.

    Variables can be set when invoking mocbuild:
        mocbuild hdrs widget.h MOCBUILD_QT_MOC=/opt/qt/bin/moc

    Precedence (highest to lowest):
        1. Command line: mocbuild ... VAR=value
        2. Environment variable: VAR=value mocbuild ...

    Args:
        name: Variable name.
        default: Default value if not set.

    Returns:
        The variable value, or default if not set.
    """
    global _cli_vars

    # Lazy-load CLI vars from environment on first access
    if _cli_vars is None:
        mocbuild_vars = os.environ.get("MOCBUILD_VARS")
        if mocbuild_vars:
            try:
                _cli_vars = json.loads(mocbuild_vars)
            except json.JSONDecodeError:
                _cli_vars = {}
        else:
            _cli_vars = {}

    if name in _cli_vars:
        return _cli_vars[name]

    return os.environ.get(name, default)


def set_vars(variables: dict[str, str]) -> None:
    """Set command-line build variables (called by the CLI)."""
    global _cli_vars
    _cli_vars = dict(variables)


# Re-export commonly used classes for convenient imports
from mocbuild.configure.config import Configure  # noqa: E402
from mocbuild.core.executor import LocalExecutor  # noqa: E402
from mocbuild.core.providers import (  # noqa: E402
    CcInfo,
    CompilationContext,
    DefaultInfo,
    MocInfo,
    RuleResult,
)
from mocbuild.core.rewrite import IncludeRewriteMap, rewrite  # noqa: E402
from mocbuild.generators.ninja import NinjaGenerator  # noqa: E402
from mocbuild.rules import RuleContext, moc_hdrs, moc_srcs  # noqa: E402
from mocbuild.toolchains import QtInfo, find_qt_toolchain  # noqa: E402

__all__ = [
    "__version__",
    "get_var",
    "set_vars",
    "Configure",
    "LocalExecutor",
    "CcInfo",
    "CompilationContext",
    "DefaultInfo",
    "MocInfo",
    "RuleResult",
    "IncludeRewriteMap",
    "rewrite",
    "NinjaGenerator",
    "RuleContext",
    "moc_hdrs",
    "moc_srcs",
    "QtInfo",
    "find_qt_toolchain",
]
