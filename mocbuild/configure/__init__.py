# SPDX-License-Identifier: MIT
"""Configure phase: program discovery and cached configuration."""

from mocbuild.configure.config import Configure, ProgramInfo

__all__ = ["Configure", "ProgramInfo"]
