# SPDX-License-Identifier: MIT
"""Build file generators for declared actions."""

from mocbuild.generators.generator import BaseGenerator, Generator
from mocbuild.generators.ninja import NinjaGenerator

__all__ = [
    "BaseGenerator",
    "Generator",
    "NinjaGenerator",
]
