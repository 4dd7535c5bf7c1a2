# SPDX-License-Identifier: MIT
"""Generator protocol for build file generation.

Generators take the results of rule calls and write build files that
perform their declared actions (e.g., a Ninja file).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mocbuild.core.providers import RuleResult


@runtime_checkable
class Generator(Protocol):
    """Protocol for build file generators."""

    @property
    def name(self) -> str:
        """Generator name (e.g., 'ninja')."""
        ...

    def generate(self, results: list[RuleResult], output_dir: Path) -> Path:
        """Write build files for the given rule results.

        Args:
            results: Rule results whose actions should be written.
            output_dir: Directory to write output files to.

        Returns:
            Path of the main file written.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def generate(self, results: list[RuleResult], output_dir: Path) -> Path:
        """Generate build files. Subclasses must implement."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
