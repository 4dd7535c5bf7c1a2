# SPDX-License-Identifier: MIT
"""Toolchain protocol and base implementation.

A Toolchain locates the external tools a rule needs and exposes them as
read-only information, resolved once per build graph evaluation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class Toolchain(Protocol):
    """Protocol for toolchains."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'qt')."""
        ...

    def configure(self, config: object) -> bool:
        """Configure all tools in this toolchain.

        Args:
            config: Configure context.

        Returns:
            True if the toolchain is available and configured.
        """
        ...


class BaseToolchain(ABC):
    """Abstract base class for toolchains.

    Subclasses implement _configure_tools() with the detection logic.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._configured = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(self, config: object) -> bool:
        """Configure the toolchain once; later calls return the first result."""
        if self._configured:
            return True

        result = self._configure_tools(config)
        self._configured = result
        return result

    @abstractmethod
    def _configure_tools(self, config: object) -> bool:
        """Detect and configure the toolchain's tools.

        Args:
            config: Configure context.

        Returns:
            True if configuration succeeded.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, configured={self._configured})"
