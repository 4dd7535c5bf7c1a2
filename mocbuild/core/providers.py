# SPDX-License-Identifier: MIT
"""Providers: typed results a rule hands to downstream rules.

A rule returns a RuleResult holding its declared actions and a set of
providers. Downstream rules look providers up by type:

    result = moc_hdrs(ctx, hdrs, qtinfo)
    sources = result.get(DefaultInfo).files
    metatypes = result.get(MocInfo).jsons

Providers are frozen; consumers receive them by reference and cannot
mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from pathlib import Path

    from mocbuild.core.action import Action
    from mocbuild.node import FileNode

P = TypeVar("P")


def _unique(items):
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


@dataclass(frozen=True)
class CompilationContext:
    """Include directories and headers that augment a compile step.

    A compilation context is never compiled itself; it only adds to the
    inputs and search path of another rule's compilation.

    The formatting (prefixes like -I, -isystem) is done here rather than
    by consumers, mirroring how compile flags are built for C/C++.

    Attributes:
        includes: Include directories (without -I prefix).
        system_includes: System include directories (without prefix).
        headers: Header-like files made available for inclusion.
        include_prefix: Prefix for include directories (default: "-I").
        system_include_prefix: Prefix for system include directories.
    """

    includes: tuple[Path, ...] = ()
    system_includes: tuple[Path, ...] = ()
    headers: tuple[FileNode, ...] = ()

    include_prefix: str = "-I"
    system_include_prefix: str = "-isystem"

    def get_variables(self) -> dict[str, list[str]]:
        """Return compile variables for a consumer's command template.

        Keys:
        - includes: Include flags (e.g., ["-Ibuild/pkg"])
        - system_includes: System include flags, as separate tokens
          (e.g., ["-isystem", "/usr/include/qt6"])

        Returns:
            Dictionary mapping variable names to lists of string tokens.
        """
        result: dict[str, list[str]] = {}

        if self.includes:
            result["includes"] = [f"{self.include_prefix}{inc}" for inc in self.includes]

        if self.system_includes:
            tokens: list[str] = []
            for inc in self.system_includes:
                tokens.extend([self.system_include_prefix, str(inc)])
            result["system_includes"] = tokens

        return result

    def merge(self, other: CompilationContext) -> CompilationContext:
        """Return a new context with other's entries appended.

        Avoids duplicates while preserving order.
        """
        return CompilationContext(
            includes=_unique(self.includes + other.includes),
            system_includes=_unique(self.system_includes + other.system_includes),
            headers=_unique(self.headers + other.headers),
            include_prefix=self.include_prefix,
            system_include_prefix=self.system_include_prefix,
        )

    def as_hashable_tuple(self) -> tuple:
        """Return hashable representation for caching."""
        return (
            tuple(str(p) for p in self.includes),
            tuple(str(p) for p in self.system_includes),
            tuple(str(h.path) for h in self.headers),
        )


@dataclass(frozen=True)
class DefaultInfo:
    """The default outputs of a rule.

    Attributes:
        files: Files built by default (for moc_hdrs, the generated sources).
        transitive_files: Inputs kept visible alongside the outputs so
            that relative references in them can be resolved.
    """

    files: tuple[FileNode, ...] = ()
    transitive_files: tuple[FileNode, ...] = ()

    def all_files(self) -> tuple[FileNode, ...]:
        return _unique(self.files + self.transitive_files)


@dataclass(frozen=True)
class MocInfo:
    """Metatype information produced by moc.

    The JSON documents are opaque to mocbuild. They are passed through for
    registering QML types downstream.

    Attributes:
        jsons: One metatypes JSON document per header.
        headers: The headers moc was run on.
    """

    jsons: tuple[FileNode, ...] = ()
    headers: tuple[FileNode, ...] = ()


@dataclass(frozen=True)
class CcInfo:
    """C/C++ compilation information for dependent rules."""

    compilation_context: CompilationContext = field(default_factory=CompilationContext)


@dataclass(frozen=True)
class RuleResult:
    """What a rule returns: its providers and the actions it declared."""

    name: str
    providers: tuple[object, ...]
    actions: tuple[Action, ...] = ()

    def get(self, provider_type: type[P]) -> P:
        """Return the provider of the given type.

        Raises:
            KeyError: If the rule does not provide it.
        """
        for provider in self.providers:
            if isinstance(provider, provider_type):
                return provider
        raise KeyError(f"{self.name} does not provide {provider_type.__name__}")

    def has(self, provider_type: type) -> bool:
        return any(isinstance(p, provider_type) for p in self.providers)
