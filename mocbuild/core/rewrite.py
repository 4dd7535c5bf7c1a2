# SPDX-License-Identifier: MIT
"""Rewriting of include directives in moc output.

moc assumes a header lives next to the file that includes it, so the
sources it generates contain ``#include "foo.h"``. The build graph addresses
files by their full path from the source root, so each such directive has to
become ``#include "some/dir/foo.h"``.

The rewrite is a literal substitution of quoted names:

    rewrite_map = IncludeRewriteMap.from_headers(headers)
    text = rewrite(raw_moc_output, rewrite_map)
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

from mocbuild.core.errors import IncludeCollisionError

if TYPE_CHECKING:
    from mocbuild.node import FileNode


def _quote(name: str) -> str:
    return f'"{name}"'


def _compile(keys: Iterable[str]) -> re.Pattern[str]:
    """Alternation of keys, longest first; matches nothing if keys is empty."""
    ordered = sorted(keys, key=len, reverse=True)
    if not ordered:
        return re.compile(r"(?!)")
    return re.compile("|".join(re.escape(k) for k in ordered))


class IncludeRewriteMap(Mapping[str, str]):
    """Maps quoted basenames to quoted root-relative paths.

    Keys are unique: building a map from two different headers with the same
    basename raises IncludeCollisionError.
    """

    def __init__(self, substitutions: Mapping[str, str] | None = None) -> None:
        self._substitutions: dict[str, str] = dict(substitutions or {})
        self._pattern: re.Pattern[str] | None = None

    @classmethod
    def from_headers(cls, headers: Iterable[FileNode]) -> IncludeRewriteMap:
        """Build the map for one batch of headers.

        Args:
            headers: Every header in the batch.

        Returns:
            The validated rewrite map.

        Raises:
            IncludeCollisionError: If two distinct headers share a basename.
        """
        by_basename: dict[str, list[str]] = {}
        for hdr in headers:
            paths = by_basename.setdefault(hdr.basename, [])
            if hdr.short_path not in paths:
                paths.append(hdr.short_path)

        substitutions: dict[str, str] = {}
        for basename, paths in by_basename.items():
            if len(paths) > 1:
                raise IncludeCollisionError(basename, sorted(paths))
            substitutions[_quote(basename)] = _quote(paths[0])
        return cls(substitutions)

    def __getitem__(self, key: str) -> str:
        return self._substitutions[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._substitutions)

    def __len__(self) -> int:
        return len(self._substitutions)

    def pairs(self) -> list[tuple[str, str]]:
        """Return (basename, path) pairs without the surrounding quotes."""
        return [(k[1:-1], v[1:-1]) for k, v in self._substitutions.items()]

    def pattern(self) -> re.Pattern[str]:
        """Compiled alternation of all keys, longest first."""
        if self._pattern is None:
            self._pattern = _compile(self._substitutions)
        return self._pattern

    def __repr__(self) -> str:
        return f"IncludeRewriteMap({self._substitutions!r})"


def rewrite(source_text: str, rewrite_map: Mapping[str, str]) -> str:
    """Replace every quoted basename in source_text by its quoted path.

    Substitution happens in a single pass, so replacement text is never
    rewritten again.

    Args:
        source_text: Generated source as emitted by moc.
        rewrite_map: Substitutions to apply.

    Returns:
        The rewritten text; unchanged if nothing matches.
    """
    if not rewrite_map:
        return source_text
    if isinstance(rewrite_map, IncludeRewriteMap):
        pattern = rewrite_map.pattern()
    else:
        pattern = _compile(rewrite_map)
    return pattern.sub(lambda m: rewrite_map[m.group(0)], source_text)
