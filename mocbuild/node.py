# SPDX-License-Identifier: MIT

# File nodes: entries in the build graph, either sources or generated files

from __future__ import annotations

import pathlib


class FileNode:
    """A file in the build graph.

    Source files are addressed relative to the source root, generated files
    relative to the build directory. ``short_path`` is that root-relative
    path in POSIX form; it is what ``#include`` directives must use.

    Note that the file may not exist yet, for example if the node is a
    target still to be generated."""

    path: pathlib.Path

    def __init__(
        self,
        path: pathlib.Path | str,
        *,
        root: pathlib.Path | str | None = None,
        is_source: bool = True,
    ):
        self.path = pathlib.Path(path)
        self.root = pathlib.Path(root) if root is not None else None
        self.is_source = is_source

    @property
    def short_path(self) -> str:
        if self.root is None:
            return self.path.as_posix()
        return self.path.relative_to(self.root).as_posix()

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".")

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def dirname(self) -> pathlib.Path:
        return self.path.parent

    def exists(self) -> bool:
        return self.path.exists()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileNode):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        kind = "source" if self.is_source else "generated"
        return f"FileNode({self.short_path!r}, {kind})"
