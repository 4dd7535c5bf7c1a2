# SPDX-License-Identifier: MIT
"""Per-rule context: where sources come from and where outputs go."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from mocbuild.core.errors import BuilderError, InputContractError
from mocbuild.node import FileNode
from mocbuild.util.source_location import SourceLocation, get_caller_location


@dataclass
class RuleContext:
    """Context for one rule invocation.

    Sources are addressed relative to ``root_dir``. Generated files are
    declared under ``build_dir / package`` so that outputs of different
    packages never collide.

    Attributes:
        name: Rule name, used in messages.
        root_dir: Source root.
        build_dir: Root of the generated-file tree.
        package: Directory of the rule, relative to both roots.
        defined_at: Where the rule was declared.
    """

    name: str
    root_dir: Path = field(default_factory=lambda: Path("."))
    build_dir: Path = field(default_factory=lambda: Path("build"))
    package: str = ""
    defined_at: SourceLocation | None = field(default_factory=get_caller_location)

    def __post_init__(self) -> None:
        self._declared: dict[Path, str] = {}
        self.root_dir = Path(self.root_dir)
        self.build_dir = Path(self.build_dir)
        package = PurePosixPath(self.package)
        if package.is_absolute() or ".." in package.parts:
            raise InputContractError(
                f"package must be a relative path inside the root: {self.package!r}",
                self.defined_at,
            )

    @property
    def output_dir(self) -> Path:
        return self.build_dir / self.package

    def declare_file(self, name: str, *, owner: str = "") -> FileNode:
        """Declare a generated file in this rule's output directory.

        Raises:
            BuilderError: If the same file was already declared.
        """
        path = self.output_dir / name
        if path in self._declared:
            raise BuilderError(
                f"{self.name}: {path.as_posix()} would be generated twice "
                f"(from {self._declared[path]} and {owner})",
                self.defined_at,
            )
        self._declared[path] = owner
        return FileNode(path, root=self.build_dir, is_source=False)

    def source(self, path: str | Path | FileNode) -> FileNode:
        """Return the source node for a path.

        Relative paths are taken relative to ``root_dir``; absolute paths
        must lie inside it.
        """
        if isinstance(path, FileNode):
            return path
        path = Path(path)
        root = self.root_dir
        if not path.is_absolute():
            path = root / path
        elif not root.is_absolute():
            root = root.resolve()
        # Lexical only: "ui/../ui/widget.h" is "ui/widget.h"
        path = Path(os.path.normpath(path))
        root = Path(os.path.normpath(root))
        try:
            if ".." in path.relative_to(root).parts:
                raise ValueError(path)
        except ValueError:
            raise InputContractError(
                f"{self.name}: {path} is outside the source root {self.root_dir}",
                self.defined_at,
            ) from None
        return FileNode(path, root=root)
