# SPDX-License-Identifier: MIT
"""Qt toolchain: locates moc and the Qt include directories.

The rules never look the toolchain up themselves. It is resolved once and
the resulting QtInfo is passed to each rule call:

    config = Configure(build_dir="build")
    qtinfo = find_qt_toolchain(config).qtinfo
    result = moc_hdrs(ctx, ["widget.h"], qtinfo)

Resolution order for moc:
1. The MOCBUILD_QT_MOC build variable (explicit path)
2. moc, moc-qt6, moc-qt5 under MOCBUILD_QT_HOST_BINS or on PATH

Include directories come from MOCBUILD_QT_INCLUDE_DIRS (os.pathsep
separated) or from ``qmake -query QT_INSTALL_HEADERS``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import mocbuild
from mocbuild.configure.config import Configure, ProgramInfo
from mocbuild.core.errors import ToolNotFoundError
from mocbuild.core.providers import CompilationContext
from mocbuild.node import FileNode
from mocbuild.tools.toolchain import BaseToolchain

logger = logging.getLogger(__name__)

MOC_NAMES = ("moc", "moc-qt6", "moc-qt5")
QMAKE_NAMES = ("qmake6", "qmake", "qmake-qt5")


@dataclass(frozen=True)
class QtInfo:
    """Everything the moc rules need from the Qt installation.

    Attributes:
        moc: Path to the moc executable.
        headers: Compilation context carrying the ambient system include
            directories moc needs to parse its inputs, and any Qt headers
            that should be declared as inputs.
        version: moc version string, if known.
    """

    moc: Path
    headers: CompilationContext = field(default_factory=CompilationContext)
    version: str | None = None

    @classmethod
    def from_paths(
        cls,
        moc: Path | str,
        include_dirs: list[Path | str] | None = None,
        headers: list[Path | str] | None = None,
        version: str | None = None,
    ) -> QtInfo:
        """Build a QtInfo from explicit locations.

        Args:
            moc: Path to moc.
            include_dirs: System include directories.
            headers: Qt headers to declare as inputs of every invocation.
            version: moc version string.
        """
        context = CompilationContext(
            system_includes=tuple(Path(d) for d in include_dirs or []),
            headers=tuple(FileNode(h) for h in headers or []),
        )
        return cls(moc=Path(moc), headers=context, version=version)


class QtToolchain(BaseToolchain):
    """Qt toolchain, providing moc and the Qt include directories."""

    def __init__(self) -> None:
        super().__init__("qt")
        self._qtinfo: QtInfo | None = None

    @property
    def qtinfo(self) -> QtInfo:
        if self._qtinfo is None:
            raise ToolNotFoundError("moc")
        return self._qtinfo

    def _configure_tools(self, config: object) -> bool:
        if not isinstance(config, Configure):
            return False

        moc = self._find_moc(config)
        if moc is None:
            logger.info("Qt toolchain unavailable: moc not found")
            return False

        include_dirs = self._find_include_dirs(config)
        logger.debug("Qt include directories: %s", include_dirs)

        self._qtinfo = QtInfo(
            moc=moc.path,
            headers=CompilationContext(system_includes=tuple(include_dirs)),
            version=moc.version,
        )
        return True

    def _host_bins(self) -> list[Path | str]:
        host_bins = mocbuild.get_var("MOCBUILD_QT_HOST_BINS")
        return [host_bins] if host_bins else []

    def _find_moc(self, config: Configure) -> ProgramInfo | None:
        explicit = mocbuild.get_var("MOCBUILD_QT_MOC")
        if explicit:
            # Never fall back to another moc on PATH
            if not (Path(explicit).is_file() and os.access(explicit, os.X_OK)):
                raise ToolNotFoundError(explicit)
            return config.find_program(
                Path(explicit).name,
                hints=[explicit],
                version_flag="-v",
                required=True,
                use_cache=False,
            )

        for name in MOC_NAMES:
            info = config.find_program(name, hints=self._host_bins(), version_flag="-v")
            if info is not None:
                return info
        return None

    def _find_include_dirs(self, config: Configure) -> list[Path]:
        explicit = mocbuild.get_var("MOCBUILD_QT_INCLUDE_DIRS")
        if explicit:
            return [Path(p) for p in explicit.split(os.pathsep) if p]

        cached = config.get("qt:include_dirs")
        if cached is not None:
            return [Path(p) for p in cached]

        headers_dir: Path | None = None
        for name in QMAKE_NAMES:
            qmake = config.find_program(
                name, hints=self._host_bins(), version_flag="-v"
            )
            if qmake is None:
                continue
            answer = config.run_query(qmake.path, ["-query", "QT_INSTALL_HEADERS"])
            if answer:
                headers_dir = Path(answer)
                break

        if headers_dir is None or not headers_dir.is_dir():
            logger.warning("Qt headers not found; moc will run without -I flags")
            return []

        include_dirs = [headers_dir]
        include_dirs.extend(
            sorted(p for p in headers_dir.iterdir() if p.is_dir() and p.name.startswith("Qt"))
        )
        config.set("qt:include_dirs", [str(p) for p in include_dirs])
        return include_dirs


def find_qt_toolchain(config: Configure) -> QtToolchain:
    """Resolve the Qt toolchain.

    Raises:
        ToolNotFoundError: If moc cannot be found.
    """
    toolchain = config.find_toolchain(QtToolchain())
    if toolchain is None:
        raise ToolNotFoundError("moc")
    return toolchain
