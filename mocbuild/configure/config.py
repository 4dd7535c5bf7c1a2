# SPDX-License-Identifier: MIT
"""Configure context for mocbuild.

The Configure class provides the context for the configure phase:
program discovery for the Qt tools and configuration caching.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar, cast

from mocbuild.core.errors import ToolNotFoundError

if TYPE_CHECKING:
    from mocbuild.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)

ToolchainT = TypeVar("ToolchainT", bound="Toolchain")


@dataclass
class ProgramInfo:
    """Information about a found program.

    Attributes:
        path: Path to the program executable.
        version: Version string if detected.
    """

    path: Path
    version: str | None = None


class Configure:
    """Context for the configure phase.

    Example:
        config = Configure(build_dir=Path("build"))

        moc = config.find_program("moc", version_flag="-v")
        if moc:
            print(f"Found moc at {moc.path}")

        config.save()

    Attributes:
        build_dir: Directory for build outputs and cache.
    """

    def __init__(
        self,
        *,
        build_dir: Path | str = "build",
        cache_file: str = "mocbuild_config.json",
    ) -> None:
        """Create a configure context.

        Args:
            build_dir: Directory for build outputs.
            cache_file: Name of the cache file within build_dir.
        """
        self.build_dir = Path(build_dir)
        self._cache_file = cache_file
        self._cache: dict[str, Any] = {}
        self._toolchains: dict[str, Toolchain] = {}

        self._load_cache()

    def _cache_path(self) -> Path:
        return self.build_dir / self._cache_file

    def _load_cache(self) -> None:
        """Load configuration from cache file if it exists."""
        cache_path = self._cache_path()
        if cache_path.exists():
            try:
                with open(cache_path) as f:
                    self._cache = json.load(f)
            except (json.JSONDecodeError, OSError):
                logger.warning("Ignoring unreadable config cache %s", cache_path)
                self._cache = {}

    def save(self, path: Path | None = None) -> None:
        """Save configuration to cache file.

        Args:
            path: Optional path override for cache file.
        """
        cache_path = path or self._cache_path()
        cache_path.parent.mkdir(parents=True, exist_ok=True)

        with open(cache_path, "w") as f:
            json.dump(self._cache, f, indent=2, default=str)
            f.write("\n")

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default)

    def find_program(
        self,
        name: str,
        *,
        hints: list[Path | str] | None = None,
        version_flag: str = "--version",
        required: bool = False,
        use_cache: bool = True,
    ) -> ProgramInfo | None:
        """Find a program on the system.

        Searches for the program in:
        1. Hint paths (if provided)
        2. PATH environment variable

        Args:
            name: Program name (e.g., 'moc', 'qmake').
            hints: Additional paths to search (files or directories).
            version_flag: Flag to get version (for version detection).
            required: If True, raise error if not found.
            use_cache: If False, ignore a previously cached location.

        Returns:
            ProgramInfo if found, None otherwise.

        Raises:
            ToolNotFoundError: If required and not found.
        """
        cache_key = f"program:{name}"
        if use_cache and cache_key in self._cache:
            cached = self._cache[cache_key]
            path = Path(cached["path"])
            if path.exists():
                return ProgramInfo(path=path, version=cached.get("version"))

        found_path: Path | None = None

        if hints:
            for hint in hints:
                hint_path = Path(hint)
                if hint_path.is_file() and os.access(hint_path, os.X_OK):
                    found_path = hint_path
                    break
                candidate = hint_path / name
                if sys.platform == "win32" and not candidate.suffix:
                    candidate = candidate.with_suffix(".exe")
                if candidate.is_file() and os.access(candidate, os.X_OK):
                    found_path = candidate
                    break

        if found_path is None:
            found_path = self._which(name)

        if found_path is None:
            if required:
                raise ToolNotFoundError(name)
            return None

        version = self._get_program_version(found_path, version_flag)
        logger.debug("Found %s at %s (%s)", name, found_path, version or "unknown version")

        self._cache[cache_key] = {
            "path": str(found_path),
            "version": version,
        }

        return ProgramInfo(path=found_path, version=version)

    def _which(self, name: str) -> Path | None:
        result = shutil.which(name)
        if result:
            return Path(result)
        return None

    def _get_program_version(self, path: Path, version_flag: str) -> str | None:
        """Try to get the version of a program."""
        try:
            result = subprocess.run(
                [str(path), version_flag],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=5,
            )
            if result.returncode == 0:
                # moc prints its version on stdout, older releases on stderr
                for line in (result.stdout + "\n" + result.stderr).split("\n"):
                    line = line.strip()
                    if line:
                        return line
            return None
        except (subprocess.TimeoutExpired, OSError):
            return None

    def run_query(self, program: Path, args: list[str]) -> str | None:
        """Run a program and return its stripped stdout, or None on failure."""
        try:
            result = subprocess.run(
                [str(program), *args],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=10,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("Query %s %s failed: %s", program, " ".join(args), e)
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def find_toolchain(self, toolchain: ToolchainT) -> ToolchainT | None:
        """Configure a toolchain, once per configure context.

        Args:
            toolchain: Toolchain to configure.

        Returns:
            The configured toolchain, or None if it is unavailable.
        """
        if toolchain.name in self._toolchains:
            return cast(ToolchainT, self._toolchains[toolchain.name])

        if toolchain.configure(self):
            self._toolchains[toolchain.name] = toolchain
            return toolchain

        return None

    def __repr__(self) -> str:
        return f"Configure(build_dir={self.build_dir})"
