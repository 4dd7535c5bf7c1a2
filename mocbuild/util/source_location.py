# SPDX-License-Identifier: MIT
"""Source locations for attributing errors to the user's build script."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path

# Frames from inside this package are skipped when looking for the caller.
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class SourceLocation:
    """A file/line pair in a build script."""

    filename: str
    lineno: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno}"


def get_caller_location() -> SourceLocation | None:
    """Return the location of the first caller outside of mocbuild.

    Returns:
        The location, or None if every frame on the stack is internal.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if filename.startswith("<"):
                # generated code, e.g. dataclass __init__
                frame = frame.f_back
                continue
            try:
                internal = Path(filename).resolve().is_relative_to(_PACKAGE_DIR)
            except OSError:
                internal = False
            if not internal:
                return SourceLocation(filename, frame.f_lineno)
            frame = frame.f_back
        return None
    finally:
        del frame
