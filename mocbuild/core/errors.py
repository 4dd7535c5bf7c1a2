# SPDX-License-Identifier: MIT
"""Custom exceptions for mocbuild.

All mocbuild exceptions inherit from MocbuildError, which includes
optional source location information for better error messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mocbuild.util.source_location import SourceLocation


class MocbuildError(Exception):
    """Base class for all mocbuild exceptions.

    Attributes:
        message: The error message.
        location: Optional source location where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ConfigureError(MocbuildError):
    """Error while resolving the Qt toolchain."""


class ToolNotFoundError(ConfigureError):
    """Required tool was not found.

    Attributes:
        tool: The name of the tool that was not found.
    """

    def __init__(
        self,
        tool: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.tool = tool
        super().__init__(f"tool not found: {tool}", location)


class BuilderError(MocbuildError):
    """Error in a rule definition or action declaration."""


class InputContractError(BuilderError):
    """A rule was given inputs it does not accept.

    Raised at declaration time, before any action is created.
    """


class IncludeCollisionError(BuilderError):
    """Two headers in one batch share a basename.

    The generator refers to headers by basename only, so the rewrite
    would be ambiguous.

    Attributes:
        basename: The shared file name.
        paths: Root-relative paths of the colliding headers.
    """

    def __init__(
        self,
        basename: str,
        paths: list[str],
        location: SourceLocation | None = None,
    ) -> None:
        self.basename = basename
        self.paths = paths
        joined = ", ".join(paths)
        super().__init__(
            f"include rewrite collision: {basename!r} is the basename of {joined}",
            location,
        )


class DependencyCycleError(MocbuildError):
    """Circular dependency detected between declared actions.

    Attributes:
        cycle: The outputs forming the cycle.
    """

    def __init__(
        self,
        cycle: list[str],
        location: SourceLocation | None = None,
    ) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}", location)


class ExecutionError(MocbuildError):
    """Error while executing a declared action."""


class MissingSourceError(ExecutionError):
    """A declared input does not exist.

    Attributes:
        path: The path to the missing file.
    """

    def __init__(
        self,
        path: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.path = path
        super().__init__(f"source file not found: {path}", location)


class GeneratorInvocationError(ExecutionError):
    """The generator failed for one input.

    Attributes:
        input: The input file the invocation was declared for.
        arguments: The computed generator arguments.
        returncode: Exit status, or None if the process succeeded but
            did not produce a declared output.
        output: Captured stdout and stderr, verbatim.
    """

    def __init__(
        self,
        input: str,
        arguments: list[str],
        returncode: int | None,
        output: str = "",
        reason: str | None = None,
    ) -> None:
        self.input = input
        self.arguments = arguments
        self.returncode = returncode
        self.output = output
        if reason is None:
            reason = f"exited with status {returncode}"
        lines = [
            f"moc failed for {input}: {reason}",
            f"  arguments: {' '.join(arguments)}",
        ]
        if output:
            lines.append(output.rstrip("\n"))
        super().__init__("\n".join(lines))
