# SPDX-License-Identifier: MIT
"""Declared actions.

Rules do not run anything. They return immutable descriptions of the work
needed (inputs, outputs, arguments) and an executor performs them later.
Every file an action may read must be in ``inputs`` and every file it may
write must be in ``outputs``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from mocbuild.core.errors import BuilderError
from mocbuild.core.rewrite import IncludeRewriteMap
from mocbuild.node import FileNode


class MocArgs:
    """Builds a generator argument list.

    Example:
        args = MocArgs()
        args.add("--output-json")
        args.add_all("-I", ["/usr/include/qt6"])
        args.add(hdr)
        args.add("-o", out)
        args.build()  # ('--output-json', '-I', '/usr/include/qt6', ...)
    """

    def __init__(self) -> None:
        self._args: list[str] = []

    @staticmethod
    def _format(value: str | Path | FileNode) -> str:
        if isinstance(value, FileNode):
            return str(value.path)
        return str(value)

    def add(
        self,
        arg: str | Path | FileNode,
        value: str | Path | FileNode | None = None,
    ) -> MocArgs:
        """Append an argument, or a flag followed by its value."""
        self._args.append(self._format(arg))
        if value is not None:
            self._args.append(self._format(value))
        return self

    def add_all(self, flag: str, values: list[str] | list[Path]) -> MocArgs:
        """Append ``flag value`` once for each value."""
        for value in values:
            self.add(flag, value)
        return self

    def build(self) -> tuple[str, ...]:
        return tuple(self._args)


def _digest(payload: dict) -> str:
    data = json.dumps(payload, sort_keys=True).encode()
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class GeneratorInvocation:
    """One execution of the generator for a single input file.

    Attributes:
        executable: Path to moc.
        input: The positional input file.
        inputs: Every file moc may read, including ``input``.
        outputs: Every file moc may write.
        arguments: Command-line arguments, without the executable.
        progress_message: Human-readable description of the action.
        mnemonic: Short action kind.
    """

    executable: Path
    input: FileNode
    inputs: tuple[FileNode, ...]
    outputs: tuple[FileNode, ...]
    arguments: tuple[str, ...]
    progress_message: str = ""
    mnemonic: str = "QtMoc"

    def __post_init__(self) -> None:
        if self.input not in self.inputs:
            raise BuilderError(f"input {self.input.short_path} is not declared")
        if not self.outputs:
            raise BuilderError(f"no outputs declared for {self.input.short_path}")
        overlap = set(self.inputs) & set(self.outputs)
        if overlap:
            names = ", ".join(sorted(n.short_path for n in overlap))
            raise BuilderError(f"files declared as both input and output: {names}")

    def command(self) -> list[str]:
        return [str(self.executable), *self.arguments]

    def cache_key(self) -> str:
        return _digest(
            {
                "mnemonic": self.mnemonic,
                "executable": str(self.executable),
                "arguments": list(self.arguments),
                "inputs": sorted(str(n.path) for n in self.inputs),
                "outputs": sorted(str(n.path) for n in self.outputs),
            }
        )


@dataclass(frozen=True)
class RewriteIncludesAction:
    """Copies a generated file, rewriting its quoted includes.

    Attributes:
        template: The raw moc output.
        output: The rewritten source.
        rewrite_map: Substitutions to apply.
        progress_message: Human-readable description of the action.
    """

    template: FileNode
    output: FileNode
    rewrite_map: IncludeRewriteMap = field(compare=False)
    progress_message: str = ""
    mnemonic: str = "RewriteIncludes"

    @property
    def inputs(self) -> tuple[FileNode, ...]:
        return (self.template,)

    @property
    def outputs(self) -> tuple[FileNode, ...]:
        return (self.output,)

    def cache_key(self) -> str:
        return _digest(
            {
                "mnemonic": self.mnemonic,
                "template": str(self.template.path),
                "output": str(self.output.path),
                "substitutions": sorted(self.rewrite_map.items()),
            }
        )


Action = Union[GeneratorInvocation, RewriteIncludesAction]
