# SPDX-License-Identifier: MIT
"""Ninja build file generator.

Writes the actions declared by moc rules to a ``build.ninja`` file, so that
Ninja can run and cache them instead of the local executor.

Paths are written as they were declared. Run Ninja from the directory the
rules were declared from:

    ninja -f build/build.ninja
"""

from __future__ import annotations

import logging
import shlex
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from mocbuild.core.action import GeneratorInvocation, RewriteIncludesAction
from mocbuild.core.executor import order_actions
from mocbuild.core.providers import CcInfo, DefaultInfo, MocInfo
from mocbuild.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from mocbuild.core.providers import RuleResult
    from mocbuild.node import FileNode

logger = logging.getLogger(__name__)


def escape_path(path: str) -> str:
    """Escape a path for use in a Ninja build line."""
    return path.replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


def escape_value(value: str) -> str:
    """Escape a variable value."""
    return value.replace("$", "$$")


def _command_line(tokens: list[str]) -> str:
    return " ".join(shlex.quote(t) for t in tokens)


class NinjaGenerator(BaseGenerator):
    """Generator for Ninja build files.

    Example:
        generator = NinjaGenerator()
        generator.generate([moc_hdrs(ctx, hdrs, qtinfo)], Path("build"))
        # Creates build/build.ninja
    """

    def __init__(self, filename: str = "build.ninja") -> None:
        super().__init__("ninja")
        self.filename = filename

    def generate(self, results: list[RuleResult], output_dir: Path) -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / self.filename

        actions = order_actions(a for result in results for a in result.actions)
        with open(output_file, "w") as f:
            self._write_header(f)
            self._write_rules(f)
            for action in actions:
                if isinstance(action, GeneratorInvocation):
                    self._write_moc_build(f, action)
                else:
                    self._write_rewrite_build(f, action)
            self._write_defaults(f, results)

        logger.info("Wrote %s (%d actions)", output_file, len(actions))
        return output_file

    def _write_header(self, f: TextIO) -> None:
        f.write("# Generated by mocbuild. Do not edit.\n")
        f.write("ninja_required_version = 1.3\n\n")
        python = sys.executable.replace("\\", "/")
        f.write(f"python = {escape_value(shlex.quote(python))}\n\n")

    def _write_rules(self, f: TextIO) -> None:
        f.write("rule moc\n")
        f.write("  command = $moc $args\n")
        f.write("  description = $description\n\n")
        f.write("rule rewrite_includes\n")
        f.write(
            "  command = $python -m mocbuild.util.commands rewrite-includes "
            "$in $out $substitutions\n"
        )
        f.write("  description = $description\n\n")

    def _paths(self, nodes: tuple[FileNode, ...] | list[FileNode]) -> str:
        return " ".join(escape_path(str(n.path)) for n in nodes)

    def _write_moc_build(self, f: TextIO, action: GeneratorInvocation) -> None:
        implicit = [n for n in action.inputs if n != action.input]
        line = f"build {self._paths(action.outputs)}: moc {self._paths([action.input])}"
        if implicit:
            line += f" | {self._paths(implicit)}"
        f.write(line + "\n")
        f.write(f"  moc = {escape_value(shlex.quote(str(action.executable)))}\n")
        f.write(f"  args = {escape_value(_command_line(list(action.arguments)))}\n")
        f.write(f"  description = {escape_value(action.progress_message)}\n\n")

    def _write_rewrite_build(self, f: TextIO, action: RewriteIncludesAction) -> None:
        pairs = [part for pair in action.rewrite_map.pairs() for part in pair]
        f.write(
            f"build {self._paths(action.outputs)}: rewrite_includes "
            f"{self._paths(action.inputs)}\n"
        )
        f.write(f"  substitutions = {escape_value(_command_line(pairs))}\n")
        f.write(f"  description = {escape_value(action.progress_message)}\n\n")

    def _write_defaults(self, f: TextIO, results: list[RuleResult]) -> None:
        defaults: list[FileNode] = []
        for result in results:
            if result.has(DefaultInfo):
                defaults.extend(result.get(DefaultInfo).files)
            if result.has(MocInfo):
                defaults.extend(result.get(MocInfo).jsons)
            if result.has(CcInfo):
                defaults.extend(result.get(CcInfo).compilation_context.headers)
        if defaults:
            f.write(f"default {self._paths(list(dict.fromkeys(defaults)))}\n")
