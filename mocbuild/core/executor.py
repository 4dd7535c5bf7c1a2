# SPDX-License-Identifier: MIT
"""Local execution of declared actions.

The rules only describe work. LocalExecutor performs it: it orders the
actions by their declared inputs and outputs, runs moc for each
GeneratorInvocation and applies include rewriting for each
RewriteIncludesAction.

Each action runs at most once per executor. With caching enabled, an
action whose arguments and input contents match a previous run, and whose
outputs still exist, is skipped.
"""

from __future__ import annotations

import hashlib
import json
import logging
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from mocbuild.core.action import GeneratorInvocation, RewriteIncludesAction
from mocbuild.core.errors import (
    DependencyCycleError,
    ExecutionError,
    GeneratorInvocationError,
    MissingSourceError,
)
from mocbuild.core.providers import RuleResult
from mocbuild.core.rewrite import rewrite

if TYPE_CHECKING:
    from mocbuild.core.action import Action

logger = logging.getLogger(__name__)


def _file_digest(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


class ActionCache:
    """Persistent record of actions already run.

    Stored as JSON in the build directory, keyed by the action's cache key.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._entries: dict[str, str] = {}
        if path.exists():
            try:
                with open(path) as f:
                    self._entries = json.load(f)
            except (json.JSONDecodeError, OSError):
                logger.warning("Ignoring unreadable action cache %s", path)
                self._entries = {}

    def is_fresh(self, action: Action, digest: str) -> bool:
        if self._entries.get(action.cache_key()) != digest:
            return False
        return all(out.exists() for out in action.outputs)

    def record(self, action: Action, digest: str) -> None:
        self._entries[action.cache_key()] = digest

    def forget(self, action: Action) -> None:
        self._entries.pop(action.cache_key(), None)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._entries, f, indent=2, sort_keys=True)
            f.write("\n")


@dataclass
class ExecutionReport:
    """Which actions ran and which were up to date."""

    executed: list[Action] = field(default_factory=list)
    cached: list[Action] = field(default_factory=list)


def order_actions(actions: Iterable[Action]) -> list[Action]:
    """Sort actions so that producers come before their consumers.

    Actions that do not depend on each other keep their relative order.

    Raises:
        ExecutionError: If two actions declare the same output.
        DependencyCycleError: If the declared files form a cycle.
    """
    actions = list(dict.fromkeys(actions))
    producers: dict[Path, Action] = {}
    for action in actions:
        for out in action.outputs:
            if out.path in producers:
                raise ExecutionError(f"{out.short_path} is declared as output of two actions")
            producers[out.path] = action

    ordered: list[Action] = []
    state: dict[int, str] = {}

    def visit(action: Action, chain: list[str]) -> None:
        key = id(action)
        if state.get(key) == "done":
            return
        if state.get(key) == "visiting":
            raise DependencyCycleError(chain)
        state[key] = "visiting"
        for inp in action.inputs:
            producer = producers.get(inp.path)
            if producer is not None:
                visit(producer, [*chain, inp.short_path])
        state[key] = "done"
        ordered.append(action)

    for action in actions:
        visit(action, [action.outputs[0].short_path])
    return ordered


class LocalExecutor:
    """Runs declared actions on the local machine.

    Example:
        executor = LocalExecutor(Path("build"))
        report = executor.execute(moc_hdrs(ctx, hdrs, qtinfo))

    Attributes:
        build_dir: Build directory; holds the action cache.
    """

    CACHE_FILE = "mocbuild_actions.json"

    def __init__(self, build_dir: Path | str, *, cache: bool = True) -> None:
        self.build_dir = Path(build_dir)
        self._cache = ActionCache(self.build_dir / self.CACHE_FILE) if cache else None
        self._done: set[str] = set()

    def execute(self, *work: RuleResult | Action | Iterable[Action]) -> ExecutionReport:
        """Run actions, or the actions of rule results.

        Raises:
            MissingSourceError: If a declared input does not exist.
            GeneratorInvocationError: If moc fails for an input. Outputs
                derived from that input by earlier runs are removed.
        """
        actions: list[Action] = []
        for item in work:
            if isinstance(item, RuleResult):
                actions.extend(item.actions)
            elif isinstance(item, (GeneratorInvocation, RewriteIncludesAction)):
                actions.append(item)
            else:
                actions.extend(item)

        report = ExecutionReport()
        ordered = order_actions(actions)
        try:
            for action in ordered:
                key = action.cache_key()
                if key in self._done:
                    continue
                try:
                    ran = self._run(action)
                except GeneratorInvocationError:
                    self._discard_consumers(action, ordered)
                    raise
                if ran:
                    report.executed.append(action)
                else:
                    report.cached.append(action)
                self._done.add(key)
        finally:
            if self._cache is not None:
                self._cache.save()
        return report

    def _input_digest(self, action: Action) -> str:
        h = hashlib.sha256()
        if isinstance(action, GeneratorInvocation):
            try:
                stat = action.executable.stat()
                h.update(f"{action.executable}:{stat.st_size}:{stat.st_mtime_ns}".encode())
            except OSError:
                h.update(str(action.executable).encode())
        for inp in action.inputs:
            if not inp.exists():
                raise MissingSourceError(inp.short_path)
            h.update(str(inp.path).encode())
            h.update(_file_digest(inp.path).encode())
        return h.hexdigest()

    def _run(self, action: Action) -> bool:
        """Run one action; return False if it was up to date."""
        digest = self._input_digest(action)
        if self._cache is not None and self._cache.is_fresh(action, digest):
            logger.debug("Up to date: %s", ", ".join(o.short_path for o in action.outputs))
            return False

        logger.info("%s", action.progress_message)
        for out in action.outputs:
            out.path.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(action, GeneratorInvocation):
            self._run_generator(action)
        else:
            self._run_rewrite(action)

        if self._cache is not None:
            self._cache.record(action, digest)
        return True

    def _run_generator(self, action: GeneratorInvocation) -> None:
        command = action.command()
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(command, capture_output=True)
        except OSError as e:
            raise GeneratorInvocationError(
                action.input.short_path, list(action.arguments), None, reason=str(e)
            ) from e

        output = _join_output(result)
        if result.returncode != 0:
            raise GeneratorInvocationError(
                action.input.short_path,
                list(action.arguments),
                result.returncode,
                output,
            )

        missing = [out.short_path for out in action.outputs if not out.exists()]
        if missing:
            raise GeneratorInvocationError(
                action.input.short_path,
                list(action.arguments),
                None,
                output,
                reason=f"declared output not produced: {', '.join(missing)}",
            )

        if output:
            logger.debug("moc output for %s:\n%s", action.input.short_path, output)

    def _run_rewrite(self, action: RewriteIncludesAction) -> None:
        # Undecodable bytes pass through unchanged
        with open(
            action.template.path, encoding="utf-8", errors="surrogateescape", newline=""
        ) as f:
            text = f.read()
        with open(
            action.output.path, "w", encoding="utf-8", errors="surrogateescape",
            newline="",
        ) as f:
            f.write(rewrite(text, action.rewrite_map))

    def _discard_outputs(self, action: Action) -> None:
        for out in action.outputs:
            out.path.unlink(missing_ok=True)

    def _discard_consumers(self, failed: Action, ordered: list[Action]) -> None:
        """Remove what earlier runs derived from a failed action's outputs."""
        self._discard_outputs(failed)
        stale = {out.path for out in failed.outputs}
        if self._cache is not None:
            self._cache.forget(failed)
        for action in ordered:
            if not any(inp.path in stale for inp in action.inputs):
                continue
            stale.update(out.path for out in action.outputs)
            self._discard_outputs(action)
            if self._cache is not None:
                self._cache.forget(action)
            logger.debug(
                "Removed stale %s", ", ".join(o.short_path for o in action.outputs)
            )


def _join_output(result: subprocess.CompletedProcess[bytes]) -> str:
    parts = [p for p in (result.stdout, result.stderr) if p]
    return b"".join(parts).decode("utf-8", errors="backslashreplace")
