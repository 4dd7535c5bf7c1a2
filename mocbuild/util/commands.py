# SPDX-License-Identifier: MIT
"""Command helpers for mocbuild build rules.

These helpers are invoked from generated Ninja rules using Python, so the
include rewriting behaves the same whether actions run through Ninja or
through the local executor.

Usage in build rules:
    python -m mocbuild.util.commands rewrite-includes <template> <output> [name path...]
"""

from __future__ import annotations

import sys
from pathlib import Path

from mocbuild.core.rewrite import IncludeRewriteMap, rewrite


def rewrite_includes(template: str, output: str, pairs: list[str]) -> None:
    """Write template to output with quoted includes rewritten.

    Args:
        template: Raw moc output.
        output: File to write.
        pairs: Alternating basenames and root-relative paths. Each is its
            own argument, so names may contain any character but a quote.

    Raises:
        ValueError: If a basename has no path or is empty.
    """
    if len(pairs) % 2:
        raise ValueError(f"Invalid substitution: {pairs[-1]!r} has no path")
    substitutions: dict[str, str] = {}
    for name, path in zip(pairs[::2], pairs[1::2]):
        if not name:
            raise ValueError(f"Invalid substitution: empty name for {path!r}")
        substitutions[f'"{name}"'] = f'"{path}"'

    dest_path = Path(output)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    with open(template, encoding="utf-8", errors="surrogateescape", newline="") as f:
        text = f.read()
    with open(
        dest_path, "w", encoding="utf-8", errors="surrogateescape", newline=""
    ) as f:
        f.write(rewrite(text, IncludeRewriteMap(substitutions)))


def main() -> int:
    """Command-line entry point."""
    if len(sys.argv) < 2:
        print(
            "Usage: python -m mocbuild.util.commands <command> [args...]",
            file=sys.stderr,
        )
        print("Commands: rewrite-includes", file=sys.stderr)
        return 1

    cmd = sys.argv[1]

    if cmd == "rewrite-includes":
        if len(sys.argv) < 4:
            print(
                "Usage: python -m mocbuild.util.commands rewrite-includes "
                "<template> <output> [name path...]",
                file=sys.stderr,
            )
            return 1
        try:
            rewrite_includes(sys.argv[2], sys.argv[3], sys.argv[4:])
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        return 0

    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
