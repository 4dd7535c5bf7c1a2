# SPDX-License-Identifier: MIT
"""Command-line interface for mocbuild."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import mocbuild
from mocbuild.configure.config import Configure
from mocbuild.core.errors import MocbuildError
from mocbuild.core.executor import LocalExecutor
from mocbuild.core.providers import CcInfo, DefaultInfo, MocInfo, RuleResult
from mocbuild.generators.ninja import NinjaGenerator
from mocbuild.rules import RuleContext, moc_hdrs, moc_srcs
from mocbuild.toolchains.qt import QtInfo, find_qt_toolchain

# Set up logging
logger = logging.getLogger("mocbuild")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:  # Valid KEY=value
                variables[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return variables, remaining


def resolve_qtinfo(args: argparse.Namespace, build_dir: Path) -> QtInfo:
    """Resolve the Qt toolchain from flags, falling back to discovery."""
    if args.moc:
        return QtInfo.from_paths(args.moc, include_dirs=args.qt_include)

    config = Configure(build_dir=build_dir)
    qtinfo = find_qt_toolchain(config).qtinfo
    config.save()
    if args.qt_include:
        qtinfo = QtInfo.from_paths(
            qtinfo.moc,
            include_dirs=[*qtinfo.headers.system_includes, *args.qt_include],
            version=qtinfo.version,
        )
    return qtinfo


def _outputs(result: RuleResult) -> list[Path]:
    files = []
    if result.has(DefaultInfo):
        files.extend(result.get(DefaultInfo).files)
    if result.has(MocInfo):
        files.extend(result.get(MocInfo).jsons)
    if result.has(CcInfo):
        files.extend(result.get(CcInfo).compilation_context.headers)
    return [n.path for n in files]


def cmd_run(args: argparse.Namespace) -> int:
    """Declare the rule for the given inputs, then execute or write Ninja."""
    setup_logging(args.verbose, args.debug)

    variables, inputs = parse_variables(args.inputs)
    if variables:
        mocbuild.set_vars(variables)
        logger.debug("Build variables: %s", variables)

    build_dir = Path(args.build_dir)
    ctx = RuleContext(
        name=args.name or args.command,
        root_dir=Path(args.root),
        build_dir=build_dir,
        package=args.package,
        defined_at=None,
    )

    try:
        qtinfo = resolve_qtinfo(args, build_dir)
        if args.command == "hdrs":
            result = moc_hdrs(ctx, inputs, qtinfo, debug_includes=args.debug_includes)
        else:
            result = moc_srcs(ctx, inputs, qtinfo)

        if args.ninja:
            output_file = NinjaGenerator().generate([result], build_dir)
            print(output_file)
            return 0

        report = LocalExecutor(build_dir, cache=not args.no_cache).execute(result)
        logger.info(
            "%d actions run, %d up to date", len(report.executed), len(report.cached)
        )
    except MocbuildError as e:
        logger.error("%s", e)
        return 1

    for path in _outputs(result):
        print(path)
    return 0


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("inputs", nargs="*", help="Input files and KEY=value variables")
    parser.add_argument("--root", default=".", help="Source root (default: .)")
    parser.add_argument(
        "-B", "--build-dir", default="build", help="Build directory (default: build)"
    )
    parser.add_argument("--package", default="", help="Package directory for outputs")
    parser.add_argument("--name", help="Rule name used in messages")
    parser.add_argument("--moc", help="Path to moc (skips toolchain discovery)")
    parser.add_argument(
        "-I",
        "--qt-include",
        action="append",
        default=[],
        help="Qt include directory (repeatable)",
    )
    parser.add_argument(
        "--ninja", action="store_true", help="Write build.ninja instead of running moc"
    )
    parser.add_argument("--no-cache", action="store_true", help="Ignore the action cache")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")


def main() -> int:
    """Main entry point for the mocbuild CLI."""
    parser = argparse.ArgumentParser(
        prog="mocbuild",
        description="Run Qt's moc as cacheable build actions",
    )
    parser.add_argument("--version", action="version", version=mocbuild.__version__)
    subparsers = parser.add_subparsers(dest="command")

    hdrs_parser = subparsers.add_parser("hdrs", help="Run moc on headers")
    _add_common_args(hdrs_parser)
    hdrs_parser.add_argument(
        "--debug-includes",
        action="store_true",
        help="Ask moc to report how it resolves includes",
    )
    hdrs_parser.set_defaults(func=cmd_run, debug_includes=False)

    srcs_parser = subparsers.add_parser(
        "srcs", help="Run moc on sources in self-include mode"
    )
    _add_common_args(srcs_parser)
    srcs_parser.set_defaults(func=cmd_run, debug_includes=False)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
