# SPDX-License-Identifier: MIT
"""Rules that run Qt's moc (https://doc.qt.io/qt-6/moc.html).

moc_hdrs runs moc on headers and exposes the generated C++ sources for
compilation, together with the metatypes JSON documents moc emits. Those
are required to register C++ types with QML.

moc_srcs runs moc on implementation files in "self-include" mode (``-i``).
The resulting ``<name>.moc`` fragment must be included at the end of the
originating file::

    #include "foo.moc"

Compile rules only accept a fixed set of source extensions, so the
fragments are exposed through a CcInfo compilation context, never as
sources. The fragment directory is added to the include path because moc
expects quote includes relative to the including file, while the build
graph addresses files from the root.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from mocbuild.core.action import GeneratorInvocation, MocArgs, RewriteIncludesAction
from mocbuild.core.errors import InputContractError
from mocbuild.core.providers import (
    CcInfo,
    CompilationContext,
    DefaultInfo,
    MocInfo,
    RuleResult,
)
from mocbuild.core.rewrite import IncludeRewriteMap
from mocbuild.node import FileNode

if TYPE_CHECKING:
    from mocbuild.rules.context import RuleContext
    from mocbuild.toolchains.qt import QtInfo

logger = logging.getLogger(__name__)

HDRS_EXTENSIONS = (".h", ".hh", ".hpp", ".hxx")
SRCS_EXTENSIONS = (".cc", ".cpp", ".cxx", ".c++")

# Prefix of generated sources, keeps them apart from hand-written files
GENERATED_PREFIX = "moc_"
FRAGMENT_SUFFIX = ".moc"


def _validate_inputs(
    ctx: RuleContext,
    attr: str,
    files: Sequence[str | Path | FileNode],
    extensions: tuple[str, ...],
) -> list[FileNode]:
    if not files:
        raise InputContractError(
            f"{ctx.name}: attribute {attr!r} is mandatory and must not be empty",
            ctx.defined_at,
        )

    nodes: list[FileNode] = []
    for f in files:
        node = ctx.source(f)
        if node.path.suffix not in extensions:
            raise InputContractError(
                f"{ctx.name}: {node.short_path} is not allowed in {attr!r} "
                f"(expected one of {', '.join(extensions)})",
                ctx.defined_at,
            )
        if node in nodes:
            raise InputContractError(
                f"{ctx.name}: {node.short_path} is listed twice in {attr!r}",
                ctx.defined_at,
            )
        nodes.append(node)
    return nodes


def moc_hdrs(
    ctx: RuleContext,
    hdrs: Sequence[str | Path | FileNode],
    qtinfo: QtInfo,
    *,
    debug_includes: bool = False,
) -> RuleResult:
    """Declare moc invocations for a set of headers.

    For each header ``foo.h``, moc writes ``moc_foo`` and ``moc_foo.json``;
    the quoted includes in ``moc_foo`` are then rewritten to root-relative
    paths, producing ``moc_foo.cpp``.

    Args:
        ctx: Rule context.
        hdrs: Headers to run moc on.
        qtinfo: Resolved Qt toolchain.
        debug_includes: Pass ``--debug-includes`` to moc.

    Returns:
        A RuleResult with DefaultInfo (generated sources, headers kept
        visible) and MocInfo (metatypes JSON, headers).

    Raises:
        InputContractError: If hdrs is empty or holds a non-header.
        IncludeCollisionError: If two headers share a basename.
    """
    headers = _validate_inputs(ctx, "hdrs", hdrs, HDRS_EXTENSIONS)
    rewrite_map = IncludeRewriteMap.from_headers(headers)

    compilation_context = qtinfo.headers
    # moc has to see every header of the batch, and the Qt headers
    visible = tuple(dict.fromkeys([*headers, *compilation_context.headers]))

    actions: list[GeneratorInvocation | RewriteIncludesAction] = []
    cpps: list[FileNode] = []
    jsons: list[FileNode] = []
    for hdr in headers:
        moc = ctx.declare_file(f"{GENERATED_PREFIX}{hdr.stem}", owner=hdr.short_path)
        json = ctx.declare_file(f"{moc.basename}.json", owner=hdr.short_path)
        jsons.append(json)

        args = MocArgs()
        args.add("--output-json")
        if debug_includes:
            args.add("--debug-includes")
        args.add_all("-I", list(compilation_context.system_includes))
        args.add(hdr)
        args.add("-o", moc)

        actions.append(
            GeneratorInvocation(
                executable=qtinfo.moc,
                input=hdr,
                inputs=visible,
                outputs=(moc, json),
                arguments=args.build(),
                progress_message=f"[Qt moc]: generating {moc.short_path}",
            )
        )

        cpp = ctx.declare_file(f"{moc.basename}.cpp", owner=hdr.short_path)
        cpps.append(cpp)
        actions.append(
            RewriteIncludesAction(
                template=moc,
                output=cpp,
                rewrite_map=rewrite_map,
                progress_message=f"[Qt moc]: rewriting includes in {cpp.short_path}",
            )
        )
        logger.debug("%s: declared moc for %s -> %s", ctx.name, hdr.short_path, cpp.short_path)

    return RuleResult(
        name=ctx.name,
        providers=(
            DefaultInfo(files=tuple(cpps), transitive_files=tuple(headers)),
            MocInfo(jsons=tuple(jsons), headers=tuple(headers)),
        ),
        actions=tuple(actions),
    )


def moc_srcs(
    ctx: RuleContext,
    srcs: Sequence[str | Path | FileNode],
    qtinfo: QtInfo,
) -> RuleResult:
    """Declare self-include moc invocations for a set of sources.

    See https://doc.qt.io/qt-6/moc.html#writing-make-rules-for-invoking-moc

    Args:
        ctx: Rule context.
        srcs: Implementation files to run moc on.
        qtinfo: Resolved Qt toolchain.

    Returns:
        A RuleResult whose only provider is CcInfo: the fragments as
        headers, their directories as include directories.

    Raises:
        InputContractError: If srcs is empty or holds a non-source.
    """
    sources = _validate_inputs(ctx, "srcs", srcs, SRCS_EXTENSIONS)

    actions: list[GeneratorInvocation] = []
    fragments: list[FileNode] = []
    includes: list[Path] = []
    for src in sources:
        fragment = ctx.declare_file(f"{src.stem}{FRAGMENT_SUFFIX}", owner=src.short_path)
        fragments.append(fragment)
        if fragment.dirname not in includes:
            includes.append(fragment.dirname)

        args = MocArgs()
        args.add("-o", fragment)
        args.add("-i")
        args.add(src)

        actions.append(
            GeneratorInvocation(
                executable=qtinfo.moc,
                input=src,
                inputs=(src,),
                outputs=(fragment,),
                arguments=args.build(),
                progress_message=f"[Qt moc]: generating {fragment.short_path}",
            )
        )
        logger.debug(
            "%s: declared moc -i for %s -> %s", ctx.name, src.short_path, fragment.short_path
        )

    compilation_context = CompilationContext(
        includes=tuple(includes),
        headers=tuple(fragments),
    )
    return RuleResult(
        name=ctx.name,
        providers=(CcInfo(compilation_context=compilation_context),),
        actions=tuple(actions),
    )
