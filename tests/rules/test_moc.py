# SPDX-License-Identifier: MIT
"""Tests for the moc_hdrs and moc_srcs rules (declaration only)."""

from __future__ import annotations

from pathlib import Path

import pytest

from mocbuild.core.action import GeneratorInvocation, RewriteIncludesAction
from mocbuild.core.errors import BuilderError, IncludeCollisionError, InputContractError
from mocbuild.core.providers import CcInfo, DefaultInfo, MocInfo
from mocbuild.rules import RuleContext, moc_hdrs, moc_srcs
from mocbuild.toolchains.qt import QtInfo


@pytest.fixture
def ctx(tmp_path: Path) -> RuleContext:
    return RuleContext("ui", root_dir=tmp_path, build_dir=tmp_path / "build", package="ui")


@pytest.fixture
def toolchain() -> QtInfo:
    return QtInfo.from_paths(
        "/opt/qt/bin/moc",
        include_dirs=["/opt/qt/include", "/opt/qt/include/QtCore"],
        headers=["/opt/qt/include/QtCore/qobject.h"],
    )


def invocations(result) -> list[GeneratorInvocation]:
    return [a for a in result.actions if isinstance(a, GeneratorInvocation)]


def rewrites(result) -> list[RewriteIncludesAction]:
    return [a for a in result.actions if isinstance(a, RewriteIncludesAction)]


class TestMocHdrs:
    def test_arguments(self, ctx, toolchain, tmp_path):
        result = moc_hdrs(ctx, ["ui/widget.h"], toolchain)

        (action,) = invocations(result)
        assert action.executable == Path("/opt/qt/bin/moc")
        assert action.arguments == (
            "--output-json",
            "-I",
            "/opt/qt/include",
            "-I",
            "/opt/qt/include/QtCore",
            str(tmp_path / "ui" / "widget.h"),
            "-o",
            str(tmp_path / "build" / "ui" / "moc_widget"),
        )
        assert action.progress_message == "[Qt moc]: generating ui/moc_widget"

    def test_debug_includes(self, ctx, toolchain):
        result = moc_hdrs(ctx, ["ui/widget.h"], toolchain, debug_includes=True)

        (action,) = invocations(result)
        assert action.arguments[:2] == ("--output-json", "--debug-includes")

    def test_outputs(self, ctx, toolchain):
        result = moc_hdrs(ctx, ["ui/widget.h"], toolchain)

        (action,) = invocations(result)
        assert [o.short_path for o in action.outputs] == [
            "ui/moc_widget",
            "ui/moc_widget.json",
        ]
        (rewrite_action,) = rewrites(result)
        assert rewrite_action.template == action.outputs[0]
        assert rewrite_action.output.short_path == "ui/moc_widget.cpp"

    def test_whole_batch_is_visible_to_each_invocation(self, ctx, toolchain):
        result = moc_hdrs(ctx, ["ui/widget.h", "ui/dialogs/dialog.hpp"], toolchain)

        for action in invocations(result):
            visible = {n.path.as_posix() for n in action.inputs}
            assert any(p.endswith("ui/widget.h") for p in visible)
            assert any(p.endswith("ui/dialogs/dialog.hpp") for p in visible)
            assert "/opt/qt/include/QtCore/qobject.h" in visible

    def test_one_output_per_header(self, ctx, toolchain):
        hdrs = ["ui/a.h", "ui/b.hh", "ui/c.hpp", "ui/d.hxx"]
        result = moc_hdrs(ctx, hdrs, toolchain)

        info = result.get(DefaultInfo)
        assert [f.short_path for f in info.files] == [
            "ui/moc_a.cpp",
            "ui/moc_b.cpp",
            "ui/moc_c.cpp",
            "ui/moc_d.cpp",
        ]
        assert [a.input.short_path for a in invocations(result)] == hdrs

    def test_providers(self, ctx, toolchain):
        result = moc_hdrs(ctx, ["ui/widget.h", "core/model.h"], toolchain)

        default_info = result.get(DefaultInfo)
        moc_info = result.get(MocInfo)
        assert [h.short_path for h in default_info.transitive_files] == [
            "ui/widget.h",
            "core/model.h",
        ]
        assert [j.short_path for j in moc_info.jsons] == [
            "ui/moc_widget.json",
            "ui/moc_model.json",
        ]
        assert moc_info.headers == default_info.transitive_files
        assert not result.has(CcInfo)

    def test_rewrite_map_covers_batch(self, ctx, toolchain):
        result = moc_hdrs(ctx, ["ui/widget.h", "core/model.h"], toolchain)

        for action in rewrites(result):
            assert dict(action.rewrite_map) == {
                '"widget.h"': '"ui/widget.h"',
                '"model.h"': '"core/model.h"',
            }

    def test_stem_keeps_extension_letters(self, ctx, toolchain):
        # "path.h" must become moc_path, not moc_pat
        result = moc_hdrs(ctx, ["ui/path.h"], toolchain)
        assert result.get(DefaultInfo).files[0].basename == "moc_path.cpp"

    def test_empty_hdrs(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="must not be empty"):
            moc_hdrs(ctx, [], toolchain)

    def test_rejects_sources(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="not allowed in 'hdrs'"):
            moc_hdrs(ctx, ["ui/widget.h", "ui/widget.cpp"], toolchain)

    def test_rejects_duplicates(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="listed twice"):
            moc_hdrs(ctx, ["ui/widget.h", "ui/widget.h"], toolchain)

    def test_basename_collision(self, ctx, toolchain):
        with pytest.raises(IncludeCollisionError) as excinfo:
            moc_hdrs(ctx, ["a/widget.h", "b/widget.h"], toolchain)
        assert excinfo.value.paths == ["a/widget.h", "b/widget.h"]

    def test_same_stem_different_extension(self, ctx, toolchain):
        with pytest.raises(BuilderError, match="generated twice"):
            moc_hdrs(ctx, ["ui/widget.h", "ui/widget.hpp"], toolchain)

    def test_outside_root(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="outside the source root"):
            moc_hdrs(ctx, ["../elsewhere/widget.h"], toolchain)


class TestMocSrcs:
    def test_self_include_invocation(self, ctx, toolchain, tmp_path):
        result = moc_srcs(ctx, ["app/thing.cpp"], toolchain)

        (action,) = result.actions
        assert isinstance(action, GeneratorInvocation)
        fragment = tmp_path / "build" / "ui" / "thing.moc"
        assert action.arguments == (
            "-o",
            str(fragment),
            "-i",
            str(tmp_path / "app" / "thing.cpp"),
        )
        # Self-include mode reads only the one file
        assert action.inputs == (action.input,)
        assert [o.path for o in action.outputs] == [fragment]

    def test_compilation_context(self, ctx, toolchain, tmp_path):
        result = moc_srcs(ctx, ["app/thing.cpp", "app/other.cc"], toolchain)

        context = result.get(CcInfo).compilation_context
        assert context.includes == (tmp_path / "build" / "ui",)
        assert [h.basename for h in context.headers] == ["thing.moc", "other.moc"]

    def test_fragments_are_never_sources(self, ctx, toolchain):
        result = moc_srcs(ctx, ["app/thing.cpp"], toolchain)

        assert not result.has(DefaultInfo)
        assert not result.has(MocInfo)

    def test_all_extensions(self, ctx, toolchain):
        result = moc_srcs(ctx, ["a.cc", "b.cpp", "c.cxx", "d.c++"], toolchain)
        assert len(result.actions) == 4

    def test_empty_srcs(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="'srcs'"):
            moc_srcs(ctx, [], toolchain)

    def test_rejects_headers(self, ctx, toolchain):
        with pytest.raises(InputContractError, match="not allowed in 'srcs'"):
            moc_srcs(ctx, ["app/thing.h"], toolchain)

    def test_same_stem_in_two_directories(self, ctx, toolchain):
        with pytest.raises(BuilderError, match="generated twice"):
            moc_srcs(ctx, ["a/thing.cpp", "b/thing.cpp"], toolchain)
