"""
Unit tests for FlagBuilder.

Tests the Emscripten command line construction.
"""

from pathlib import Path

import pytest

from emloader.build.build_request import Dialect
from emloader.build.flag_builder import (
    FlagBuilder,
    FlagBuilderError,
    format_command,
)
from emloader.config import LoaderOptions


class TestFlagBuilder:
    """Test suite for FlagBuilder."""

    @pytest.fixture
    def builder(self):
        return FlagBuilder(target="web")

    @pytest.fixture
    def workdir(self, tmp_path):
        return tmp_path / "ws"

    def test_minimal_c_flags(self, builder, workdir):
        """Test flags for a C file with no options."""
        flags = builder.build(Dialect.C, workdir, "example", LoaderOptions())

        assert flags == [
            "-s", "WASM=1",
            "-s", "MODULARIZE=1",
            "-s", "ENVIRONMENT=web",
            "-s", "EXPORTED_FUNCTIONS=['_malloc','_free']",
            "-o", str(workdir / "example.js"),
        ]

    def test_cpp_adds_language_standard(self, builder, workdir):
        """Test that only C++ gets -std=c++11."""
        cpp_flags = builder.build(Dialect.CPP, workdir, "example", LoaderOptions())
        c_flags = builder.build(Dialect.C, workdir, "example", LoaderOptions())

        assert "-std=c++11" in cpp_flags
        assert "-std=c++11" not in c_flags
        # Right after the code generation flags
        assert cpp_flags.index("-std=c++11") == 4

    def test_target_used_verbatim(self, workdir):
        """Test that the target becomes the ENVIRONMENT value."""
        flags = FlagBuilder(target="web,worker").build(Dialect.C, workdir, "x", LoaderOptions())

        assert "ENVIRONMENT=web,worker" in flags

    def test_exported_functions_deduplicated(self, builder, workdir):
        """Test baseline exports appear exactly once each."""
        options = LoaderOptions(exported_funcs=("_free", "_add", "_malloc", "_add", "_sub"))

        flags = builder.build(Dialect.C, workdir, "example", options)

        assert "EXPORTED_FUNCTIONS=['_malloc','_free','_add','_sub']" in flags

    def test_exported_symbols_adds_prefix(self):
        """Test that unprefixed names get the export prefix."""
        assert FlagBuilder.exported_symbols(["add", "_add", "  "]) == ["_malloc", "_free", "_add"]

    def test_gl_flags(self, builder, workdir):
        """Test graphics/windowing flags."""
        flags = builder.build(Dialect.CPP, workdir, "game", LoaderOptions(use_gl=True))

        start = flags.index("-lGL")
        assert flags[start:start + 6] == [
            "-lGL", "-lglfw", "-s", "USE_GLFW=3", "-s", "USE_WEBGL2=1"
        ]

    def test_no_gl_flags_by_default(self, builder, workdir):
        flags = builder.build(Dialect.CPP, workdir, "game", LoaderOptions())

        assert "-lGL" not in flags
        assert "USE_WEBGL2=1" not in flags

    def test_includes_preload_and_extra_flags_order(self, builder, workdir):
        """Test structured flags come before passthrough flags and -o is last."""
        options = LoaderOptions(
            includes=("inc/a", "inc/b"),
            data=("assets", "fonts/a.ttf"),
            extra_flags=("-O2", "-s", "ALLOW_MEMORY_GROWTH=1"),
        )

        flags = builder.build(Dialect.C, workdir, "example", options)

        assert flags[-2:] == ["-o", str(workdir / "example.js")]
        i_a = flags.index("inc/a")
        i_b = flags.index("inc/b")
        p_assets = flags.index("assets")
        p_fonts = flags.index("fonts/a.ttf")
        extra = flags.index("-O2")
        assert flags[i_a - 1] == "-I"
        assert flags[p_assets - 1] == "--preload-file"
        assert i_a < i_b < p_assets < p_fonts < extra
        assert flags[extra:extra + 3] == ["-O2", "-s", "ALLOW_MEMORY_GROWTH=1"]

    def test_empty_lists_produce_no_flags(self, builder, workdir):
        """Test empty include/passthrough entries never become empty flags."""
        options = LoaderOptions(includes=(), data=("",), extra_flags=("", ""))

        flags = builder.build(Dialect.C, workdir, "example", options)

        assert "" not in flags
        assert "-I" not in flags
        assert "--preload-file" not in flags

    def test_deterministic(self, builder, workdir):
        """Test identical inputs give identical argument lists."""
        options = LoaderOptions(
            includes=("inc",), data=("assets",), use_gl=True,
            extra_flags=("-O3",), exported_funcs=("_a", "_b"),
        )

        first = builder.build(Dialect.CPP, workdir, "example", options)
        second = FlagBuilder(target="web").build(Dialect.CPP, workdir, "example", options)

        assert first == second
        assert format_command(first) == format_command(second)

    def test_pre_generated_rejected(self, builder, workdir):
        """Test that pre-generated input has no compiler flags."""
        with pytest.raises(FlagBuilderError, match="pre-generated"):
            builder.build(Dialect.PRE_GENERATED, workdir, "example", LoaderOptions())

    def test_parse_flag_string(self):
        """Test parsing flag strings with quoted values."""
        flags = FlagBuilder.parse_flag_string('-O2 -s "EXPORT_NAME=Foo Bar"')

        assert flags == ["-O2", "-s", "EXPORT_NAME=Foo Bar"]

    def test_parse_flag_string_unbalanced_quotes(self):
        """Test fallback to whitespace split on unbalanced quotes."""
        assert FlagBuilder.parse_flag_string('-O2 -DNAME="x') == ["-O2", '-DNAME="x']

    def test_format_command_is_shell_reproducible(self):
        cmd = ["em++", Path("src/example.cpp"), "-s", "EXPORTED_FUNCTIONS=['_malloc','_free']"]

        rendered = format_command(cmd)

        assert rendered.startswith("em++ src/example.cpp -s ")
        assert "_malloc" in rendered
