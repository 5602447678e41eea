"""Compilation Flag Builder.

This module builds the Emscripten command line for a single build request.

Design:
    - Pure function of its inputs: identical requests give identical argv
    - Each flag and its value are separate argv tokens (no shell involved)
    - Passthrough flags come after all structured flags so they can override
    - The output path flag is always last
"""

import shlex
from pathlib import Path
from typing import Iterable, List, Sequence

from ..config.loader_options import LoaderOptions
from .build_request import Dialect

BASELINE_EXPORTS = ("_malloc", "_free")
EXPORT_PREFIX = "_"
CXX_STANDARD_FLAG = "-std=c++11"
GL_FLAGS = ("-lGL", "-lglfw", "-s", "USE_GLFW=3", "-s", "USE_WEBGL2=1")


class FlagBuilderError(Exception):
    """Raised when flag building operations fail."""
    pass


class FlagBuilder:
    """Builds Emscripten compiler arguments from a LoaderOptions record.

    Usage:
        builder = FlagBuilder(target="web")
        flags = builder.build(Dialect.C, Path("/tmp/ws"), "example", LoaderOptions())
        # -s WASM=1 -s MODULARIZE=1 -s ENVIRONMENT=web
        # -s EXPORTED_FUNCTIONS=['_malloc','_free'] -o /tmp/ws/example.js
    """

    def __init__(self, target: str):
        """Initialize flag builder.

        Args:
            target: Emscripten ENVIRONMENT value (e.g., "web", "node")
        """
        self.target = target

    @staticmethod
    def parse_flag_string(flag_string: str) -> List[str]:
        """Parse a flag string that may contain quoted values.

        Args:
            flag_string: String containing compiler flags

        Returns:
            List of individual flags

        Example:
            >>> FlagBuilder.parse_flag_string('-O2 -s "EXPORT_NAME=Foo Bar"')
            ['-O2', '-s', 'EXPORT_NAME=Foo Bar']
        """
        try:
            return shlex.split(flag_string)
        except ValueError:
            return flag_string.split()

    @staticmethod
    def exported_symbols(requested: Iterable[str]) -> List[str]:
        """Baseline allocator exports plus requested symbols.

        Names without the export prefix get it added. Duplicates are dropped,
        first occurrence wins.
        """
        symbols: List[str] = []
        for name in list(BASELINE_EXPORTS) + list(requested):
            name = name.strip()
            if not name:
                continue
            if not name.startswith(EXPORT_PREFIX):
                name = EXPORT_PREFIX + name
            if name not in symbols:
                symbols.append(name)
        return symbols

    @staticmethod
    def output_path(working_dir: Path, file_base_name: str) -> Path:
        return Path(working_dir) / f"{file_base_name}.js"

    def build(
        self,
        dialect: Dialect,
        working_dir: Path,
        file_base_name: str,
        options: LoaderOptions
    ) -> List[str]:
        """Build the compiler arguments (without compiler and source).

        Args:
            dialect: Source dialect (C or C++)
            working_dir: Directory the compiler writes into
            file_base_name: Base name for the .js/.wasm/.data outputs
            options: Loader options for this request

        Returns:
            Ordered list of argv tokens

        Raises:
            FlagBuilderError: If the dialect does not need compiling
        """
        if not dialect.requires_compilation:
            raise FlagBuilderError(
                f"No compiler flags for {dialect.value} input {file_base_name}"
            )

        flags = ["-s", "WASM=1", "-s", "MODULARIZE=1"]

        if dialect is Dialect.CPP:
            flags.append(CXX_STANDARD_FLAG)

        flags.extend(["-s", f"ENVIRONMENT={self.target}"])

        exports = ",".join(f"'{name}'" for name in self.exported_symbols(options.exported_funcs))
        flags.extend(["-s", f"EXPORTED_FUNCTIONS=[{exports}]"])

        if options.use_gl:
            flags.extend(GL_FLAGS)

        for include in options.includes:
            if include:
                flags.extend(["-I", include])

        for entry in options.data:
            if entry:
                flags.extend(["--preload-file", entry])

        flags.extend(flag for flag in options.extra_flags if flag)

        flags.extend(["-o", str(self.output_path(working_dir, file_base_name))])
        return flags


def format_command(cmd: Sequence[str]) -> str:
    """Render argv as a string that reproduces the call in a POSIX shell."""
    return shlex.join([str(part) for part in cmd])
