"""Emscripten toolchain discovery.

Locates the emcc (C) and em++ (C++) drivers. Search order:
    1. An explicit emscripten directory passed by the caller
    2. $EMSDK/upstream/emscripten (an activated emsdk checkout)
    3. PATH

When nothing is found the bare driver name is returned, so a missing
toolchain surfaces as a SpawnError from the compiler invoker.
"""

import os
import shutil
from pathlib import Path
from typing import Dict, Optional

from .build_request import Dialect

COMPILER_NAMES: Dict[Dialect, str] = {
    Dialect.C: "emcc",
    Dialect.CPP: "em++",
}


class ToolchainError(Exception):
    """Raised when no compiler applies to a dialect."""
    pass


class EmscriptenToolchain:
    """Resolves Emscripten compiler drivers."""

    def __init__(self, emscripten_dir: Optional[Path] = None):
        """Initialize toolchain lookup.

        Args:
            emscripten_dir: Directory containing emcc/em++ (optional)
        """
        self.emscripten_dir = emscripten_dir

    def _candidate_dirs(self):
        if self.emscripten_dir is not None:
            yield Path(self.emscripten_dir)
        emsdk = os.environ.get("EMSDK")
        if emsdk:
            yield Path(emsdk) / "upstream" / "emscripten"

    def find_compiler(self, dialect: Dialect) -> str:
        """Return the compiler executable for a dialect.

        Args:
            dialect: C or C++ dialect

        Returns:
            Path or name of the compiler driver

        Raises:
            ToolchainError: If the dialect is not compiled
        """
        if dialect not in COMPILER_NAMES:
            raise ToolchainError(f"No compiler for {dialect.value} input")
        name = COMPILER_NAMES[dialect]

        for directory in self._candidate_dirs():
            # Windows installs ship .bat wrappers
            for ext in ["", ".bat", ".exe"]:
                candidate = directory / f"{name}{ext}"
                if candidate.exists():
                    return str(candidate)

        found = shutil.which(name)
        return found if found else name
