"""
Emloader - compile C/C++ to WebAssembly and wrap the glue as an async factory.
"""

__version__ = "0.1.0"

from .build import BuildRequest, WasmBuildOrchestrator, transform  # noqa: E402
from .config import LoaderOptions  # noqa: E402

__all__ = [
    "__version__",
    "BuildRequest",
    "LoaderOptions",
    "WasmBuildOrchestrator",
    "transform",
]
