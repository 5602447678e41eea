"""
Build pipeline components for Emloader.

This module provides the transform pipeline:
- Build requests and dialect detection
- Workspace allocation and release
- Emscripten flag building and compiler invocation
- Artifact collection, module wrapping and asset emission
- Orchestration of the whole transform
"""

from .artifact_reader import ArtifactReader, ArtifactReadError, ArtifactSet
from .asset_emitter import (
    AssetEmitError,
    AssetEmitter,
    DirectoryAssetEmitter,
    EmittedAsset,
    MemoryAssetEmitter,
)
from .build_request import BuildRequest, BuildRequestError, Dialect
from .build_utils import AssetSizePrinter
from .compilation_executor import (
    CompilationError,
    CompilationExecutor,
    CompileResult,
    SpawnError,
)
from .flag_builder import FlagBuilder, FlagBuilderError, format_command
from .module_wrapper import ModuleWrapper, ModuleWrapperError, detect_glue_style
from .orchestrator import (
    BuildOrchestratorError,
    BuildResult,
    WasmBuildOrchestrator,
    transform,
)
from .toolchain import EmscriptenToolchain, ToolchainError
from .workspace import Workspace, WorkspaceError, WorkspaceManager

__all__ = [
    "ArtifactReader",
    "ArtifactReadError",
    "ArtifactSet",
    "AssetEmitError",
    "AssetEmitter",
    "AssetSizePrinter",
    "BuildOrchestratorError",
    "BuildRequest",
    "BuildRequestError",
    "BuildResult",
    "CompilationError",
    "CompilationExecutor",
    "CompileResult",
    "Dialect",
    "DirectoryAssetEmitter",
    "EmittedAsset",
    "EmscriptenToolchain",
    "FlagBuilder",
    "FlagBuilderError",
    "MemoryAssetEmitter",
    "ModuleWrapper",
    "ModuleWrapperError",
    "SpawnError",
    "ToolchainError",
    "WasmBuildOrchestrator",
    "Workspace",
    "WorkspaceError",
    "WorkspaceManager",
    "detect_glue_style",
    "format_command",
    "transform",
]
