"""
Build orchestration for Emloader.

This module runs the whole transform for one source file:
1. Acquire a workspace (temp dir, or the source's own dir for .js input)
2. Build the emcc/em++ command line
3. Run the compiler
4. Read back {base}.js, {base}.wasm and the optional {base}.data
5. Release the workspace
6. Wrap the glue into a promise-returning factory
7. Emit {base}.wasm and {base}.data, return the wrapped text

Pre-generated (.js/.mjs) inputs skip steps 2-3 and are read as the glue
themselves. No asset is emitted unless every earlier step succeeded, and the
workspace is released on every exit path.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.ini_parser import DEFAULT_TARGET
from ..config.loader_options import LoaderOptions
from .artifact_reader import ArtifactReader, ArtifactSet
from .asset_emitter import AssetEmitter, EmittedAsset, MemoryAssetEmitter
from .build_request import BuildRequest
from .compilation_executor import CompilationExecutor
from .flag_builder import FlagBuilder
from .module_wrapper import ModuleWrapper
from .toolchain import EmscriptenToolchain
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a complete transform."""

    module_text: str
    assets: List[EmittedAsset] = field(default_factory=list)
    build_time: float = 0.0
    compiled: bool = False


class BuildOrchestratorError(Exception):
    """Exception raised for build orchestration errors."""
    pass


class WasmBuildOrchestrator:
    """
    Orchestrates the transform of one C/C++ (or pre-generated glue) file.

    The orchestrator holds only collaborators, never per-request state, so
    one instance can serve concurrent requests from several threads.

    Example usage:
        orchestrator = WasmBuildOrchestrator()
        emitter = DirectoryAssetEmitter(Path("dist"))
        request = BuildRequest.from_source(Path("example.cpp"), target="web")
        result = orchestrator.build(request, emitter)
        Path("dist/example.module.js").write_text(result.module_text)
    """

    def __init__(
        self,
        executor: Optional[CompilationExecutor] = None,
        toolchain: Optional[EmscriptenToolchain] = None,
        workspace_manager: Optional[WorkspaceManager] = None,
        reader: Optional[ArtifactReader] = None,
        verbose: bool = False
    ):
        """
        Initialize build orchestrator.

        Args:
            executor: Compiler invoker (default: CompilationExecutor)
            toolchain: Compiler lookup (default: EmscriptenToolchain)
            workspace_manager: Workspace allocator (default: system temp dir)
            reader: Artifact reader
            verbose: Print progress for each phase
        """
        self.verbose = verbose
        self.executor = executor or CompilationExecutor(show_progress=verbose)
        self.toolchain = toolchain or EmscriptenToolchain()
        self.workspace_manager = workspace_manager or WorkspaceManager()
        self.reader = reader or ArtifactReader()

    def build(self, request: BuildRequest, emitter: AssetEmitter) -> BuildResult:
        """
        Execute the transform for one request.

        Args:
            request: Source file, dialect, target and options
            emitter: Receives {base}.wasm and {base}.data

        Returns:
            BuildResult with the wrapped module text and emitted assets

        Raises:
            WorkspaceError, SpawnError, CompilationError, ArtifactReadError,
            ModuleWrapperError, AssetEmitError: propagated unchanged
            BuildOrchestratorError: If the source file does not exist
        """
        start_time = time.time()
        source_path = Path(request.source_path)
        if not source_path.exists():
            raise BuildOrchestratorError(f"Source file not found: {source_path}")

        compiled = request.dialect.requires_compilation
        base = request.file_base_name
        options = request.options

        if self.verbose:
            print(f"[1/4] Preparing workspace for {source_path.name}...")

        with self.workspace_manager.acquire(compiled, source_path) as workspace:
            if compiled:
                if self.verbose:
                    print(f"[2/4] Compiling {source_path.name} ({request.dialect.value})...")
                compiler = self.toolchain.find_compiler(request.dialect)
                flags = FlagBuilder(request.target).build(
                    request.dialect, workspace.path, base, options
                )
                self.executor.compile(compiler, flags, source_path)
            else:
                logger.info(f"{source_path.name} is pre-generated glue, skipping compilation")

            if self.verbose:
                print("[3/4] Collecting artifacts...")
            artifacts = self.reader.collect(
                workspace.path,
                base,
                expect_auxiliary=bool(options.data),
                strict=options.strict_preload,
                glue_path=None if compiled else source_path,
            )

        if self.verbose:
            print("[4/4] Wrapping module and emitting assets...")
        module_text = ModuleWrapper(es_module=options.es_module).wrap(artifacts.generated_text)
        assets = self._emit_assets(base, artifacts, emitter)

        build_time = time.time() - start_time
        logger.info(f"Built {source_path.name} in {build_time:.2f}s")
        return BuildResult(
            module_text=module_text,
            assets=assets,
            build_time=build_time,
            compiled=compiled,
        )

    @staticmethod
    def _emit_assets(
        base: str,
        artifacts: ArtifactSet,
        emitter: AssetEmitter
    ) -> List[EmittedAsset]:
        """Publish {base}.wasm then {base}.data.

        Both assets are built before either is published, but an emitter
        failure on {base}.data leaves {base}.wasm already published. Emitters
        that need all-or-nothing output must stage writes themselves.
        """
        assets = [
            EmittedAsset(f"{base}.wasm", artifacts.binary_payload),
            # Always emitted, empty when nothing was preloaded
            EmittedAsset(f"{base}.data", artifacts.auxiliary_data),
        ]
        for asset in assets:
            emitter.emit_file(asset.name, asset.content)
        return assets


def transform(
    source_path: Path,
    target: str = DEFAULT_TARGET,
    options: Optional[LoaderOptions] = None,
    emitter: Optional[AssetEmitter] = None
) -> str:
    """Transform one source file and return the wrapped module text.

    Args:
        source_path: C/C++ source or pre-generated glue
        target: Emscripten ENVIRONMENT value
        options: Loader options (default: all empty)
        emitter: Asset emitter (default: discarded in-memory emitter)

    Returns:
        Wrapped module source
    """
    request = BuildRequest.from_source(Path(source_path), target, options)
    result = WasmBuildOrchestrator().build(request, emitter or MemoryAssetEmitter())
    return result.module_text
