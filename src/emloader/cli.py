"""
Command-line interface for Emloader.

This module provides the `emload` CLI tool for turning a C/C++ source file
into a wrapped WebAssembly module plus its binary assets.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from emloader import __version__
from emloader.build import (
    ArtifactReadError,
    AssetEmitError,
    AssetSizePrinter,
    BuildOrchestratorError,
    BuildRequest,
    BuildRequestError,
    CompilationError,
    DirectoryAssetEmitter,
    ModuleWrapperError,
    SpawnError,
    WasmBuildOrchestrator,
    WorkspaceError,
)
from emloader.cli_utils import EnvironmentDetector, ErrorFormatter, PathValidator
from emloader.config import (
    DEFAULT_TARGET,
    LoaderConfig,
    LoaderConfigError,
    LoaderOptions,
    LoaderOptionsError,
)

PIPELINE_ERRORS = (
    BuildRequestError,
    BuildOrchestratorError,
    WorkspaceError,
    SpawnError,
    CompilationError,
    ArtifactReadError,
    ModuleWrapperError,
    AssetEmitError,
    LoaderConfigError,
    LoaderOptionsError,
)


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    source: Path
    environment: Optional[str] = None
    target: Optional[str] = None
    out_dir: Path = Path("dist")
    includes: List[str] = field(default_factory=list)
    data: List[str] = field(default_factory=list)
    use_gl: bool = False
    exports: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    es_module: bool = False
    strict_preload: bool = False
    verbose: bool = False


def setup_logging(verbose: bool = False) -> None:
    """Route library logging (compiler diagnostics included) to stderr."""
    logger = logging.getLogger("emloader")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)


def resolve_request(args: BuildArgs) -> BuildRequest:
    """Combine emloader.ini (if present) with command-line options.

    Command-line sequences are appended to the configured ones, and
    command-line switches turn configured booleans on.
    """
    source = args.source.resolve()
    target = DEFAULT_TARGET
    options = LoaderOptions()

    ini_path = EnvironmentDetector.find_config(source)
    if ini_path is not None:
        config = LoaderConfig(ini_path)
        env_name = EnvironmentDetector.detect_environment(config, args.environment)
        options = config.get_loader_options(env_name)
        target = config.get_target(env_name)
        if args.verbose:
            print(f"Configuration: {ini_path} [env:{env_name}]")
    elif args.environment:
        raise LoaderConfigError(
            f"Environment '{args.environment}' requested but no "
            f"{LoaderConfig.FILE_NAME} found next to {source.name}"
        )

    cli_options = LoaderOptions(
        includes=tuple(args.includes),
        data=tuple(args.data),
        use_gl=args.use_gl,
        extra_flags=tuple(args.flags),
        exported_funcs=tuple(args.exports),
        strict_preload=args.strict_preload,
        es_module=args.es_module,
    )
    return BuildRequest.from_source(
        source,
        target=args.target or target,
        options=options.merged_with(cli_options),
    )


def build_command(args: BuildArgs) -> None:
    """Compile a source file and write the wrapped module and assets.

    Examples:
        emload build example.cpp                  # Build with emloader.ini defaults
        emload build example.c -t node            # Target Node.js
        emload build example.cpp -I include       # Extra include path
        emload build game.cpp --use-gl --preload assets
        emload build example.js                   # Wrap pre-generated glue
    """
    print(f"Emloader v{__version__}")
    print()

    setup_logging(args.verbose)

    try:
        request = resolve_request(args)

        if args.verbose:
            print(f"Source: {request.source_path}")
            print(f"Dialect: {request.dialect.value}")
            print(f"Target: {request.target}")
            print()
        else:
            print(f"Building {request.source_path.name}...")

        orchestrator = WasmBuildOrchestrator(verbose=args.verbose)
        emitter = DirectoryAssetEmitter(args.out_dir)
        result = orchestrator.build(request, emitter)

        module_path = args.out_dir / f"{request.file_base_name}.module.js"
        module_path.parent.mkdir(parents=True, exist_ok=True)
        module_path.write_text(result.module_text, encoding="utf-8")

        ErrorFormatter.print_success("Build successful!")
        print()
        print(f"Module: {module_path}")
        for written in emitter.written:
            print(f"Asset:  {written}")
        print()
        AssetSizePrinter.print_asset_sizes(result.assets, result.module_text)
        print()
        print(f"Build time: {result.build_time:.2f}s")
        sys.exit(0)

    except PIPELINE_ERRORS as e:
        ErrorFormatter.handle_build_error(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """Emloader - C/C++ to wrapped WebAssembly module transform."""
    parser = argparse.ArgumentParser(
        prog="emload",
        description="Emloader - compile C/C++ to a promise-returning WebAssembly module",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"emload {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Compile a source file and wrap the generated module",
    )
    build_parser.add_argument(
        "source",
        type=Path,
        help="C/C++ source file or pre-generated .js glue",
    )
    build_parser.add_argument(
        "-e",
        "--environment",
        default=None,
        help="emloader.ini environment (default: auto-detect)",
    )
    build_parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Emscripten ENVIRONMENT value (default: from emloader.ini, else 'web')",
    )
    build_parser.add_argument(
        "-o",
        "--out-dir",
        type=Path,
        default=Path("dist"),
        help="Output directory (default: ./dist)",
    )
    build_parser.add_argument(
        "-I",
        "--include",
        dest="includes",
        action="append",
        default=[],
        help="Include search path (repeatable)",
    )
    build_parser.add_argument(
        "--preload",
        dest="data",
        action="append",
        default=[],
        help="File or directory to bundle into the .data blob (repeatable)",
    )
    build_parser.add_argument(
        "--use-gl",
        action="store_true",
        help="Link OpenGL/GLFW and enable WebGL2",
    )
    build_parser.add_argument(
        "--export",
        dest="exports",
        action="append",
        default=[],
        help="Additional exported symbol, e.g. _add (repeatable)",
    )
    build_parser.add_argument(
        "--flag",
        dest="flags",
        action="append",
        default=[],
        help="Extra compiler flag passed through verbatim, e.g. --flag=-O2 (repeatable)",
    )
    build_parser.add_argument(
        "--es-module",
        action="store_true",
        help="Emit the module as an ES module default export",
    )
    build_parser.add_argument(
        "--strict-preload",
        action="store_true",
        help="Fail when preload data was requested but no .data file was produced",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )

    parsed_args = parser.parse_args()

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if parsed_args.command == "build":
        PathValidator.validate_source_file(parsed_args.source)
        build_args = BuildArgs(
            source=parsed_args.source,
            environment=parsed_args.environment,
            target=parsed_args.target,
            out_dir=parsed_args.out_dir,
            includes=parsed_args.includes,
            data=parsed_args.data,
            use_gl=parsed_args.use_gl,
            exports=parsed_args.exports,
            flags=parsed_args.flags,
            es_module=parsed_args.es_module,
            strict_preload=parsed_args.strict_preload,
            verbose=parsed_args.verbose,
        )
        build_command(build_args)


if __name__ == "__main__":
    main()
