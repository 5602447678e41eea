"""Compilation Executor.

This module runs the Emscripten compiler as a subprocess and reports its
outcome.

Design:
    - One subprocess per request, never retried
    - stdout/stderr are drained by reader threads and forwarded to the
      logger line by line while the compiler runs
    - Spawn failures raise SpawnError, non-zero exits raise CompilationError
      carrying the full command line and exit code
    - On KeyboardInterrupt the compiler's whole process tree is terminated
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Sequence

import psutil

from ..interrupt_utils import handle_keyboard_interrupt_properly
from .flag_builder import format_command

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Result of a compiler invocation."""
    success: bool
    command: str
    returncode: int
    stdout: str
    stderr: str


class SpawnError(Exception):
    """Raised when the compiler executable cannot be launched."""
    pass


class CompilationError(Exception):
    """Raised when the compiler exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, stdout: str = "", stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{command} failed to run, with exit code {returncode}!")


class CompilationExecutor:
    """Executes compiler commands with streamed diagnostics."""

    def __init__(self, show_progress: bool = False):
        """Initialize compilation executor.

        Args:
            show_progress: Whether to print a line per compiled file
        """
        self.show_progress = show_progress

    def run(
        self,
        compiler: str,
        args: Sequence[str],
        source_path: Path
    ) -> CompileResult:
        """Run the compiler once and wait for it to exit.

        Args:
            compiler: Compiler executable (emcc/em++ name or path)
            args: Flags from FlagBuilder.build
            source_path: Source file to compile

        Returns:
            CompileResult; success reflects a zero exit status

        Raises:
            SpawnError: If the process could not be started
        """
        cmd = [str(compiler), str(source_path)]
        cmd.extend(str(arg) for arg in args)
        command = format_command(cmd)

        if self.show_progress:
            print(f"Compiling {Path(source_path).name}...")
        logger.debug(f"Running: {command}")

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise SpawnError(f"Failed to launch {compiler}: {e}") from e

        stdout_lines: List[str] = []
        stderr_lines: List[str] = []
        readers = [
            threading.Thread(
                target=_forward_stream,
                args=(proc.stdout, stdout_lines, logging.INFO),
                daemon=True,
            ),
            threading.Thread(
                target=_forward_stream,
                args=(proc.stderr, stderr_lines, logging.WARNING),
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()

        try:
            returncode = proc.wait()
            for reader in readers:
                reader.join()
        except KeyboardInterrupt as ke:
            terminate_process_tree(proc.pid)
            handle_keyboard_interrupt_properly(ke)
            raise  # Never reached, but satisfies type checker

        return CompileResult(
            success=returncode == 0,
            command=command,
            returncode=returncode,
            stdout="".join(stdout_lines),
            stderr="".join(stderr_lines),
        )

    def compile(
        self,
        compiler: str,
        args: Sequence[str],
        source_path: Path
    ) -> CompileResult:
        """Run the compiler and require a zero exit status.

        Raises:
            SpawnError: If the process could not be started
            CompilationError: If the compiler exited non-zero
        """
        result = self.run(compiler, args, source_path)
        if not result.success:
            logger.error(f"Compilation failed with exit code {result.returncode}: {result.command}")
            raise CompilationError(
                result.command, result.returncode, result.stdout, result.stderr
            )
        return result


def _forward_stream(stream: IO[str], sink: List[str], level: int) -> None:
    """Copy lines from a pipe into sink and the logger until EOF."""
    try:
        for line in iter(stream.readline, ""):
            sink.append(line)
            text = line.rstrip("\r\n")
            if text:
                logger.log(level, text)
    finally:
        stream.close()


def terminate_process_tree(pid: int, timeout: float = 3.0) -> int:
    """Terminate a process and all of its children.

    emcc runs clang, wasm-ld and node as children, so killing only the
    driver leaves them running.

    Args:
        pid: Root process id
        timeout: Seconds to wait before force killing survivors

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True)
    except psutil.NoSuchProcess:
        return 0
    # Children first, root last
    processes.append(root)

    signalled: List[psutil.Process] = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
            logger.debug(f"Terminated process {proc.pid}")
        except psutil.NoSuchProcess:
            pass  # Already dead
        except psutil.AccessDenied as e:
            logger.warning(f"Failed to terminate process {proc.pid}: {e}")

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)

    for proc in alive:
        try:
            proc.kill()
            logger.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            logger.warning(f"Failed to force kill process {proc.pid}: {e}")

    return len(signalled)
