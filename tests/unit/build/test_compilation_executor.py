"""
Unit tests for CompilationExecutor.

Runs a fake Emscripten driver as a real subprocess.
"""

import logging
import subprocess
from unittest.mock import Mock, patch

import pytest

from emloader.build.compilation_executor import (
    CompilationError,
    CompilationExecutor,
    SpawnError,
    terminate_process_tree,
)


class TestCompilationExecutor:
    """Test suite for compiler invocation."""

    @pytest.fixture
    def executor(self):
        return CompilationExecutor()

    @pytest.fixture
    def args(self, tmp_path):
        return ["-s", "WASM=1", "-o", str(tmp_path / "out" / "example.js")]

    @pytest.fixture(autouse=True)
    def out_dir(self, tmp_path):
        (tmp_path / "out").mkdir()

    def test_run_success(self, executor, fake_emcc, emcc_log, cpp_source, args, tmp_path):
        result = executor.run(str(fake_emcc), args, cpp_source)

        assert result.success is True
        assert result.returncode == 0
        assert "emcc: compiling" in result.stdout
        assert "warning: fake diagnostic" in result.stderr
        assert (tmp_path / "out" / "example.wasm").exists()
        assert emcc_log() == [[str(cpp_source)] + args]

    def test_command_contains_compiler_source_and_flags(self, executor, fake_emcc, emcc_log, cpp_source, args):
        result = executor.run(str(fake_emcc), args, cpp_source)

        assert result.command.startswith(f"{fake_emcc} {cpp_source} -s WASM=1")
        assert result.command.endswith("example.js")

    def test_diagnostics_forwarded_to_logger(self, executor, fake_emcc, emcc_log, cpp_source, args, caplog):
        with caplog.at_level(logging.INFO, logger="emloader.build.compilation_executor"):
            executor.run(str(fake_emcc), args, cpp_source)

        messages = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert (logging.INFO, f"emcc: compiling {cpp_source}") in messages
        assert (logging.WARNING, "warning: fake diagnostic") in messages

    def test_run_failure_returns_result(self, executor, fake_emcc, emcc_log, cpp_source, args, monkeypatch):
        monkeypatch.setenv("FAKE_EMCC_EXIT", "1")

        result = executor.run(str(fake_emcc), args, cpp_source)

        assert result.success is False
        assert result.returncode == 1
        assert "error: fake failure" in result.stderr

    def test_compile_failure_raises(self, executor, fake_emcc, emcc_log, cpp_source, args, monkeypatch, tmp_path):
        monkeypatch.setenv("FAKE_EMCC_EXIT", "1")

        with pytest.raises(CompilationError) as exc_info:
            executor.compile(str(fake_emcc), args, cpp_source)

        error = exc_info.value
        assert error.returncode == 1
        assert error.command.startswith(str(fake_emcc))
        assert "with exit code 1" in str(error)
        assert error.command in str(error)
        assert "error: fake failure" in error.stderr
        # No outputs after a failed compile
        assert not (tmp_path / "out" / "example.wasm").exists()

    def test_compile_runs_once(self, executor, fake_emcc, emcc_log, cpp_source, args, monkeypatch):
        monkeypatch.setenv("FAKE_EMCC_EXIT", "2")

        with pytest.raises(CompilationError):
            executor.compile(str(fake_emcc), args, cpp_source)

        assert len(emcc_log()) == 1

    def test_spawn_error(self, executor, cpp_source, args, tmp_path):
        missing = tmp_path / "nonexistent" / "emcc"

        with pytest.raises(SpawnError, match="Failed to launch"):
            executor.run(str(missing), args, cpp_source)

    @patch("emloader.build.compilation_executor.subprocess.Popen")
    def test_spawn_permission_error(self, mock_popen, executor, cpp_source, args):
        mock_popen.side_effect = PermissionError("not executable")

        with pytest.raises(SpawnError) as exc_info:
            executor.run("emcc", args, cpp_source)

        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_show_progress(self, fake_emcc, emcc_log, cpp_source, args, capsys):
        CompilationExecutor(show_progress=True).run(str(fake_emcc), args, cpp_source)

        assert "Compiling example.cpp..." in capsys.readouterr().out

    @patch("emloader.build.compilation_executor.handle_keyboard_interrupt_properly")
    @patch("emloader.build.compilation_executor.terminate_process_tree")
    @patch("emloader.build.compilation_executor.subprocess.Popen")
    def test_keyboard_interrupt_kills_tree(self, mock_popen, mock_terminate, mock_handle, executor, cpp_source, args):
        proc = Mock()
        proc.pid = 4242
        proc.stdout.readline.return_value = ""
        proc.stderr.readline.return_value = ""
        proc.wait.side_effect = KeyboardInterrupt()
        mock_popen.return_value = proc
        mock_handle.side_effect = KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            executor.run("emcc", args, cpp_source)

        mock_terminate.assert_called_once_with(4242)
        mock_handle.assert_called_once()


class TestTerminateProcessTree:
    """Test suite for process tree cleanup."""

    def test_terminates_running_process(self, tmp_path):
        import sys

        proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
        try:
            count = terminate_process_tree(proc.pid, timeout=5)
            assert count == 1
            assert proc.wait(timeout=5) is not None
        finally:
            if proc.poll() is None:
                proc.kill()

    def test_missing_process(self):
        with patch("emloader.build.compilation_executor.psutil.Process") as mock_process:
            import psutil

            mock_process.side_effect = psutil.NoSuchProcess(999999)

            assert terminate_process_tree(999999) == 0
