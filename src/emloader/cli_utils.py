"""CLI utility functions for Emloader.

This module provides common utilities used across CLI commands including:
- Environment detection from emloader.ini
- Error handling and formatting
- Source path validation
"""

import sys
from pathlib import Path
from typing import Optional

from emloader.config import LoaderConfig, LoaderConfigError


class EnvironmentDetector:
    """Handles environment detection from emloader.ini."""

    @staticmethod
    def find_config(source_path: Path) -> Optional[Path]:
        """Return emloader.ini next to the source file, if any."""
        ini_path = source_path.parent / LoaderConfig.FILE_NAME
        return ini_path if ini_path.exists() else None

    @staticmethod
    def detect_environment(config: LoaderConfig, env_name: Optional[str] = None) -> str:
        """Detect or validate environment name from emloader.ini.

        Args:
            config: Parsed emloader.ini
            env_name: Optional explicit environment name

        Returns:
            Environment name to use

        Raises:
            LoaderConfigError: If no environments are defined
        """
        if env_name:
            return env_name

        detected_env = config.get_default_environment()
        if not detected_env:
            raise LoaderConfigError(f"No environments found in {config.ini_path}")

        return detected_env


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_build_error(error: Exception, title: str = "Build failed!") -> None:
        """Report a pipeline error and exit with status 1."""
        ErrorFormatter.print_error(title, str(error))
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates source paths."""

    @staticmethod
    def validate_source_file(source_path: Path) -> None:
        """Validate that the source file exists and is a file.

        Raises:
            SystemExit: If path doesn't exist or isn't a file
        """
        if not source_path.exists():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path does not exist: {source_path}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
        if not source_path.is_file():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path is not a file: {source_path}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
