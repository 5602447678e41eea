"""Build utilities for Emloader.

This module provides utility functions for build operations like
printing emitted asset sizes and removing scratch directories.
"""

import os
import stat
import shutil
import time
from pathlib import Path
from typing import Any, Callable, Sequence

from .asset_emitter import EmittedAsset


class AssetSizePrinter:
    """Utility class for printing emitted asset size information."""

    @staticmethod
    def print_asset_sizes(assets: Sequence[EmittedAsset], module_text: str = "") -> None:
        """
        Print the size of the wrapped module and every emitted asset.

        Args:
            assets: Assets handed to the emitter (empty to skip printing)
            module_text: Wrapped module source, reported first when given
        """
        if not assets and not module_text:
            return

        print("Output Size:")
        if module_text:
            print(f"  {'module.js':<24} {len(module_text.encode('utf-8')):8d} bytes")
        for asset in assets:
            print(f"  {asset.name:<24} {len(asset.content):8d} bytes", end="")
            if not asset.content:
                print(" (empty)")
            else:
                print()


def remove_readonly(func: Callable[[str], None], path: str, excinfo: Any) -> None:
    """
    Error handler for shutil.rmtree on Windows.

    On Windows, read-only files cannot be deleted and will cause
    shutil.rmtree to fail. This handler removes the read-only attribute
    and retries the operation.

    Args:
        func: The function that raised the exception
        path: The path to the file/directory
        excinfo: Exception information (unused)
    """
    os.chmod(path, stat.S_IWRITE)
    func(path)


def safe_rmtree(path: Path, max_retries: int = 3) -> None:
    """
    Safely remove a directory tree, handling Windows-specific issues.

    Emscripten leaves read-only cache links and, on Windows, briefly locked
    files behind in its output directory, so deletion is retried.

    Args:
        path: Path to directory to remove
        max_retries: Maximum number of retry attempts for locked files

    Raises:
        OSError: If directory cannot be removed after all retries
    """
    if not path.exists():
        return

    for attempt in range(max_retries):
        try:
            shutil.rmtree(path, onerror=remove_readonly)
            return
        except OSError as e:
            if attempt < max_retries - 1:
                # Files might be temporarily locked
                time.sleep(0.5)
            else:
                raise OSError(
                    f"Failed to remove directory {path} after {max_retries} attempts: {e}"
                ) from e
