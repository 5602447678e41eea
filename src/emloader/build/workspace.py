"""Workspace Manager.

This module allocates the directory the compiler writes its output into.

Design:
    - One fresh temporary directory per compiled request, removed on release
    - Pre-generated inputs resolve to their own directory, never removed
    - Release runs at most once, on every exit path (use as a context manager)
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .build_utils import safe_rmtree

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "emloader-"


class WorkspaceError(Exception):
    """Raised when a workspace cannot be allocated or released."""
    pass


class Workspace:
    """A working directory plus its release action."""

    def __init__(self, path: Path, release_action: Callable[[], None], owned: bool):
        self.path = path
        self.owned = owned
        self._release_action = release_action
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Run the release action. Subsequent calls do nothing.

        Raises:
            WorkspaceError: If the directory could not be removed
        """
        if self._released:
            return
        self._released = True
        try:
            self._release_action()
        except OSError as e:
            raise WorkspaceError(f"Failed to release workspace {self.path}: {e}") from e

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.release()
            return
        # Keep the original error when cleanup also fails
        try:
            self.release()
        except WorkspaceError as e:
            logger.error(f"{e} (while handling {exc_type.__name__})")


class WorkspaceManager:
    """Allocates per-request workspaces."""

    def __init__(self, temp_root: Optional[Path] = None):
        """Initialize workspace manager.

        Args:
            temp_root: Parent directory for temporary workspaces
                (default: the system temp directory)
        """
        self.temp_root = temp_root

    def acquire(self, requires_compilation: bool, source_path: Path) -> Workspace:
        """Acquire a workspace for a request.

        Args:
            requires_compilation: Whether the compiler will write output
            source_path: Path to the request's source file

        Returns:
            Workspace owning a fresh temp directory, or borrowing the
            source's own directory with a no-op release

        Raises:
            WorkspaceError: If the temp directory cannot be created
        """
        if not requires_compilation:
            return Workspace(Path(source_path).parent, lambda: None, owned=False)

        try:
            path = Path(tempfile.mkdtemp(
                prefix=WORKSPACE_PREFIX,
                dir=str(self.temp_root) if self.temp_root is not None else None
            ))
        except OSError as e:
            raise WorkspaceError(f"Failed to create temporary workspace: {e}") from e

        logger.debug(f"Allocated workspace {path}")
        return Workspace(path, lambda: safe_rmtree(path), owned=True)
