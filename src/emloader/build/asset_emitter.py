"""Asset emission boundary.

The pipeline prepares bytes and a logical file name; an AssetEmitter decides
where they go (a bundler's asset table, an output directory, memory).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List


class AssetEmitError(Exception):
    """Raised when an asset cannot be published."""
    pass


@dataclass(frozen=True)
class EmittedAsset:
    """A named binary asset handed to an emitter."""
    name: str
    content: bytes


class AssetEmitter(ABC):
    """Interface for asset publishing collaborators."""

    @abstractmethod
    def emit_file(self, name: str, content: bytes) -> None:
        """Publish one asset.

        Args:
            name: Logical file name (e.g., "example.wasm")
            content: Asset bytes (may be empty)

        Raises:
            AssetEmitError: If the asset cannot be published
        """
        pass


class MemoryAssetEmitter(AssetEmitter):
    """Keeps emitted assets in memory, in emission order."""

    def __init__(self):
        self.assets: List[EmittedAsset] = []

    def emit_file(self, name: str, content: bytes) -> None:
        self.assets.append(EmittedAsset(name=name, content=bytes(content)))

    def as_dict(self) -> Dict[str, bytes]:
        return {asset.name: asset.content for asset in self.assets}


class DirectoryAssetEmitter(AssetEmitter):
    """Writes emitted assets into an output directory."""

    def __init__(self, out_dir: Path):
        """Initialize emitter.

        Args:
            out_dir: Directory to write assets into (created on demand)
        """
        self.out_dir = Path(out_dir)
        self.written: List[Path] = []

    def emit_file(self, name: str, content: bytes) -> None:
        target = self.out_dir / name
        # Asset names are logical names, not paths
        if Path(name).name != name:
            raise AssetEmitError(f"Asset name must not contain directories: {name}")
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise AssetEmitError(f"Failed to write asset {target}: {e}") from e
        self.written.append(target)
