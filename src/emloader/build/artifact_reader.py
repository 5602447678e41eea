"""Artifact Reader.

Reads back the files Emscripten writes for one source file:

    {base}.js    generated glue (UTF-8), required
    {base}.wasm  binary payload, required
    {base}.data  preload blob, optional (only produced for --preload-file)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class ArtifactReadError(Exception):
    """Raised when a required compiler output cannot be read."""
    pass


@dataclass(frozen=True)
class ArtifactSet:
    """Contents of the compiler outputs for one request."""
    generated_text: str
    binary_payload: bytes
    auxiliary_data: bytes = b""

    @property
    def has_auxiliary_data(self) -> bool:
        return len(self.auxiliary_data) > 0


class ArtifactReader:
    """Collects compiler outputs from a working directory."""

    @staticmethod
    def artifact_paths(working_dir: Path, file_base_name: str):
        """Return the (.js, .wasm, .data) paths for a base name."""
        working_dir = Path(working_dir)
        return (
            working_dir / f"{file_base_name}.js",
            working_dir / f"{file_base_name}.wasm",
            working_dir / f"{file_base_name}.data",
        )

    def collect(
        self,
        working_dir: Path,
        file_base_name: str,
        expect_auxiliary: bool = False,
        strict: bool = False,
        glue_path: Optional[Path] = None
    ) -> ArtifactSet:
        """Read the artifact set.

        Args:
            working_dir: Directory holding the compiler outputs
            file_base_name: Base name shared by the outputs
            expect_auxiliary: Whether preload entries were configured
            strict: Raise instead of warn when an expected .data is missing
            glue_path: Read the glue from this file instead of {base}.js
                (pre-generated .js/.mjs input)

        Returns:
            ArtifactSet (auxiliary_data is b"" when no .data file exists)

        Raises:
            ArtifactReadError: If .js or .wasm cannot be read, or in strict
                mode when an expected .data file is missing
        """
        js_path, wasm_path, data_path = self.artifact_paths(working_dir, file_base_name)
        if glue_path is not None:
            js_path = Path(glue_path)

        try:
            generated_text = js_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactReadError(f"Failed to read generated glue {js_path}: {e}") from e

        try:
            binary_payload = wasm_path.read_bytes()
        except OSError as e:
            raise ArtifactReadError(f"Failed to read binary payload {wasm_path}: {e}") from e

        auxiliary_data = b""
        if data_path.exists():
            try:
                auxiliary_data = data_path.read_bytes()
            except OSError as e:
                raise ArtifactReadError(f"Failed to read preload data {data_path}: {e}") from e
        elif expect_auxiliary:
            message = f"Preload data was configured but {data_path.name} was not produced"
            if strict:
                raise ArtifactReadError(message)
            logger.warning(f"{message}; emitting an empty asset")

        logger.debug(
            f"Collected {js_path.name} ({len(generated_text)} chars), "
            f"{wasm_path.name} ({len(binary_payload)} bytes), "
            f"{data_path.name} ({len(auxiliary_data)} bytes)"
        )
        return ArtifactSet(
            generated_text=generated_text,
            binary_payload=binary_payload,
            auxiliary_data=auxiliary_data,
        )
