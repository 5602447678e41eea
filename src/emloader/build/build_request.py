"""Build request and source dialect detection."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config.loader_options import LoaderOptions
from ..config.ini_parser import DEFAULT_TARGET


class BuildRequestError(Exception):
    """Raised when a build request cannot be formed."""
    pass


class Dialect(Enum):
    """Source dialect of a build request."""

    C = "c"
    CPP = "cpp"
    PRE_GENERATED = "pre-generated"

    @property
    def requires_compilation(self) -> bool:
        return self is not Dialect.PRE_GENERATED

    @classmethod
    def from_path(cls, source_path: Path) -> "Dialect":
        """Detect the dialect from a source file suffix.

        Args:
            source_path: Path to .c, .cpp/.cc/.cxx/.c++ or .js/.mjs file

        Returns:
            Detected Dialect

        Raises:
            BuildRequestError: If the suffix is not recognized
        """
        suffix = source_path.suffix.lower()
        if suffix == ".c" and source_path.suffix != ".C":
            return cls.C
        if suffix in (".cpp", ".cc", ".cxx", ".c++") or source_path.suffix == ".C":
            return cls.CPP
        if suffix in (".js", ".mjs"):
            return cls.PRE_GENERATED
        raise BuildRequestError(
            f"Unsupported source file type '{source_path.suffix}' for {source_path.name}. "
            "Expected a C (.c), C++ (.cpp, .cc, .cxx) or generated glue (.js) file."
        )


@dataclass(frozen=True)
class BuildRequest:
    """One source file to turn into a wrapped module plus binary assets."""

    source_path: Path
    dialect: Dialect
    target: str = DEFAULT_TARGET
    options: LoaderOptions = field(default_factory=LoaderOptions)

    @property
    def file_base_name(self) -> str:
        return self.source_path.stem

    @classmethod
    def from_source(
        cls,
        source_path: Path,
        target: str = DEFAULT_TARGET,
        options: Optional[LoaderOptions] = None
    ) -> "BuildRequest":
        """Create a request, detecting the dialect from the file suffix."""
        source_path = Path(source_path)
        if not target:
            raise BuildRequestError("Target environment must not be empty")
        return cls(
            source_path=source_path,
            dialect=Dialect.from_path(source_path),
            target=target,
            options=options or LoaderOptions(),
        )
