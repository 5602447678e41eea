"""
Loader option record.

This module defines the immutable set of per-invocation options that drive
flag building and artifact collection. Options arrive either as a bundler
style mapping (camelCase keys) or from an emloader.ini environment section.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Mapping, Tuple


class LoaderOptionsError(Exception):
    """Raised when a loader option record is malformed."""

    pass


# Bundler option convention -> field name
_CAMEL_CASE_KEYS = {
    "useGL": "use_gl",
    "extraFlags": "extra_flags",
    "exportedFuncs": "exported_funcs",
    "strictPreload": "strict_preload",
    "esModule": "es_module",
}

_SEQUENCE_FIELDS = ("includes", "data", "extra_flags", "exported_funcs")
_BOOL_FIELDS = ("use_gl", "strict_preload", "es_module")


@dataclass(frozen=True)
class LoaderOptions:
    """Configuration record for a single build request.

    Attributes:
        includes: Include search paths, one ``-I`` flag each
        data: Files or directories bundled into the ``.data`` preload blob
        use_gl: Link OpenGL/GLFW and enable WebGL2
        extra_flags: Passthrough compiler flags, appended after all others
        exported_funcs: Symbols exported in addition to _malloc and _free
        strict_preload: Fail when preload data was configured but no
            ``.data`` file was produced
        es_module: Emit the wrapped factory as an ES module default export
    """

    includes: Tuple[str, ...] = ()
    data: Tuple[str, ...] = ()
    use_gl: bool = False
    extra_flags: Tuple[str, ...] = ()
    exported_funcs: Tuple[str, ...] = ()
    strict_preload: bool = False
    es_module: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LoaderOptions":
        """Build options from a loader option mapping.

        Accepts both snake_case field names and the camelCase keys used by
        bundler option objects. Missing keys take their defaults.

        Args:
            raw: Option mapping (e.g. ``{"includes": ["inc"], "useGL": True}``)

        Returns:
            LoaderOptions instance

        Raises:
            LoaderOptionsError: On unknown keys or wrongly typed values

        Example:
            >>> LoaderOptions.from_dict({"exportedFuncs": ["_add"]}).exported_funcs
            ('_add',)
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise LoaderOptionsError(
                f"Loader options must be a mapping, got {type(raw).__name__}"
            )

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                raise LoaderOptionsError(f"Unknown loader option: {key}")
            if value is None:
                continue
            if name in _SEQUENCE_FIELDS:
                values[name] = _as_str_tuple(key, value)
            elif name in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise LoaderOptionsError(
                        f"Loader option '{key}' must be a boolean, got {value!r}"
                    )
                values[name] = value

        return cls(**values)

    def merged_with(self, other: "LoaderOptions") -> "LoaderOptions":
        """Return a new record with ``other`` layered on top of this one.

        Sequences are concatenated (this record first), booleans are OR-ed.
        """
        return LoaderOptions(
            includes=self.includes + other.includes,
            data=self.data + other.data,
            use_gl=self.use_gl or other.use_gl,
            extra_flags=self.extra_flags + other.extra_flags,
            exported_funcs=self.exported_funcs + other.exported_funcs,
            strict_preload=self.strict_preload or other.strict_preload,
            es_module=self.es_module or other.es_module,
        )


def _as_str_tuple(key: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Iterable):
        raise LoaderOptionsError(
            f"Loader option '{key}' must be a list of strings, got {value!r}"
        )
    items = tuple(value)
    for item in items:
        if not isinstance(item, str):
            raise LoaderOptionsError(
                f"Loader option '{key}' must contain only strings, got {item!r}"
            )
    return items
