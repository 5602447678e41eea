"""Configuration parsing modules for Emloader."""

from .ini_parser import DEFAULT_TARGET, LoaderConfig, LoaderConfigError
from .loader_options import LoaderOptions, LoaderOptionsError

__all__ = [
    "DEFAULT_TARGET",
    "LoaderConfig",
    "LoaderConfigError",
    "LoaderOptions",
    "LoaderOptionsError",
]
