"""Output path sandboxing."""

from .paths import PathBlockedError, printable_path, relative_posix, resolve_output_path

__all__ = ["PathBlockedError", "printable_path", "relative_posix", "resolve_output_path"]
