"""Deterministic source tree listing used when no project index is available."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path

from docsync.config import DiscoveryConfig
from docsync.security import printable_path


@dataclass(slots=True, frozen=True)
class DiscoveryResult:
    """Sorted repo-relative file paths from one walk."""

    paths: tuple[str, ...]
    truncated: bool


def discover_paths(
    repo_root: Path,
    config: DiscoveryConfig,
    excluded_prefixes: tuple[str, ...] = (),
) -> DiscoveryResult:
    """List regular files under repo_root, minus excluded globs and output paths.

    Directories are visited in name order, so the first ``max_files`` paths
    kept are the same on every run.
    """
    root = repo_root.resolve()
    prunable = _prunable_dir_names(config.exclude_globs)
    kept: list[str] = []
    truncated = False
    for current, dir_names, file_names in os.walk(root):
        base = printable_path(Path(current).relative_to(root).as_posix())
        prefix = "" if base == "." else f"{base}/"
        dir_names[:] = [
            name
            for name in sorted(dir_names)
            if not _is_output(f"{prefix}{printable_path(name)}", excluded_prefixes)
            and not (
                name in prunable and should_exclude(f"{prefix}{name}/", config.exclude_globs)
            )
            and not os.path.islink(os.path.join(current, name))
        ]
        for name in sorted(file_names):
            relative = f"{prefix}{printable_path(name)}"
            if _is_output(relative, excluded_prefixes):
                continue
            if not os.path.isfile(os.path.join(current, name)):
                continue
            if should_exclude(relative, config.exclude_globs):
                continue
            if len(kept) >= config.max_files:
                truncated = True
                continue
            kept.append(relative)
    kept.sort()
    return DiscoveryResult(paths=tuple(kept), truncated=truncated)


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches one of the exclude globs."""
    anchored = f"/{relative_path}"
    for pattern in exclude_globs:
        if fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern):
            return True
    return False


def _is_output(relative_path: str, prefixes: tuple[str, ...]) -> bool:
    return any(
        relative_path == prefix or relative_path.startswith(f"{prefix}/") for prefix in prefixes
    )


def _prunable_dir_names(exclude_globs: tuple[str, ...]) -> frozenset[str]:
    """Directory names from ``**/name/**`` globs; such trees are never entered."""
    names: set[str] = set()
    for pattern in exclude_globs:
        if pattern.startswith("**/") and pattern.endswith("/**"):
            name = pattern[3:-3].strip("/")
            if name and not any(char in name for char in "*?[]{}"):
                names.add(name)
    return frozenset(names)
