"""Keeps configured documentation outputs inside the repository."""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

_UNDER_ROOT_HINT = "Use a path located under the repository root."


class PathBlockedError(Exception):
    """Raised when a configured output location escapes the repository root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _looks_absolute(candidate: str) -> bool:
    # drive-letter paths count as absolute on every platform
    return PurePosixPath(candidate).is_absolute() or PureWindowsPath(candidate).is_absolute()


def _inside(root: Path, target: Path) -> bool:
    return target != root and target.is_relative_to(root)


def resolve_output_path(repo_root: Path, candidate: str) -> Path:
    """Resolve a docs dir or quick-reference location under repo_root.

    Empty values, ``..`` segments, the root itself and absolute paths outside
    the root raise :class:`PathBlockedError`.
    """
    root = repo_root.resolve()
    text = candidate.strip().replace("\\", "/")
    if not text.strip("/"):
        raise PathBlockedError(
            reason="Output path is empty.",
            hint="Use a repository-relative path such as 'docs'.",
        )

    if _looks_absolute(text):
        target = Path(text).resolve(strict=False)
        if not _inside(root, target):
            raise PathBlockedError(
                reason="Absolute output path is outside repo_root.",
                hint=_UNDER_ROOT_HINT,
            )
        return target

    segments = [segment for segment in text.split("/") if segment not in ("", ".")]
    if ".." in segments:
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Drop '..' segments; outputs must stay inside the repository.",
        )
    if not segments:
        raise PathBlockedError(
            reason="Output path resolves to repo_root itself.",
            hint="Use a subdirectory or file name such as 'docs'.",
        )

    # symlinked parents may still point elsewhere
    target = root.joinpath(*segments).resolve(strict=False)
    if not _inside(root, target):
        raise PathBlockedError(
            reason="Resolved output path escapes repo_root.",
            hint=_UNDER_ROOT_HINT,
        )
    return target


def relative_posix(repo_root: Path, resolved_path: Path) -> str:
    """Return a resolved path relative to the repo root in POSIX form."""
    return resolved_path.relative_to(repo_root.resolve()).as_posix()


def printable_path(name: str) -> str:
    """Spell bytes that are not valid UTF-8 as ``\\xNN`` so the path can be written out.

    Matches how change detection decodes git output, so one file gets one name.
    """
    try:
        raw = name.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        raw = name.encode("utf-8", "surrogatepass")
    return raw.decode("utf-8", "backslashreplace")
