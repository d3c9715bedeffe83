from __future__ import annotations

from pathlib import Path

import pytest

from docsync.security import (
    PathBlockedError,
    printable_path,
    relative_posix,
    resolve_output_path,
)


def test_relative_output_path_resolves_under_root(tmp_path: Path) -> None:
    resolved = resolve_output_path(tmp_path, "./documentation/guides")

    assert resolved == tmp_path.resolve() / "documentation" / "guides"
    assert relative_posix(tmp_path, resolved) == "documentation/guides"


def test_traversal_is_blocked(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError) as error:
        resolve_output_path(tmp_path, "../docs")

    assert error.value.reason == "Path traversal is blocked."


def test_absolute_path_outside_root_is_blocked(tmp_path: Path) -> None:
    outside = tmp_path.parent / "elsewhere"

    with pytest.raises(PathBlockedError) as error:
        resolve_output_path(tmp_path / "repo", str(outside))

    assert error.value.reason == "Absolute output path is outside repo_root."


def test_repo_root_itself_is_blocked(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError):
        resolve_output_path(tmp_path, ".")
    with pytest.raises(PathBlockedError):
        resolve_output_path(tmp_path, "")


def test_printable_path_escapes_undecodable_bytes() -> None:
    assert printable_path("src/auth.ts") == "src/auth.ts"
    assert printable_path("src/café.ts") == "src/café.ts"
    assert printable_path("src/auth_\udcff.ts") == "src/auth_\\xff.ts"
