"""Read-only git queries used for incremental documentation updates."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from docsync.changes.models import ChangeSet

_DIFF_NAMES = ("diff", "--name-only", "--no-renames", "--relative", "-z")


@dataclass(slots=True, frozen=True)
class GitCommandError(Exception):
    """Raised when a git invocation exits non-zero or cannot start."""

    command: str
    message: str

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


class GitClient:
    """Runs git in a repository root and parses its output."""

    def __init__(self, repo_root: Path, executable: str = "git") -> None:
        self._repo_root = repo_root.resolve()
        self._executable = executable

    def available(self) -> bool:
        """Return True when the git executable is on PATH."""
        return shutil.which(self._executable) is not None

    def is_work_tree(self) -> bool:
        """Return True when repo_root is inside a git work tree."""
        if not self.available():
            return False
        try:
            output = self._run(["rev-parse", "--is-inside-work-tree"])
        except GitCommandError:
            return False
        return output.strip() == "true"

    def find_watermark(self, paths: tuple[str, ...]) -> str | None:
        """Return the most recent commit touching any of the given paths."""
        try:
            output = self._run(["log", "-1", "--format=%H", "--", *paths])
        except GitCommandError:
            # a repository without commits has no HEAD to walk
            return None
        sha = output.strip()
        return sha or None

    def changed_paths(self, watermark: str, include_untracked: bool = False) -> ChangeSet:
        """Collect committed, staged and unstaged paths changed since watermark."""
        committed = self._name_list([*_DIFF_NAMES, watermark, "HEAD"])
        staged = self._name_list([*_DIFF_NAMES, "--cached"])
        unstaged = self._name_list(list(_DIFF_NAMES))
        untracked: tuple[str, ...] = ()
        if include_untracked:
            untracked = self._name_list(["ls-files", "--others", "--exclude-standard", "-z"])
        return ChangeSet(
            watermark=watermark,
            committed=committed,
            staged=staged,
            unstaged=unstaged,
            untracked=untracked,
        )

    def _name_list(self, args: list[str]) -> tuple[str, ...]:
        output = self._run(args, strip=False)
        names = {name for name in output.split("\0") if name}
        return tuple(sorted(names))

    def _run(self, args: list[str], strip: bool = True) -> str:
        try:
            completed = subprocess.run(
                [self._executable, *args],
                cwd=self._repo_root,
                check=False,
                capture_output=True,
                encoding="utf-8",
                # -z output carries raw path bytes; invalid UTF-8 is spelled as \xNN
                errors="backslashreplace",
            )
        except OSError as error:
            raise GitCommandError(command=" ".join(args), message=str(error)) from error
        if completed.returncode != 0:
            raise GitCommandError(
                command=" ".join(args),
                message=completed.stderr.strip() or "git command failed",
            )
        return completed.stdout.strip() if strip else completed.stdout
