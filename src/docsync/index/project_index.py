"""Presence checks and invocation of the external project indexer."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from docsync.config import IndexConfig
from docsync.index.models import (
    OUTCOME_CREATED,
    OUTCOME_FAILED,
    OUTCOME_NOT_NEEDED,
    OUTCOME_REFRESHED,
    OUTCOME_SKIPPED_BY_OPERATOR,
    OUTCOME_UNAVAILABLE,
    IndexStepResult,
    ProjectIndexStatus,
)
from docsync.security import printable_path

ConsentPrompt = Callable[[str], bool]

CREATE_INDEX_QUESTION = (
    "No project index found. Run the project indexer to create one before generating docs?"
)


def decline(_: str) -> bool:
    """Consent prompt that always answers no."""
    return False


@dataclass(slots=True, frozen=True)
class IndexerError(Exception):
    """Raised when the indexer cannot run or does not produce an index."""

    reason: str
    hint: str


class ProjectIndex:
    """Wraps the optional index artifact and the command that produces it."""

    def __init__(self, repo_root: Path, config: IndexConfig) -> None:
        self._repo_root = repo_root.resolve()
        self._config = config
        self._path = self._repo_root / config.path

    def status(self) -> ProjectIndexStatus:
        """Return presence and modification time of the index file."""
        if not self._path.is_file():
            return ProjectIndexStatus(present=False, path=self._config.path, mtime_ns=None)
        return ProjectIndexStatus(
            present=True,
            path=self._config.path,
            mtime_ns=self._path.stat().st_mtime_ns,
        )

    def command(self) -> tuple[str, ...]:
        """Return the indexer command with user directories expanded."""
        return tuple(os.path.expanduser(part) for part in self._config.command)

    def runtime_available(self) -> bool:
        """Return True when the indexer's runtime executable is on PATH."""
        command = self.command()
        if not command:
            return False
        return shutil.which(command[0]) is not None

    def run(self) -> None:
        """Run the indexer in the repository root, raising IndexerError on failure."""
        command = self.command()
        try:
            completed = subprocess.run(
                list(command),
                cwd=self._repo_root,
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as error:
            raise IndexerError(
                reason=f"Indexer could not start: {error}",
                hint="Check the [index] command setting.",
            ) from error
        if completed.returncode != 0:
            detail = completed.stderr.strip().splitlines()
            raise IndexerError(
                reason=f"Indexer exited with code {completed.returncode}"
                + (f": {detail[-1]}" if detail else "."),
                hint="Run the indexer manually to inspect its output.",
            )
        if not self._path.is_file():
            raise IndexerError(
                reason=f"Indexer finished but {self._config.path} was not written.",
                hint="Check the [index] path setting matches the indexer output.",
            )

    def source_paths(self) -> tuple[str, ...] | None:
        """Return indexed file paths when the index exposes a readable file list."""
        if not self._path.is_file():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        files = payload.get("files")
        if isinstance(files, dict):
            names = [name for name in files.keys() if isinstance(name, str)]
        elif isinstance(files, list):
            names = [name for name in files if isinstance(name, str)]
        else:
            return None
        return tuple(sorted({_relative_posix(name) for name in names if name}))


def run_index_step(
    index: ProjectIndex,
    index_present: bool,
    docs_present: bool,
    consent: ConsentPrompt,
) -> IndexStepResult:
    """Refresh or create the project index, degrading instead of failing."""
    if index_present and not docs_present:
        return IndexStepResult(outcome=OUTCOME_NOT_NEEDED, index_present=True)

    if index_present:
        if not index.runtime_available():
            return IndexStepResult(
                outcome=OUTCOME_UNAVAILABLE,
                index_present=False,
                detail=f"Indexer runtime '{_runtime_name(index)}' not found; using direct inspection.",
            )
        try:
            index.run()
        except IndexerError as error:
            return IndexStepResult(
                outcome=OUTCOME_FAILED,
                index_present=False,
                detail=f"{error.reason} {error.hint}",
            )
        return IndexStepResult(outcome=OUTCOME_REFRESHED, index_present=True)

    if not consent(CREATE_INDEX_QUESTION):
        return IndexStepResult(
            outcome=OUTCOME_SKIPPED_BY_OPERATOR,
            index_present=False,
            detail="Index creation skipped by operator choice.",
        )
    if not index.runtime_available():
        return IndexStepResult(
            outcome=OUTCOME_UNAVAILABLE,
            index_present=False,
            detail=f"Indexer runtime '{_runtime_name(index)}' not found; using direct inspection.",
        )
    try:
        index.run()
    except IndexerError as error:
        return IndexStepResult(
            outcome=OUTCOME_FAILED,
            index_present=False,
            detail=f"{error.reason} {error.hint}",
        )
    return IndexStepResult(outcome=OUTCOME_CREATED, index_present=True)


def _relative_posix(name: str) -> str:
    normalized = printable_path(name).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def _runtime_name(index: ProjectIndex) -> str:
    command = index.command()
    return command[0] if command else "<empty>"
