"""Pre-flight checks and the index/docs strategy matrix."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from docsync.changes import GitClient
from docsync.index import ProjectIndex
from docsync.topics import ALL_TOPICS

MODE_FULL = "full"
MODE_INCREMENTAL = "incremental"


@dataclass(slots=True, frozen=True)
class Preflight:
    """Presence facts gathered before choosing a strategy."""

    index_present: bool
    docs_present: bool
    quick_reference_present: bool
    under_version_control: bool


@dataclass(slots=True, frozen=True)
class Strategy:
    """Chosen regeneration mode and the source of truth it reads."""

    mode: str
    source: str
    refresh_index: bool


def select_strategy(index_present: bool, docs_present: bool) -> Strategy:
    """Map (index present, docs present) onto one of four strategies."""
    source = "index" if index_present else "direct"
    if docs_present:
        return Strategy(mode=MODE_INCREMENTAL, source=source, refresh_index=index_present)
    return Strategy(mode=MODE_FULL, source=source, refresh_index=False)


def docs_set_present(docs_dir: Path) -> bool:
    """Return True when the docs directory holds at least one known topic document."""
    if not docs_dir.is_dir():
        return False
    return any((docs_dir / topic.filename).is_file() for topic in ALL_TOPICS)


def preflight(
    docs_dir: Path,
    quick_reference: Path,
    index: ProjectIndex,
    git: GitClient,
) -> Preflight:
    """Check the three artifacts and whether the tree is under git."""
    return Preflight(
        index_present=index.status().present,
        docs_present=docs_set_present(docs_dir),
        quick_reference_present=quick_reference.is_file(),
        under_version_control=git.is_work_tree(),
    )
