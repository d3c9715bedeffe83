from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

from conftest import (
    commit_all,
    init_repo,
    requires_git,
    run_git,
    write_undecodable_auth_file,
    write_vite_project,
)

from docsync.config import DocSyncConfig, IndexConfig, load_effective_config
from docsync.index import (
    OUTCOME_FAILED,
    OUTCOME_NOT_NEEDED,
    OUTCOME_REFRESHED,
    OUTCOME_SKIPPED_BY_OPERATOR,
    OUTCOME_UNAVAILABLE,
    decline,
)
from docsync.render import BEGIN_MARKER
from docsync.runner import DocRefresh
from docsync.summary import RunSummary, render_summary


def _refresh(repo_root: Path) -> RunSummary:
    return DocRefresh(config=load_effective_config(repo_root), consent=decline).run()


def _write(repo_root: Path, relative: str, content: str) -> None:
    path = repo_root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _documented_repo(repo_root: Path) -> str:
    """Git repo whose docs were generated and committed; returns the docs commit."""
    write_vite_project(repo_root)
    init_repo(repo_root)
    commit_all(repo_root, "initial")
    _refresh(repo_root)
    return commit_all(repo_root, "docs: initial documentation")


@requires_git
def test_fresh_project_creates_only_unconditional_topics(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    init_repo(tmp_path)
    commit_all(tmp_path, "initial")

    summary = _refresh(tmp_path)

    assert summary.mode == "full"
    assert summary.source == "direct"
    assert summary.index_outcome == OUTCOME_SKIPPED_BY_OPERATOR
    assert "Index creation skipped by operator choice." in summary.notes
    assert summary.regenerated == ("docs/ARCHITECTURE.md", "docs/DEVELOPMENT.md")
    assert summary.written == summary.regenerated
    assert summary.skipped == (
        "docs/DATABASE.md",
        "docs/API.md",
        "docs/AUTHENTICATION.md",
        "docs/PERMISSIONS.md",
        "docs/TESTING.md",
    )
    assert sorted(path.name for path in (tmp_path / "docs").iterdir()) == [
        "ARCHITECTURE.md",
        "DEVELOPMENT.md",
    ]
    assert summary.quick_reference_updated is True
    quick_reference = (tmp_path / "CLAUDE.md").read_text(encoding="utf-8")
    assert "[Architecture](docs/ARCHITECTURE.md)" in quick_reference
    assert "docs/AUTHENTICATION.md" not in quick_reference


@requires_git
def test_second_run_without_changes_writes_nothing(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    init_repo(tmp_path)
    commit_all(tmp_path, "initial")
    _refresh(tmp_path)
    before = {
        path: path.read_bytes() for path in (tmp_path / "docs").iterdir()
    }

    summary = _refresh(tmp_path)

    # docs exist but were never committed, so the run falls back to full
    assert summary.mode == "full"
    assert any("never been committed" in note for note in summary.notes)
    assert summary.written == ()
    assert summary.quick_reference_updated is False
    assert {path: path.read_bytes() for path in (tmp_path / "docs").iterdir()} == before


@requires_git
def test_committed_auth_module_regenerates_only_authentication(tmp_path: Path) -> None:
    _documented_repo(tmp_path)
    architecture = (tmp_path / "docs" / "ARCHITECTURE.md").read_bytes()
    development = (tmp_path / "docs" / "DEVELOPMENT.md").read_bytes()
    _write(tmp_path, "src/lib/auth.ts", "export const signIn = () => null\n")
    commit_all(tmp_path, "add auth")

    summary = _refresh(tmp_path)

    assert summary.mode == "incremental"
    assert summary.changed_paths == ("src/lib/auth.ts",)
    assert summary.affected_topics == ("authentication",)
    assert summary.regenerated == ("docs/AUTHENTICATION.md",)
    assert summary.written == ("docs/AUTHENTICATION.md",)
    assert summary.skipped == ("docs/ARCHITECTURE.md", "docs/DEVELOPMENT.md")
    assert "`src/lib/auth.ts`" in (tmp_path / "docs" / "AUTHENTICATION.md").read_text(
        encoding="utf-8"
    )
    assert (tmp_path / "docs" / "ARCHITECTURE.md").read_bytes() == architecture
    assert (tmp_path / "docs" / "DEVELOPMENT.md").read_bytes() == development
    assert "[Authentication](docs/AUTHENTICATION.md)" in (tmp_path / "CLAUDE.md").read_text(
        encoding="utf-8"
    )


@requires_git
def test_watermark_at_head_with_clean_tree_is_a_no_op(tmp_path: Path) -> None:
    docs_commit = _documented_repo(tmp_path)
    before = (tmp_path / "CLAUDE.md").read_bytes()

    summary = _refresh(tmp_path)

    assert summary.mode == "incremental"
    assert summary.watermark == docs_commit
    assert summary.changed_paths == ()
    assert summary.affected_topics == ()
    assert summary.regenerated == ()
    assert summary.written == ()
    assert summary.quick_reference_updated is False
    assert (tmp_path / "CLAUDE.md").read_bytes() == before


@requires_git
def test_paths_without_doc_impact_change_nothing(tmp_path: Path) -> None:
    _documented_repo(tmp_path)
    _write(tmp_path, "README.md", "# shop-front\n\nNow with more words.\n")

    summary = _refresh(tmp_path)

    assert summary.changed_paths == ("README.md",)
    assert summary.change_partition["unstaged"] == ("README.md",)
    assert summary.no_impact_paths == ("README.md",)
    assert summary.written == ()


@requires_git
def test_uncommitted_edit_reaches_topic_but_identical_output_is_not_rewritten(
    tmp_path: Path,
) -> None:
    _documented_repo(tmp_path)
    _write(tmp_path, "src/main.tsx", "import App from './App'\nconsole.log(App)\n")
    run_git(tmp_path, "add", "src/main.tsx")

    summary = _refresh(tmp_path)

    assert summary.change_partition["staged"] == ("src/main.tsx",)
    assert summary.affected_topics == ("architecture",)
    assert summary.regenerated == ("docs/ARCHITECTURE.md",)
    assert summary.written == ()


@requires_git
def test_untracked_files_count_only_when_enabled(tmp_path: Path) -> None:
    _documented_repo(tmp_path)
    _write(tmp_path, "src/lib/session.ts", "export const session = {}\n")

    ignored = _refresh(tmp_path)
    assert ignored.changed_paths == ()

    (tmp_path / "docsync.toml").write_text(
        "[changes]\ninclude_untracked = true\n", encoding="utf-8"
    )
    included = _refresh(tmp_path)

    assert included.change_partition["untracked"] == ("docsync.toml", "src/lib/session.ts")
    assert included.affected_topics == ("authentication",)
    assert included.written == ("docs/AUTHENTICATION.md",)


@requires_git
def test_manual_sections_survive_regeneration(tmp_path: Path) -> None:
    _documented_repo(tmp_path)
    architecture = tmp_path / "docs" / "ARCHITECTURE.md"
    architecture.write_text(
        "## Team notes\n\nKeep this.\n\n"
        + architecture.read_text(encoding="utf-8")
        + "\n## Decisions\n\nAlso keep this.\n",
        encoding="utf-8",
    )
    commit_all(tmp_path, "docs: manual notes")
    manifest = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))
    manifest["dependencies"]["zustand"] = "^4.5.0"
    (tmp_path / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    commit_all(tmp_path, "add zustand")

    summary = _refresh(tmp_path)
    text = architecture.read_text(encoding="utf-8")

    assert summary.affected_topics == ("architecture", "development")
    assert "docs/ARCHITECTURE.md" in summary.written
    assert text.startswith("## Team notes\n\nKeep this.\n\n")
    assert text.endswith("## Decisions\n\nAlso keep this.\n")
    assert "zustand ^4.5.0" in text


def test_directory_outside_version_control_runs_full(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    _refresh(tmp_path)

    summary = _refresh(tmp_path)

    assert summary.mode == "full"
    assert summary.under_version_control is False
    assert any("Not a git work tree" in note for note in summary.notes)
    assert summary.written == ()


def test_existing_index_feeds_full_regeneration(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    (tmp_path / "PROJECT_INDEX.json").write_text(
        json.dumps({"files": ["package.json", "src/api/client.ts", "src/main.tsx"]}),
        encoding="utf-8",
    )

    summary = _refresh(tmp_path)

    assert summary.index_outcome == OUTCOME_NOT_NEEDED
    assert summary.source == "index"
    assert "docs/API.md" in summary.written
    assert "`src/api/client.ts`" in (tmp_path / "docs" / "API.md").read_text(encoding="utf-8")


def _with_index_command(repo_root: Path, *command: str) -> DocSyncConfig:
    config = load_effective_config(repo_root)
    return replace(config, index=IndexConfig(path="PROJECT_INDEX.json", command=command))


def _indexed_and_documented(repo_root: Path) -> None:
    write_vite_project(repo_root)
    (repo_root / "PROJECT_INDEX.json").write_text(
        json.dumps({"files": ["package.json", "src/main.tsx"]}), encoding="utf-8"
    )
    _refresh(repo_root)


@requires_git
def test_existing_index_is_refreshed_before_incremental_update(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    index_file = tmp_path / "PROJECT_INDEX.json"
    index_file.write_text(json.dumps({"files": ["package.json"]}), encoding="utf-8")
    init_repo(tmp_path)
    commit_all(tmp_path, "initial")
    _refresh(tmp_path)
    commit_all(tmp_path, "docs: initial documentation")
    script = (
        "import json, pathlib; "
        "pathlib.Path('PROJECT_INDEX.json').write_text("
        "json.dumps({'files': ['package.json', 'src/main.tsx']}))"
    )
    config = _with_index_command(tmp_path, sys.executable, "-c", script)

    summary = DocRefresh(config=config, consent=decline).run()

    assert summary.mode == "incremental"
    assert summary.index_outcome == OUTCOME_REFRESHED
    assert summary.source == "index"
    assert summary.degraded is False
    assert summary.index_status.present is True
    assert summary.index_status.mtime_ns is not None
    assert summary.changed_paths == ("PROJECT_INDEX.json",)
    assert summary.no_impact_paths == ("PROJECT_INDEX.json",)
    assert json.loads(index_file.read_text(encoding="utf-8"))["files"] == [
        "package.json",
        "src/main.tsx",
    ]


def test_missing_indexer_runtime_degrades_to_direct_inspection(tmp_path: Path) -> None:
    _indexed_and_documented(tmp_path)
    config = _with_index_command(tmp_path, "docsync-missing-indexer-runtime", "index.py")

    summary = DocRefresh(config=config, consent=decline).run()

    assert summary.index_outcome == OUTCOME_UNAVAILABLE
    assert summary.source == "direct"
    assert summary.degraded is True
    assert (
        "Indexer runtime 'docsync-missing-indexer-runtime' not found; using direct inspection."
        in summary.notes
    )
    assert "docs/ARCHITECTURE.md" in summary.regenerated


def test_failing_indexer_degrades_to_direct_inspection(tmp_path: Path) -> None:
    _indexed_and_documented(tmp_path)
    config = _with_index_command(tmp_path, sys.executable, "-c", "import sys; sys.exit(3)")

    summary = DocRefresh(config=config, consent=decline).run()

    assert summary.index_outcome == OUTCOME_FAILED
    assert summary.source == "direct"
    assert summary.degraded is True
    assert any(note.startswith("Indexer exited with code 3.") for note in summary.notes)
    assert "`direct`" in render_summary(summary)


@requires_git
def test_committed_file_name_that_is_not_utf8_is_reported(tmp_path: Path) -> None:
    _documented_repo(tmp_path)
    name = write_undecodable_auth_file(tmp_path)
    commit_all(tmp_path, "add auth")

    summary = _refresh(tmp_path)

    assert summary.mode == "incremental"
    assert summary.changed_paths == (name,)
    assert summary.affected_topics == ("authentication",)
    assert summary.written == ("docs/AUTHENTICATION.md",)
    assert summary.quick_reference_updated is True
    assert f"`{name}`" in (tmp_path / "docs" / "AUTHENTICATION.md").read_text(encoding="utf-8")


def test_source_file_name_that_is_not_utf8_is_written_escaped(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    name = write_undecodable_auth_file(tmp_path)

    summary = _refresh(tmp_path)

    assert summary.written == (
        "docs/ARCHITECTURE.md",
        "docs/DEVELOPMENT.md",
        "docs/AUTHENTICATION.md",
    )
    assert summary.quick_reference_updated is True
    assert f"`{name}`" in (tmp_path / "docs" / "AUTHENTICATION.md").read_text(encoding="utf-8")


def test_existing_document_that_is_not_utf8_is_regenerated(tmp_path: Path) -> None:
    write_vite_project(tmp_path)
    (tmp_path / "docs").mkdir()
    architecture = tmp_path / "docs" / "ARCHITECTURE.md"
    architecture.write_bytes(b"\xe9t\xe9\n")

    summary = _refresh(tmp_path)

    assert "docs/ARCHITECTURE.md" in summary.written
    assert architecture.read_text(encoding="utf-8").startswith(BEGIN_MARKER)
