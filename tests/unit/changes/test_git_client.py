from __future__ import annotations

from pathlib import Path

from conftest import commit_all, init_repo, requires_git, run_git, write_undecodable_auth_file

from docsync.changes import GitClient


def test_plain_directory_is_not_a_work_tree(tmp_path: Path) -> None:
    assert GitClient(tmp_path).is_work_tree() is False


def test_missing_git_executable_is_not_a_work_tree(tmp_path: Path) -> None:
    client = GitClient(tmp_path, executable="docsync-no-such-git")

    assert client.available() is False
    assert client.is_work_tree() is False


@requires_git
def test_repository_without_commits_has_no_watermark(tmp_path: Path) -> None:
    init_repo(tmp_path)
    client = GitClient(tmp_path)

    assert client.is_work_tree() is True
    assert client.find_watermark(("docs", "CLAUDE.md")) is None


@requires_git
def test_watermark_is_latest_commit_touching_docs(tmp_path: Path) -> None:
    init_repo(tmp_path)
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "ARCHITECTURE.md").write_text("# A\n", encoding="utf-8")
    docs_commit = commit_all(tmp_path, "docs")
    (tmp_path / "app.ts").write_text("x\n", encoding="utf-8")
    commit_all(tmp_path, "code")

    assert GitClient(tmp_path).find_watermark(("docs", "CLAUDE.md")) == docs_commit


@requires_git
def test_changed_paths_partitions_committed_staged_unstaged(tmp_path: Path) -> None:
    init_repo(tmp_path)
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "ARCHITECTURE.md").write_text("# A\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# R\n", encoding="utf-8")
    (tmp_path / "package.json").write_text("{}\n", encoding="utf-8")
    watermark = commit_all(tmp_path, "docs")

    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "auth.ts").write_text("export {}\n", encoding="utf-8")
    commit_all(tmp_path, "auth")

    (tmp_path / "package.json").write_text('{"name": "x"}\n', encoding="utf-8")

    run_git(tmp_path, "add", "package.json")
    (tmp_path / "README.md").write_text("# R2\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("untracked\n", encoding="utf-8")

    client = GitClient(tmp_path)
    changes = client.changed_paths(watermark)

    assert changes.committed == ("src/auth.ts",)
    assert changes.staged == ("package.json",)
    assert changes.unstaged == ("README.md",)
    assert changes.untracked == ()
    assert changes.paths == ("README.md", "package.json", "src/auth.ts")

    with_untracked = client.changed_paths(watermark, include_untracked=True)
    assert with_untracked.untracked == ("notes.txt",)


@requires_git
def test_undecodable_committed_name_is_spelled_with_escapes(tmp_path: Path) -> None:
    init_repo(tmp_path)
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "ARCHITECTURE.md").write_text("# A\n", encoding="utf-8")
    docs_commit = commit_all(tmp_path, "docs")
    name = write_undecodable_auth_file(tmp_path)
    commit_all(tmp_path, "add auth")

    changes = GitClient(tmp_path).changed_paths(docs_commit)

    assert changes.committed == (name,)
