from __future__ import annotations

import json
import os
import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def run_git(repo_root: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=repo_root,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


def init_repo(repo_root: Path) -> None:
    run_git(repo_root, "init", "-q")
    run_git(repo_root, "config", "user.email", "dev@example.com")
    run_git(repo_root, "config", "user.name", "Dev")
    run_git(repo_root, "config", "commit.gpgsign", "false")


def commit_all(repo_root: Path, message: str) -> str:
    run_git(repo_root, "add", "-A")
    run_git(repo_root, "commit", "-q", "-m", message)
    return run_git(repo_root, "rev-parse", "HEAD")


def write_vite_project(repo_root: Path) -> None:
    """Write a minimal React + TypeScript project with no auth/db/api/test code."""
    manifest = {
        "name": "shop-front",
        "private": True,
        "scripts": {
            "build": "tsc -b && vite build",
            "dev": "vite",
            "lint": "eslint .",
        },
        "dependencies": {"react": "^18.3.1", "react-dom": "^18.3.1"},
        "devDependencies": {"typescript": "^5.5.0", "vite": "^5.4.0"},
    }
    (repo_root / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    (repo_root / "src" / "components").mkdir(parents=True)
    (repo_root / "src" / "main.tsx").write_text("import App from './App'\n", encoding="utf-8")
    (repo_root / "src" / "App.tsx").write_text(
        "export default function App() { return null }\n", encoding="utf-8"
    )
    (repo_root / "src" / "components" / "Button.tsx").write_text(
        "export const Button = () => null\n", encoding="utf-8"
    )
    (repo_root / "README.md").write_text("# shop-front\n", encoding="utf-8")


@pytest.fixture
def vite_project(tmp_path: Path) -> Path:
    write_vite_project(tmp_path)
    return tmp_path


def write_undecodable_auth_file(repo_root: Path) -> str:
    """Create src/auth_<0xff>.ts and return the path as docsync reports it."""
    source_dir = repo_root / "src"
    source_dir.mkdir(parents=True, exist_ok=True)
    raw_path = os.path.join(os.fsencode(source_dir), b"auth_\xff.ts")
    try:
        with open(raw_path, "wb") as handle:
            handle.write(b"export const signIn = () => null\n")
    except OSError:
        pytest.skip("filesystem rejects file names that are not valid UTF-8")
    return "src/auth_\\xff.ts"
