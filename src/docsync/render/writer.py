"""Marker-preserving, write-if-changed document output."""

from __future__ import annotations

from pathlib import Path

BEGIN_MARKER = "<!-- docsync:begin -->"
END_MARKER = "<!-- docsync:end -->"


def wrap_generated(body: str) -> str:
    """Wrap generated markdown in docsync markers."""
    return f"{BEGIN_MARKER}\n{body.strip()}\n{END_MARKER}\n"


def merge_generated(existing: str | None, block: str) -> str:
    """Replace the marked block of an existing document, keeping manual content.

    Documents without a complete marker pair are replaced entirely.
    """
    if existing is None:
        return block
    start = existing.find(BEGIN_MARKER)
    if start == -1:
        return block
    end = existing.find(END_MARKER, start)
    if end == -1:
        return block
    tail = existing[end + len(END_MARKER) :]
    if tail.startswith("\n"):
        tail = tail[1:]
    return existing[:start] + block + tail


def read_text_or_none(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8", errors="replace")


def write_if_changed(path: Path, content: str) -> bool:
    """Atomically write content when it differs from disk; return True when written."""
    if read_text_or_none(path) == content:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="\n") as handle:
        handle.write(content)
    tmp.replace(path)
    return True


def update_document(path: Path, body: str) -> bool:
    """Render body into path, preserving content outside the markers."""
    merged = merge_generated(read_text_or_none(path), wrap_generated(body))
    return write_if_changed(path, merged)
