"""Opt-in JSONL audit trail, one event per documentation run."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

# key -> accepted type for values logged verbatim
_VERBATIM: dict[str, type | tuple[type, ...]] = {
    "docs_dir": str,
    "quick_reference": str,
    "index_path": str,
    "index_outcome": str,
    "mode": str,
    "source": str,
    "watermark": (str, type(None)),
    "changed_count": int,
    "no_impact_count": int,
    "regenerated_count": int,
    "written_count": int,
    "skipped_count": int,
    "git_available": bool,
    "quick_reference_updated": bool,
    "include_untracked": bool,
    "index_present": bool,
    "index_mtime_ns": (int, type(None)),
}


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized record of a single documentation run."""

    timestamp: str
    run_id: str
    command: str
    ok: bool
    degraded: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _describe(key: str, value: object) -> dict[str, object]:
    """Summarize a value that is not logged as-is."""
    if value is None or isinstance(value, (bool, int, float)):
        return {key: value}
    if isinstance(value, str):
        return {f"{key}_present": True, f"{key}_length": len(value)}
    if isinstance(value, (list, tuple)):
        if key.endswith("topics") and all(isinstance(item, str) for item in value):
            return {key: list(value)}
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(name) for name in value)}
    return {f"{key}_type": type(value).__name__}


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Keep known scalar fields and topic lists; paths and free text become lengths."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        value = arguments[key]
        expected = _VERBATIM.get(key)
        if expected is not None and isinstance(value, expected):
            sanitized[key] = value
        else:
            sanitized.update(_describe(key, value))
    return sanitized


class JsonlAuditLogger:
    """Appends one JSON object per line; the file is never rewritten."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, event: AuditEvent) -> None:
        line = json.dumps(asdict(event), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
