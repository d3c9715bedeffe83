"""Run summary model and its text/JSON renderings."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from docsync.index.models import ProjectIndexStatus


@dataclass(slots=True, frozen=True)
class RunSummary:
    """Everything the operator is told after one run."""

    mode: str
    source: str
    index_outcome: str
    index_status: ProjectIndexStatus
    degraded: bool
    under_version_control: bool
    watermark: str | None
    changed_paths: tuple[str, ...]
    change_partition: dict[str, tuple[str, ...]]
    no_impact_paths: tuple[str, ...]
    affected_topics: tuple[str, ...]
    regenerated: tuple[str, ...]
    written: tuple[str, ...]
    skipped: tuple[str, ...]
    quick_reference: str
    quick_reference_updated: bool
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable snapshot."""
        payload = asdict(self)
        payload["skipped_count"] = self.skipped_count
        for key in ("changed_paths", "no_impact_paths", "affected_topics", "regenerated"):
            payload[key] = list(payload[key])
        payload["written"] = list(self.written)
        payload["skipped"] = list(self.skipped)
        payload["notes"] = list(self.notes)
        payload["change_partition"] = {
            name: list(paths) for name, paths in sorted(self.change_partition.items())
        }
        return payload

    def audit_metadata(self) -> dict[str, object]:
        """Return run details in the shape expected by sanitize_arguments."""
        return {
            "mode": self.mode,
            "source": self.source,
            "index_outcome": self.index_outcome,
            "index_present": self.index_status.present,
            "index_mtime_ns": self.index_status.mtime_ns,
            "git_available": self.under_version_control,
            "watermark": self.watermark,
            "changed_count": len(self.changed_paths),
            "no_impact_count": len(self.no_impact_paths),
            "affected_topics": list(self.affected_topics),
            "regenerated_count": len(self.regenerated),
            "written_count": len(self.written),
            "skipped_count": self.skipped_count,
            "quick_reference_updated": self.quick_reference_updated,
        }


def render_summary(summary: RunSummary) -> str:
    """Render a human-readable markdown summary."""
    lines = ["# Documentation refresh", ""]
    lines.append(f"- mode: `{summary.mode}`")
    lines.append(f"- source: `{summary.source}`")
    lines.append(f"- index: `{summary.index_outcome}`")
    if summary.index_status.present:
        lines.append(
            f"- index file: `{summary.index_status.path}`"
            f" (modified {_format_mtime(summary.index_status.mtime_ns)})"
        )
    lines.append(f"- version control: `{'git' if summary.under_version_control else 'none'}`")
    if summary.watermark is not None:
        lines.append(f"- watermark: `{summary.watermark[:12]}`")
    lines.append("")

    if summary.mode == "incremental":
        lines.append(f"## Changed paths ({len(summary.changed_paths)})")
        lines.append("")
        if not summary.changed_paths:
            lines.append("No paths changed since the last documentation update.")
        for path in summary.changed_paths:
            marker = " (no doc impact)" if path in summary.no_impact_paths else ""
            lines.append(f"- `{path}`{marker}")
        lines.append("")
        topics = ", ".join(summary.affected_topics) if summary.affected_topics else "none"
        lines.append(f"Affected topics: {topics}")
        lines.append("")

    lines.append(f"## Regenerated ({len(summary.regenerated)})")
    lines.append("")
    if not summary.regenerated:
        lines.append("Nothing regenerated.")
    for path in summary.regenerated:
        state = "written" if path in summary.written else "unchanged"
        lines.append(f"- `{path}` ({state})")
    lines.append("")

    lines.append(f"## Skipped ({summary.skipped_count} files)")
    lines.append("")
    for path in summary.skipped:
        lines.append(f"- `{path}`")
    if summary.skipped:
        lines.append("")

    updated = "updated" if summary.quick_reference_updated else "not updated"
    lines.append(f"Quick reference `{summary.quick_reference}`: {updated}.")
    if summary.notes:
        lines.append("")
        lines.append("## Notes")
        lines.append("")
        for note in summary.notes:
            lines.append(f"- {note}")
    return "\n".join(lines).rstrip() + "\n"


def _format_mtime(mtime_ns: int | None) -> str:
    if mtime_ns is None:
        return "unknown"
    moment = datetime.fromtimestamp(mtime_ns / 1_000_000_000, tz=UTC)
    return moment.isoformat(timespec="seconds").replace("+00:00", "Z")
