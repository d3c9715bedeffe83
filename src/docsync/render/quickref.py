"""Top-level quick-reference file rendering."""

from __future__ import annotations

from docsync.render.documents import install_command, run_command
from docsync.signals import SourceSignals, detect_stack
from docsync.topics import ALL_TOPICS

KEY_SCRIPTS = ("dev", "start", "build", "test", "lint", "typecheck", "format", "preview")


def render_quick_reference(
    signals: SourceSignals,
    docs_dir: str,
    documented_topics: tuple[str, ...],
) -> str:
    """Render commands, architecture rules and links into the docs directory."""
    manager = signals.package_manager
    project = signals.manifest.name if signals.manifest and signals.manifest.name else None
    lines = [f"# {project}" if project else "# Project Guide", ""]

    lines.append("## Commands")
    lines.append("")
    lines.append(f"- `{install_command(manager)}`")
    scripts = signals.manifest.scripts if signals.manifest is not None else {}
    for name in KEY_SCRIPTS:
        if name in scripts:
            lines.append(f"- `{run_command(manager, name)}`")
    lines.append("")

    stack = detect_stack(signals.manifest)
    if stack:
        lines.append("## Architecture rules")
        lines.append("")
        for category, packages in stack:
            names = ", ".join(f"`{item.split(' ')[0]}`" for item in packages.split(", "))
            lines.append(f"- {category}: use {names}.")
        lines.append("")

    lines.append("## Documentation")
    lines.append("")
    prefix = docs_dir.strip("/")
    for topic in ALL_TOPICS:
        if topic.name in documented_topics:
            lines.append(f"- [{topic.title}]({prefix}/{topic.filename})")
    lines.append("")
    return "\n".join(lines)
