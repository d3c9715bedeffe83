"""Deterministic markdown rendering for each documentation topic."""

from __future__ import annotations

from collections.abc import Callable

from docsync.signals import SourceSignals, TopicEvidence, detect_stack
from docsync.topics import Topic, topic_by_name

MAX_LISTED_PATHS = 40

_TOPIC_INTROS = {
    "database": "Data access layer, schema definitions and migrations.",
    "api": "HTTP endpoints, route modules and client-side data fetching.",
    "authentication": "Sign-in flow, session handling and protected entry points.",
    "permissions": "Roles, guards and authorization checks.",
    "testing": "Test runners, suites and how to run them.",
}


def render_topic(
    topic_name: str,
    signals: SourceSignals,
    evidence: dict[str, TopicEvidence],
) -> str:
    """Render the markdown body of one topic document."""
    topic = topic_by_name(topic_name)
    renderer = _RENDERERS.get(topic.name)
    if renderer is not None:
        return renderer(topic, signals)
    return _render_evidence_topic(topic, signals, evidence[topic.name])


def run_command(package_manager: str, script: str) -> str:
    """Return the shell command that runs a package.json script."""
    if package_manager == "npm":
        if script in {"start", "test"}:
            return f"npm {script}"
        return f"npm run {script}"
    return f"{package_manager} {script}"


def install_command(package_manager: str) -> str:
    return f"{package_manager} install"


def top_level_layout(paths: tuple[str, ...]) -> list[tuple[str, int]]:
    """Count files per top-level directory, and per src/ subdirectory."""
    counts: dict[str, int] = {}
    for path in paths:
        parts = path.split("/")
        if len(parts) < 2:
            continue
        key = parts[0]
        if parts[0] == "src" and len(parts) > 2:
            key = f"src/{parts[1]}"
        counts[key] = counts.get(key, 0) + 1
    return sorted(counts.items())


def _render_architecture(topic: Topic, signals: SourceSignals) -> str:
    lines = [f"# {topic.title}", ""]
    project = signals.manifest.name if signals.manifest and signals.manifest.name else None
    if project:
        lines.append(f"Project: `{project}`")
        lines.append("")
    lines.append(f"Generated from: {_source_label(signals.source)}.")
    lines.append("")
    lines.append("## Stack")
    lines.append("")
    stack = detect_stack(signals.manifest)
    if stack:
        lines.append("| Concern | Packages |")
        lines.append("|---|---|")
        for category, packages in stack:
            lines.append(f"| {category} | {packages} |")
    else:
        lines.append("No recognised framework packages found in `package.json`.")
    lines.append("")
    lines.append("## Layout")
    lines.append("")
    layout = top_level_layout(signals.paths)
    if layout:
        for directory, count in layout:
            noun = "file" if count == 1 else "files"
            lines.append(f"- `{directory}/` ({count} {noun})")
    else:
        lines.append("No source directories found.")
    lines.append("")
    entrypoints = [
        path
        for path in signals.paths
        if path.split("/")[-1].split(".")[0] in {"main", "index", "App", "app", "router"}
        and path.count("/") <= 2
        and path.startswith(("src/", "app/"))
    ]
    if entrypoints:
        lines.append("## Entry points")
        lines.append("")
        lines.extend(_bullet_paths(entrypoints))
        lines.append("")
    return "\n".join(lines)


def _render_development(topic: Topic, signals: SourceSignals) -> str:
    manager = signals.package_manager
    lines = [f"# {topic.title}", "", "## Setup", ""]
    lines.append(f"- Package manager: `{manager}`")
    if signals.node_version:
        lines.append(f"- Node.js: `{signals.node_version}`")
    lines.append(f"- Install dependencies: `{install_command(manager)}`")
    if signals.has_env_example:
        lines.append("- Copy `.env.example` to `.env` and fill in the values.")
    lines.append("")
    lines.append("## Scripts")
    lines.append("")
    scripts = signals.manifest.scripts if signals.manifest is not None else {}
    if scripts:
        lines.append("| Command | Runs |")
        lines.append("|---|---|")
        for name in sorted(scripts):
            lines.append(f"| `{run_command(manager, name)}` | `{_escape_cell(scripts[name])}` |")
    else:
        lines.append("No scripts defined in `package.json`.")
    lines.append("")
    return "\n".join(lines)


def _render_evidence_topic(topic: Topic, signals: SourceSignals, evidence: TopicEvidence) -> str:
    lines = [f"# {topic.title}", ""]
    intro = _TOPIC_INTROS.get(topic.name)
    if intro:
        lines.append(intro)
        lines.append("")
    if not evidence.found:
        lines.append(f"No {topic.title.lower()} code was detected in this project.")
        lines.append("")
        return "\n".join(lines)
    if evidence.dependencies:
        installed = signals.manifest.all_dependencies() if signals.manifest is not None else {}
        lines.append("## Packages")
        lines.append("")
        for name in evidence.dependencies:
            lines.append(f"- `{name}` {installed.get(name, '')}".rstrip())
        lines.append("")
    if evidence.paths:
        lines.append("## Files")
        lines.append("")
        lines.extend(_bullet_paths(list(evidence.paths)))
        lines.append("")
    if topic.name == "testing" and signals.manifest is not None:
        test_scripts = sorted(name for name in signals.manifest.scripts if "test" in name)
        if test_scripts:
            lines.append("## Running tests")
            lines.append("")
            for name in test_scripts:
                lines.append(f"- `{run_command(signals.package_manager, name)}`")
            lines.append("")
    return "\n".join(lines)


def _bullet_paths(paths: list[str]) -> list[str]:
    ordered_paths = sorted(paths)
    lines = [f"- `{path}`" for path in ordered_paths[:MAX_LISTED_PATHS]]
    remaining = len(ordered_paths) - MAX_LISTED_PATHS
    if remaining > 0:
        lines.append(f"- ... and {remaining} more")
    return lines


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def _source_label(source: str) -> str:
    if source == "index":
        return "project index"
    return "direct source inspection"


_RENDERERS: dict[str, Callable[[Topic, SourceSignals], str]] = {
    "architecture": _render_architecture,
    "development": _render_development,
}
