"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from docsync.topics import TOPIC_NAMES

CONFIG_FILENAME = "docsync.toml"
MAX_FILES_CAP = 200_000

DEFAULT_DOCS_DIR = "docs"
DEFAULT_QUICK_REFERENCE = "CLAUDE.md"
DEFAULT_INDEX_PATH = "PROJECT_INDEX.json"
DEFAULT_INDEX_COMMAND = (
    "python3",
    "~/.claude-code-project-index/scripts/project_index.py",
)
DEFAULT_EXCLUDE_GLOBS = (
    "**/.git/**",
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/.next/**",
    "**/.turbo/**",
    "**/.cache/**",
)
DEFAULT_MAX_FILES = 20_000


@dataclass(slots=True, frozen=True)
class DocsConfig:
    """Output locations of the documentation set."""

    dir: str
    quick_reference: str


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """External project indexer settings."""

    path: str
    command: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ChangesConfig:
    """Change detection toggles."""

    include_untracked: bool


@dataclass(slots=True, frozen=True)
class DiscoveryConfig:
    """Direct source inspection settings."""

    exclude_globs: tuple[str, ...]
    max_files: int


@dataclass(slots=True, frozen=True)
class MappingRuleConfig:
    """Additional path->topic rule from configuration."""

    pattern: str
    topics: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class DocSyncConfig:
    """Fully merged configuration."""

    repo_root: Path
    docs: DocsConfig
    index: IndexConfig
    changes: ChangesConfig
    discovery: DiscoveryConfig
    extra_rules: tuple[MappingRuleConfig, ...]
    audit_path: Path | None


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    docs_dir: str | None = None
    quick_reference: str | None = None
    index_path: str | None = None
    include_untracked: bool | None = None
    audit_path: Path | None = None


def default_config(repo_root: Path) -> DocSyncConfig:
    """Build default config for a given repository root."""
    return DocSyncConfig(
        repo_root=repo_root.resolve(),
        docs=DocsConfig(dir=DEFAULT_DOCS_DIR, quick_reference=DEFAULT_QUICK_REFERENCE),
        index=IndexConfig(path=DEFAULT_INDEX_PATH, command=DEFAULT_INDEX_COMMAND),
        changes=ChangesConfig(include_untracked=False),
        discovery=DiscoveryConfig(
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
            max_files=DEFAULT_MAX_FILES,
        ),
        extra_rules=(),
        audit_path=None,
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional docsync.toml from repo root."""
    config_path = repo_root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILENAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a string.")
    return value.strip()


def _mapping_rules(payload: dict[str, object]) -> tuple[MappingRuleConfig, ...]:
    raw_rules = payload.get("rules", [])
    if not isinstance(raw_rules, list):
        raise ValueError("Config field 'mapping.rules' must be an array of tables.")
    rules: list[MappingRuleConfig] = []
    for position, raw in enumerate(raw_rules):
        name = f"mapping.rules[{position}]"
        if not isinstance(raw, dict):
            raise ValueError(f"Config field '{name}' must be a table.")
        pattern = raw.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            raise ValueError(f"Config field '{name}.pattern' must be a string.")
        topics = _tuple_of_strings(raw.get("topics"), name, "topics")
        if not topics:
            raise ValueError(f"Config field '{name}.topics' must not be empty.")
        unknown = sorted(set(topics) - set(TOPIC_NAMES))
        if unknown:
            raise ValueError(
                f"Config field '{name}.topics' has unknown topics: {', '.join(unknown)}."
            )
        rules.append(MappingRuleConfig(pattern=pattern, topics=topics))
    return tuple(rules)


def merge_config(
    base: DocSyncConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> DocSyncConfig:
    """Merge defaults, repo config, then CLI overrides."""
    docs_payload = _get_table(repo_payload, "docs")
    index_payload = _get_table(repo_payload, "index")
    changes_payload = _get_table(repo_payload, "changes")
    discovery_payload = _get_table(repo_payload, "discovery")
    mapping_payload = _get_table(repo_payload, "mapping")
    audit_payload = _get_table(repo_payload, "audit")

    docs = DocsConfig(
        dir=_optional_string(docs_payload.get("dir"), "docs.dir", base.docs.dir),
        quick_reference=_optional_string(
            docs_payload.get("quick_reference"),
            "docs.quick_reference",
            base.docs.quick_reference,
        ),
    )

    command = base.index.command
    if "command" in index_payload:
        command = _tuple_of_strings(index_payload["command"], "index", "command")
        if not command:
            raise ValueError("Config field 'index.command' must not be empty.")
    index = IndexConfig(
        path=_optional_string(index_payload.get("path"), "index.path", base.index.path),
        command=command,
    )

    include_untracked = base.changes.include_untracked
    if "include_untracked" in changes_payload:
        raw_include_untracked = changes_payload["include_untracked"]
        if not isinstance(raw_include_untracked, bool):
            raise ValueError("Config field 'changes.include_untracked' must be a boolean.")
        include_untracked = raw_include_untracked

    exclude_globs = base.discovery.exclude_globs
    if "exclude_globs" in discovery_payload:
        exclude_globs = _tuple_of_strings(
            discovery_payload["exclude_globs"], "discovery", "exclude_globs"
        )
    max_files = _optional_positive_int_with_cap(
        discovery_payload.get("max_files"),
        "discovery.max_files",
        base.discovery.max_files,
        MAX_FILES_CAP,
    )

    audit_path = base.audit_path
    raw_audit_path = audit_payload.get("path")
    if raw_audit_path is not None:
        audit_path = base.repo_root / _optional_string(raw_audit_path, "audit.path", "")

    merged = DocSyncConfig(
        repo_root=base.repo_root,
        docs=docs,
        index=index,
        changes=ChangesConfig(include_untracked=include_untracked),
        discovery=DiscoveryConfig(exclude_globs=exclude_globs, max_files=max_files),
        extra_rules=base.extra_rules + _mapping_rules(mapping_payload),
        audit_path=audit_path,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DocSyncConfig, overrides: CliOverrides) -> DocSyncConfig:
    """Apply startup overrides at highest precedence."""
    docs = DocsConfig(
        dir=_optional_string(overrides.docs_dir, "overrides.docs_dir", config.docs.dir),
        quick_reference=_optional_string(
            overrides.quick_reference,
            "overrides.quick_reference",
            config.docs.quick_reference,
        ),
    )
    index = IndexConfig(
        path=_optional_string(overrides.index_path, "overrides.index_path", config.index.path),
        command=config.index.command,
    )
    changes = ChangesConfig(
        include_untracked=(
            overrides.include_untracked
            if overrides.include_untracked is not None
            else config.changes.include_untracked
        )
    )
    audit_path = overrides.audit_path or config.audit_path
    return DocSyncConfig(
        repo_root=config.repo_root,
        docs=docs,
        index=index,
        changes=changes,
        discovery=config.discovery,
        extra_rules=config.extra_rules,
        audit_path=audit_path.resolve() if audit_path is not None else None,
    )


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> DocSyncConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    if not resolved_root.is_dir():
        raise ValueError(f"Repository root '{repo_root}' is not a directory.")
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
