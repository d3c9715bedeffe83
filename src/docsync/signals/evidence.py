"""Source signals and per-topic evidence detection."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from docsync.mapping import DEFAULT_RULES, MappingRule, topics_for_path

SOURCE_INDEX = "index"
SOURCE_DIRECT = "direct"

LOCKFILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
)

TOPIC_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "database": (
        "@prisma/client",
        "@supabase/supabase-js",
        "better-sqlite3",
        "dexie",
        "drizzle-orm",
        "knex",
        "kysely",
        "mongoose",
        "mysql2",
        "pg",
        "prisma",
        "sequelize",
        "typeorm",
    ),
    "api": (
        "@apollo/client",
        "@tanstack/react-query",
        "@trpc/client",
        "@trpc/server",
        "axios",
        "express",
        "fastify",
        "graphql",
        "hono",
        "ky",
        "openapi-fetch",
        "react-query",
        "swr",
    ),
    "authentication": (
        "@auth/core",
        "@auth0/auth0-react",
        "@azure/msal-react",
        "@clerk/clerk-react",
        "@clerk/nextjs",
        "@supabase/auth-helpers-react",
        "better-auth",
        "jose",
        "jwt-decode",
        "lucia",
        "next-auth",
        "oidc-client-ts",
        "react-oidc-context",
    ),
    "permissions": (
        "@casl/ability",
        "@casl/react",
        "@permify/react-role",
        "accesscontrol",
        "casbin",
    ),
    "testing": (
        "@playwright/test",
        "@testing-library/jest-dom",
        "@testing-library/react",
        "cypress",
        "jest",
        "msw",
        "vitest",
    ),
}

STACK_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Framework", ("next", "@remix-run/react", "react")),
    ("Language", ("typescript",)),
    ("Build tool", ("vite", "react-scripts", "webpack", "turbo")),
    ("Routing", ("@tanstack/react-router", "react-router-dom", "react-router")),
    (
        "State management",
        ("zustand", "@reduxjs/toolkit", "redux", "jotai", "recoil", "mobx", "valtio"),
    ),
    ("Server state", ("@tanstack/react-query", "react-query", "swr", "@apollo/client")),
    (
        "Styling",
        (
            "tailwindcss",
            "styled-components",
            "@emotion/react",
            "@mui/material",
            "@chakra-ui/react",
            "sass",
        ),
    ),
    ("Forms", ("react-hook-form", "formik")),
    ("Validation", ("zod", "yup", "valibot")),
)


@dataclass(slots=True, frozen=True)
class PackageManifest:
    """Subset of package.json used for documentation."""

    name: str | None
    scripts: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    node_engine: str | None = None

    def all_dependencies(self) -> dict[str, str]:
        merged = dict(self.dev_dependencies)
        merged.update(self.dependencies)
        return merged


@dataclass(slots=True, frozen=True)
class SourceSignals:
    """Everything full regeneration knows about the project."""

    source: str
    paths: tuple[str, ...]
    manifest: PackageManifest | None
    package_manager: str
    node_version: str | None
    has_env_example: bool


@dataclass(slots=True, frozen=True)
class TopicEvidence:
    """Paths and dependencies that support one documentation topic."""

    topic: str
    paths: tuple[str, ...]
    dependencies: tuple[str, ...]

    @property
    def found(self) -> bool:
        return bool(self.paths or self.dependencies)


def load_manifest(repo_root: Path) -> PackageManifest | None:
    """Read package.json, returning None when absent or unreadable."""
    manifest_path = repo_root / "package.json"
    if not manifest_path.is_file():
        return None
    try:
        with manifest_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    engines = payload.get("engines")
    node_engine = None
    if isinstance(engines, dict) and isinstance(engines.get("node"), str):
        node_engine = engines["node"]
    name = payload.get("name")
    return PackageManifest(
        name=name if isinstance(name, str) else None,
        scripts=_string_table(payload.get("scripts")),
        dependencies=_string_table(payload.get("dependencies")),
        dev_dependencies=_string_table(payload.get("devDependencies")),
        node_engine=node_engine,
    )


def detect_package_manager(repo_root: Path) -> str:
    """Pick the package manager from the first lockfile present."""
    for filename, manager in LOCKFILES:
        if (repo_root / filename).is_file():
            return manager
    return "npm"


def collect_signals(
    repo_root: Path,
    paths: tuple[str, ...],
    source: str,
) -> SourceSignals:
    """Bundle the path inventory with manifest facts from the repository root."""
    root = repo_root.resolve()
    node_version: str | None = None
    nvmrc = root / ".nvmrc"
    if nvmrc.is_file():
        node_version = nvmrc.read_text(encoding="utf-8", errors="replace").strip() or None
    manifest = load_manifest(root)
    if node_version is None and manifest is not None:
        node_version = manifest.node_engine
    return SourceSignals(
        source=source,
        paths=paths,
        manifest=manifest,
        package_manager=detect_package_manager(root),
        node_version=node_version,
        has_env_example=(root / ".env.example").is_file(),
    )


def detect_evidence(
    signals: SourceSignals,
    rules: tuple[MappingRule, ...] = DEFAULT_RULES,
) -> dict[str, TopicEvidence]:
    """Return evidence for every conditional topic, keyed by topic name."""
    matched: dict[str, list[str]] = {topic: [] for topic in TOPIC_DEPENDENCIES}
    for path in signals.paths:
        for topic in topics_for_path(path, rules):
            if topic in matched:
                matched[topic].append(path)
    installed = signals.manifest.all_dependencies() if signals.manifest is not None else {}
    evidence: dict[str, TopicEvidence] = {}
    for topic, known in TOPIC_DEPENDENCIES.items():
        evidence[topic] = TopicEvidence(
            topic=topic,
            paths=tuple(sorted(matched[topic])),
            dependencies=tuple(sorted(name for name in known if name in installed)),
        )
    return evidence


def detect_stack(manifest: PackageManifest | None) -> list[tuple[str, str]]:
    """Return (category, package@version) pairs for recognised stack packages."""
    if manifest is None:
        return []
    installed = manifest.all_dependencies()
    stack: list[tuple[str, str]] = []
    for category, candidates in STACK_CATEGORIES:
        found = [f"{name} {installed[name]}" for name in candidates if name in installed]
        if found:
            stack.append((category, ", ".join(found)))
    return stack


def _string_table(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {
        str(key): item
        for key, item in sorted(value.items())
        if isinstance(key, str) and isinstance(item, str)
    }
