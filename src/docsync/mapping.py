"""Static path->topic association table and affected-topic evaluation."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from dataclasses import dataclass

from docsync.config import MappingRuleConfig
from docsync.topics import ordered


@dataclass(slots=True, frozen=True)
class MappingRule:
    """Associates one glob pattern with one or more topics."""

    pattern: str
    topics: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class TopicImpact:
    """Result of evaluating a batch of changed paths."""

    affected_topics: tuple[str, ...]
    path_topics: dict[str, tuple[str, ...]]
    no_impact_paths: tuple[str, ...]


DEFAULT_RULES: tuple[MappingRule, ...] = (
    # architecture
    MappingRule("**/src/app/**", ("architecture",)),
    MappingRule("**/src/stores/**", ("architecture",)),
    MappingRule("**/src/store/**", ("architecture",)),
    MappingRule("**/src/providers/**", ("architecture",)),
    MappingRule("**/src/layouts/**", ("architecture",)),
    MappingRule("**/src/router.*", ("architecture",)),
    MappingRule("**/src/main.*", ("architecture",)),
    MappingRule("**/tsconfig*.json", ("architecture", "development")),
    MappingRule("**/vite.config.*", ("architecture", "development")),
    MappingRule("**/next.config.*", ("architecture", "development")),
    # development
    MappingRule("package.json", ("development", "architecture")),
    MappingRule("package-lock.json", ("development",)),
    MappingRule("pnpm-lock.yaml", ("development",)),
    MappingRule("yarn.lock", ("development",)),
    MappingRule("bun.lockb", ("development",)),
    MappingRule("**/.env.example", ("development",)),
    MappingRule("**/.nvmrc", ("development",)),
    MappingRule("**/eslint.config.*", ("development",)),
    MappingRule("**/.eslintrc*", ("development",)),
    MappingRule("**/.prettierrc*", ("development",)),
    MappingRule("**/docker-compose*.yml", ("development", "database")),
    MappingRule("**/dockerfile", ("development",)),
    # database
    MappingRule("**/prisma/**", ("database",)),
    MappingRule("**/drizzle/**", ("database",)),
    MappingRule("**/supabase/**", ("database",)),
    MappingRule("**/migrations/**", ("database",)),
    MappingRule("**/*schema*", ("database",)),
    MappingRule("**/models/**", ("database",)),
    MappingRule("**/db/**", ("database",)),
    MappingRule("**/drizzle.config.*", ("database",)),
    # api
    MappingRule("**/routes/**", ("api", "architecture")),
    MappingRule("**/api/**", ("api",)),
    MappingRule("**/services/**", ("api",)),
    MappingRule("**/endpoints/**", ("api",)),
    MappingRule("**/server/**", ("api",)),
    MappingRule("**/openapi*", ("api",)),
    # authentication
    # "auth" as a name part or a known compound prefix; author* stays out
    MappingRule("**/*auth.*", ("authentication",)),
    MappingRule("**/*auth/**", ("authentication",)),
    MappingRule("**/*auth[-_]*", ("authentication",)),
    MappingRule("**/*auth[cgmprs]*", ("authentication",)),
    MappingRule("**/*authenticat*", ("authentication",)),
    MappingRule("**/*login*", ("authentication",)),
    MappingRule("**/*session*", ("authentication",)),
    MappingRule("**/middleware.*", ("authentication", "permissions")),
    # permissions
    MappingRule("**/*permission*", ("permissions",)),
    MappingRule("**/*role*", ("permissions",)),
    MappingRule("**/*rbac*", ("permissions",)),
    MappingRule("**/*authoriz*", ("permissions",)),
    MappingRule("**/*guard*", ("permissions",)),
    MappingRule("**/abilit*", ("permissions",)),
    MappingRule("**/*[-_]abilit*", ("permissions",)),
    MappingRule("**/*useabilit*", ("permissions",)),
    MappingRule("**/*defineabilit*", ("permissions",)),
    MappingRule("**/acl*", ("permissions",)),
    MappingRule("**/*[-_]acl*", ("permissions",)),
    MappingRule("**/*acl.*", ("permissions",)),
    MappingRule("**/*acl/**", ("permissions",)),
    MappingRule("**/policies/**", ("permissions",)),
    # testing
    MappingRule("**/*.test.*", ("testing",)),
    MappingRule("**/*.spec.*", ("testing",)),
    MappingRule("**/__tests__/**", ("testing",)),
    MappingRule("**/e2e/**", ("testing",)),
    MappingRule("**/tests/**", ("testing",)),
    MappingRule("**/vitest.config.*", ("testing",)),
    MappingRule("**/jest.config.*", ("testing",)),
    MappingRule("**/playwright.config.*", ("testing",)),
    MappingRule("**/cypress/**", ("testing",)),
)


def build_rules(extra_rules: Iterable[MappingRuleConfig] = ()) -> tuple[MappingRule, ...]:
    """Return built-in rules followed by configured additions."""
    extra = tuple(MappingRule(pattern=rule.pattern, topics=rule.topics) for rule in extra_rules)
    return DEFAULT_RULES + extra


def normalize_path(path: str) -> str:
    """Normalize a repo-relative path to lower-case POSIX form."""
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/").lower()


def pattern_matches(pattern: str, path: str) -> bool:
    """Return True when a glob pattern matches a repo-relative path.

    Matching is case-insensitive and ``*`` may cross ``/``. A leading ``**/``
    also matches files at the repository root.
    """
    normalized = normalize_path(path)
    lowered = pattern.lower()
    anchored = f"/{normalized}"
    return fnmatch.fnmatchcase(normalized, lowered) or fnmatch.fnmatchcase(anchored, lowered)


def topics_for_path(path: str, rules: tuple[MappingRule, ...] = DEFAULT_RULES) -> tuple[str, ...]:
    """Return every topic activated by one path, in catalogue order."""
    found: set[str] = set()
    for rule in rules:
        if pattern_matches(rule.pattern, path):
            found.update(rule.topics)
    return ordered(found)


def evaluate_paths(
    paths: Iterable[str], rules: tuple[MappingRule, ...] = DEFAULT_RULES
) -> TopicImpact:
    """Evaluate every path against every rule and accumulate the affected-topic set."""
    affected: set[str] = set()
    path_topics: dict[str, tuple[str, ...]] = {}
    no_impact: list[str] = []
    for path in sorted(set(paths)):
        topics = topics_for_path(path, rules)
        path_topics[path] = topics
        if not topics:
            no_impact.append(path)
            continue
        affected.update(topics)
    return TopicImpact(
        affected_topics=ordered(affected),
        path_topics=path_topics,
        no_impact_paths=tuple(no_impact),
    )
