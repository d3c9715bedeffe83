"""Documentation topic catalogue."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Topic:
    """One topic document of the documentation set."""

    name: str
    filename: str
    title: str
    unconditional: bool


ARCHITECTURE = Topic("architecture", "ARCHITECTURE.md", "Architecture", unconditional=True)
DEVELOPMENT = Topic("development", "DEVELOPMENT.md", "Development", unconditional=True)
DATABASE = Topic("database", "DATABASE.md", "Database", unconditional=False)
API = Topic("api", "API.md", "API", unconditional=False)
AUTHENTICATION = Topic("authentication", "AUTHENTICATION.md", "Authentication", unconditional=False)
PERMISSIONS = Topic("permissions", "PERMISSIONS.md", "Permissions", unconditional=False)
TESTING = Topic("testing", "TESTING.md", "Testing", unconditional=False)

ALL_TOPICS: tuple[Topic, ...] = (
    ARCHITECTURE,
    DEVELOPMENT,
    DATABASE,
    API,
    AUTHENTICATION,
    PERMISSIONS,
    TESTING,
)

TOPIC_NAMES: tuple[str, ...] = tuple(topic.name for topic in ALL_TOPICS)

_BY_NAME = {topic.name: topic for topic in ALL_TOPICS}


def topic_by_name(name: str) -> Topic:
    """Return a topic by name, raising KeyError for unknown names."""
    return _BY_NAME[name]


def ordered(names: set[str] | frozenset[str]) -> tuple[str, ...]:
    """Return topic names in catalogue order."""
    return tuple(name for name in TOPIC_NAMES if name in names)
