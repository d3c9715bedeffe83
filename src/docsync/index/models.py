"""Typed models for project index state."""

from __future__ import annotations

from dataclasses import dataclass

OUTCOME_NOT_NEEDED = "not_needed"
OUTCOME_REFRESHED = "refreshed"
OUTCOME_CREATED = "created"
OUTCOME_SKIPPED_BY_OPERATOR = "skipped_by_operator"
OUTCOME_UNAVAILABLE = "unavailable"
OUTCOME_FAILED = "failed"

DEGRADED_OUTCOMES = frozenset({OUTCOME_UNAVAILABLE, OUTCOME_FAILED})


@dataclass(slots=True, frozen=True)
class ProjectIndexStatus:
    """Presence and freshness facts about the index artifact."""

    present: bool
    path: str
    mtime_ns: int | None


@dataclass(slots=True, frozen=True)
class IndexStepResult:
    """Outcome of the optional index create/refresh step."""

    outcome: str
    index_present: bool
    detail: str | None = None

    @property
    def degraded(self) -> bool:
        return self.outcome in DEGRADED_OUTCOMES
