"""External project index package."""

from .models import (
    OUTCOME_CREATED,
    OUTCOME_FAILED,
    OUTCOME_NOT_NEEDED,
    OUTCOME_REFRESHED,
    OUTCOME_SKIPPED_BY_OPERATOR,
    OUTCOME_UNAVAILABLE,
    IndexStepResult,
    ProjectIndexStatus,
)
from .project_index import ConsentPrompt, IndexerError, ProjectIndex, decline, run_index_step

__all__ = [
    "ConsentPrompt",
    "IndexStepResult",
    "IndexerError",
    "OUTCOME_CREATED",
    "OUTCOME_FAILED",
    "OUTCOME_NOT_NEEDED",
    "OUTCOME_REFRESHED",
    "OUTCOME_SKIPPED_BY_OPERATOR",
    "OUTCOME_UNAVAILABLE",
    "ProjectIndex",
    "ProjectIndexStatus",
    "decline",
    "run_index_step",
]
