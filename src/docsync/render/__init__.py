"""Documentation rendering package."""

from .documents import render_topic, run_command, top_level_layout
from .quickref import render_quick_reference
from .writer import (
    BEGIN_MARKER,
    END_MARKER,
    merge_generated,
    update_document,
    wrap_generated,
    write_if_changed,
)

__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "merge_generated",
    "render_quick_reference",
    "render_topic",
    "run_command",
    "top_level_layout",
    "update_document",
    "wrap_generated",
    "write_if_changed",
]
