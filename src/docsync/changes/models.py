"""Typed models for change detection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ChangeSet:
    """Paths changed since the documentation watermark, partitioned by origin."""

    watermark: str
    committed: tuple[str, ...]
    staged: tuple[str, ...]
    unstaged: tuple[str, ...]
    untracked: tuple[str, ...] = ()

    @property
    def paths(self) -> tuple[str, ...]:
        """Return the sorted union of all partitions."""
        merged = set(self.committed) | set(self.staged) | set(self.unstaged) | set(self.untracked)
        return tuple(sorted(merged))

    def without(self, excluded: tuple[str, ...]) -> ChangeSet:
        """Drop paths equal to, or located under, any excluded prefix."""

        def keep(path: str) -> bool:
            for prefix in excluded:
                if path == prefix or path.startswith(f"{prefix}/"):
                    return False
            return True

        return ChangeSet(
            watermark=self.watermark,
            committed=tuple(path for path in self.committed if keep(path)),
            staged=tuple(path for path in self.staged if keep(path)),
            unstaged=tuple(path for path in self.unstaged if keep(path)),
            untracked=tuple(path for path in self.untracked if keep(path)),
        )
