"""Version-control change detection package."""

from .git import GitClient, GitCommandError
from .models import ChangeSet

__all__ = ["ChangeSet", "GitClient", "GitCommandError"]
