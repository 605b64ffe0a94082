"""Git Operations Package"""

from fluxgit.git.repository import GitRepository, GitError, HistoryEntry, SyncResult

__all__ = [
    "GitRepository",
    "GitError",
    "HistoryEntry",
    "SyncResult",
]
