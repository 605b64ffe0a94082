"""Git Repository - the commands flux-git runs against git."""

import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone

from fluxgit.core.changes import ChangeRecord, parse_status

CHECKPOINT_PREFIX = "chore: emergency checkpoint"
SYNC_STASH_MESSAGE = "auto-stash before sync"


class GitError(Exception):
    """Raised when git operations fail."""
    pass


@dataclass
class HistoryEntry:
    """One line of 'git log --oneline'."""
    hash: str
    subject: str


@dataclass
class SyncResult:
    stashed: bool = False
    conflicts: bool = False


class GitRepository:
    """Runs git in the current working directory."""

    def __init__(self):
        self._verify_git_available()
        self._verify_in_repo()
        self._toplevel = self._run_git('rev-parse', '--show-toplevel').strip()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr.strip()}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not a git repository. Run: git init")

    def _run_git_at_top(self, *args: str) -> str:
        """Run git from the repository root, where status paths are anchored."""
        if self._toplevel:
            return self._run_git('-C', self._toplevel, *args)
        return self._run_git(*args)

    def status(self) -> list[ChangeRecord]:
        """Working tree changes, one record per path."""
        # Leading spaces are status characters, so never strip the front
        return parse_status(self._run_git('status', '--porcelain').rstrip('\n'))

    def is_dirty(self) -> bool:
        return bool(self._run_git('status', '--porcelain').strip())

    def commit_paths(self, paths: list[str], message: str) -> None:
        """Stage and commit exactly `paths` as one commit.

        If the commit fails the paths are unstaged again before GitError
        propagates, so the index never holds a half-finished commit.
        """
        if not paths:
            raise GitError("Nothing to commit")
        self._run_git_at_top('add', '-A', '--', *paths)
        try:
            self._run_git_at_top('commit', '-m', message, '--', *paths)
        except GitError:
            try:
                self._run_git_at_top('reset', '-q', '--', *paths)
            except GitError:
                pass  # original commit error is the one worth reporting
            raise

    def checkpoint(self, now: datetime | None = None) -> str:
        """Commit everything as an emergency checkpoint. Returns the message."""
        now = now or datetime.now(timezone.utc)
        message = f"{CHECKPOINT_PREFIX} {now.strftime('%Y-%m-%dT%H-%M-%S')}"
        self._run_git('add', '-A')
        self._run_git('commit', '-m', message)
        return message

    def undo(self) -> str:
        """Soft-reset the last commit, keeping its changes staged."""
        try:
            last_commit = self._run_git('log', '-1', '--oneline').strip()
        except GitError:
            raise GitError("No commits to undo")
        self._run_git('reset', '--soft', 'HEAD~1')
        return last_commit

    def stash(self, message: str = SYNC_STASH_MESSAGE) -> None:
        self._run_git('stash', 'push', '-m', message)

    def stash_pop(self) -> None:
        self._run_git('stash', 'pop')

    def pull(self) -> None:
        self._run_git('pull')

    def sync(self) -> SyncResult:
        """Stash local changes, pull, restore. A failing restore means conflicts."""
        result = SyncResult(stashed=self.is_dirty())
        if result.stashed:
            self.stash()
        self.pull()
        if result.stashed:
            try:
                self.stash_pop()
            except GitError:
                result.conflicts = True
        return result

    def clean(self) -> None:
        """Discard all uncommitted changes, untracked files included."""
        self._run_git('reset', '--hard', 'HEAD')
        self._run_git('clean', '-fd')

    def history(self, pathspec: str | None = None, limit: int = 10) -> list[HistoryEntry]:
        """Recent commits, optionally limited to one path."""
        args = ['log', '--oneline', f'-{limit}']
        if pathspec:
            args += ['--', pathspec]
        output = self._run_git(*args)

        entries = []
        for line in output.strip().split('\n'):
            if not line.strip():
                continue
            commit_hash, _, subject = line.partition(' ')
            entries.append(HistoryEntry(hash=commit_hash, subject=subject))
        return entries
