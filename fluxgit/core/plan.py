"""Commit planning: resolve -> select -> synthesize in one call."""

from dataclasses import dataclass, field

from fluxgit import FEATURES_ROOT
from fluxgit.core.changes import ChangeRecord
from fluxgit.core.message import synthesize
from fluxgit.core.selector import select_paths
from fluxgit.core.target import ResolvedTarget, resolve


@dataclass
class CommitPlan:
    """What a commit for one target would contain."""
    target: ResolvedTarget
    paths: list[str] = field(default_factory=list)
    message: str = ""
    custom_message: bool = False

    @property
    def is_empty(self) -> bool:
        return len(self.paths) == 0


def plan_commit(
    raw_target: str | None,
    changes: list[ChangeRecord],
    message: str | None = None,
    features_root: str = FEATURES_ROOT,
) -> CommitPlan:
    """Work out paths and message for a commit.

    An explicit `message` bypasses synthesis. An empty selection is not an
    error; the plan simply has no paths and no message.
    """
    target = resolve(raw_target)
    paths = select_paths(target, changes, features_root)
    if not paths:
        return CommitPlan(target=target)

    if message:
        return CommitPlan(target=target, paths=paths, message=message, custom_message=True)

    return CommitPlan(target=target, paths=paths, message=synthesize(paths, changes, target))
