"""Target resolution, change selection and message synthesis"""

from fluxgit.core.changes import ChangeRecord, RoleFlags, parse_status, parse_status_line
from fluxgit.core.message import (
    MODIFICATION_RULES, NEW_FILE_RULES, apply_rules, commit_scope, synthesize,
)
from fluxgit.core.plan import CommitPlan, plan_commit
from fluxgit.core.selector import is_relevant, select_paths
from fluxgit.core.target import (
    AllTarget, EndpointTarget, FeatureTarget, FileTarget, ResolvedTarget, resolve,
)

__all__ = [
    "ChangeRecord",
    "RoleFlags",
    "parse_status",
    "parse_status_line",
    "AllTarget",
    "FeatureTarget",
    "EndpointTarget",
    "FileTarget",
    "ResolvedTarget",
    "resolve",
    "is_relevant",
    "select_paths",
    "NEW_FILE_RULES",
    "MODIFICATION_RULES",
    "apply_rules",
    "commit_scope",
    "synthesize",
    "CommitPlan",
    "plan_commit",
]
