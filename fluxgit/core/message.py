"""Message Synthesizer - conventional commit message from classified paths.

Rules are evaluated top-down; the first matching predicate wins. Every
combination of inputs produces exactly one message.
"""

from typing import Callable

from fluxgit.core.changes import ChangeRecord, RoleFlags
from fluxgit.core.target import (
    EndpointTarget, FeatureTarget, FileTarget, ResolvedTarget,
)

Rule = tuple[Callable[[RoleFlags], bool], str, str]

# New files under a specific-file target. `{file_name}` is filled from the target.
NEW_FILE_RULES: list[Rule] = [
    (lambda f: f.has_contracts, 'feat', 'add contract specification'),
    (lambda f: f.has_tests, 'test', 'add test coverage'),
    (lambda f: f.has_logic, 'feat', 'add logic implementation'),
    (lambda f: True, 'feat', 'add {file_name}'),
]

# Pure modifications, any target.
MODIFICATION_RULES: list[Rule] = [
    (lambda f: f.has_tests and f.has_logic, 'fix', 'update implementation and tests'),
    (lambda f: f.has_tests, 'test', 'update test coverage'),
    (lambda f: f.has_contracts, 'feat', 'update contract specification'),
    (lambda f: f.has_logic, 'fix', 'update logic implementation'),
    (lambda f: f.has_schemas, 'docs', 'update specifications'),
    (lambda f: True, 'chore', 'update implementation'),
]


def apply_rules(rules: list[Rule], flags: RoleFlags) -> tuple[str, str]:
    """Return (commit_type, subject) of the first rule whose predicate holds."""
    for predicate, commit_type, subject in rules:
        if predicate(flags):
            return commit_type, subject
    raise ValueError("Rule table has no catch-all entry")


def commit_scope(target: ResolvedTarget | None) -> str:
    """Parenthesised scope for the target, or '' when there is none."""
    if isinstance(target, EndpointTarget):
        return f"({target.feature}/{target.endpoint})"
    if isinstance(target, FeatureTarget):
        return f"({target.name})"
    if isinstance(target, FileTarget) and target.feature:
        if target.endpoint:
            return f"({target.feature}/{target.endpoint})"
        return f"({target.feature})"
    return ''


def has_new_files(paths: list[str], changes: list[ChangeRecord]) -> bool:
    by_path = {c.path: c for c in changes}
    return any(p in by_path and by_path[p].is_new for p in paths)


def synthesize(
    paths: list[str],
    changes: list[ChangeRecord],
    target: ResolvedTarget | None,
) -> str:
    """Build the commit message for the selected paths."""
    flags = RoleFlags.from_paths(paths)
    scope = commit_scope(target)

    if has_new_files(paths, changes):
        if isinstance(target, FeatureTarget):
            return f"feat{scope}: implement {target.name} feature"
        if isinstance(target, EndpointTarget):
            return f"feat{scope}: implement {target.endpoint} endpoint"
        if isinstance(target, FileTarget):
            commit_type, subject = apply_rules(NEW_FILE_RULES, flags)
            return f"{commit_type}{scope}: {subject.format(file_name=target.file_name)}"
        return "feat: add new functionality"

    commit_type, subject = apply_rules(MODIFICATION_RULES, flags)
    return f"{commit_type}{scope}: {subject}"
