"""CLI Utility Functions"""

import re

from fluxgit.core import ChangeRecord
from fluxgit.output import ADDED, DELETED, MODIFIED, OTHER, dim, error, success, warning

OTHER_GROUP = 'other'


def change_marker(record: ChangeRecord) -> str:
    """Colored one-character marker for a change kind."""
    if record.is_new:
        return success(ADDED)
    if record.is_modified:
        return warning(MODIFIED)
    if record.is_deleted:
        return error(DELETED)
    return dim(OTHER)


def group_by_feature(changes: list[ChangeRecord], features_root: str) -> dict[str, list[ChangeRecord]]:
    """Group changes by the feature directory they live in, keeping first-seen order."""
    pattern = re.compile(rf'{re.escape(features_root)}([^/]+)')
    groups: dict[str, list[ChangeRecord]] = {}
    for record in changes:
        match = pattern.match(record.path)
        feature = match.group(1) if match else OTHER_GROUP
        groups.setdefault(feature, []).append(record)
    return groups


def collapse(items: list[str], max_shown: int) -> tuple[list[str], int]:
    """Return the items to show and how many were left out."""
    shown = items[:max_shown]
    return shown, len(items) - len(shown)


def confirm(question: str) -> bool:
    """Ask a yes/no question; anything but y/yes (or EOF) is no."""
    try:
        answer = input(f"{question} [y/N]: ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        return False
    return answer in ('y', 'yes')
