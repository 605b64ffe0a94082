"""Change Selector - pick the changed paths relevant to a target."""

from fluxgit import FEATURES_ROOT
from fluxgit.core.changes import ChangeRecord
from fluxgit.core.target import (
    AllTarget, EndpointTarget, FeatureTarget, FileTarget, ResolvedTarget,
)


def _matches_file(path: str, target: FileTarget, features_root: str) -> bool:
    if path == target.full_path(features_root):
        return True

    if target.feature and target.endpoint:
        # Legacy double condition: prefix match AND the endpoint token reappears
        endpoint_path = f"{features_root}{target.feature}/{target.endpoint}"
        return path.startswith(endpoint_path) and target.endpoint in path

    return target.file_name.split('.')[0] in path


def is_relevant(path: str, target: ResolvedTarget, features_root: str = FEATURES_ROOT) -> bool:
    """Decide whether a single path belongs to the target.

    Prefix matches carry no segment-boundary check: feature `cat`
    also matches `src/features/catalog/...`.
    """
    if isinstance(target, FeatureTarget):
        return path.startswith(f"{features_root}{target.name}")
    if isinstance(target, EndpointTarget):
        return path.startswith(f"{features_root}{target.feature}/{target.endpoint}")
    if isinstance(target, FileTarget):
        return _matches_file(path, target, features_root)
    if isinstance(target, AllTarget):
        return True
    raise TypeError(f"Unknown target type: {type(target).__name__}")


def select_paths(
    target: ResolvedTarget,
    changes: list[ChangeRecord],
    features_root: str = FEATURES_ROOT,
) -> list[str]:
    """Return the paths of `changes` relevant to `target`, in input order."""
    return [c.path for c in changes if is_relevant(c.path, target, features_root)]
