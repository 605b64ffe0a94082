"""Target Resolver - turn a short target string into a structured reference.

Grammar:
    ""                          -> AllTarget
    "weather"                   -> FeatureTarget
    "weather/main"              -> EndpointTarget
    "weather/main.contract.ts"  -> FileTarget
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class AllTarget:
    """Every changed path is relevant."""

    def describe(self) -> str:
        return "all changes"

    def pathspec(self, features_root: str) -> str | None:
        return None


@dataclass(frozen=True)
class FeatureTarget:
    name: str

    def describe(self) -> str:
        return f"feature {self.name}"

    def pathspec(self, features_root: str) -> str | None:
        return f"{features_root}{self.name}/"


@dataclass(frozen=True)
class EndpointTarget:
    feature: str
    endpoint: str

    def describe(self) -> str:
        return f"endpoint {self.feature}/{self.endpoint}"

    def pathspec(self, features_root: str) -> str | None:
        return f"{features_root}{self.feature}/{self.endpoint}/"


@dataclass(frozen=True)
class FileTarget:
    """A specific file. `feature` may span several path segments."""
    feature: str
    endpoint: str
    file_name: str

    def describe(self) -> str:
        return f"file {self.file_name}"

    def full_path(self, features_root: str) -> str:
        return f"{features_root}{self.feature}/{self.file_name}"

    def pathspec(self, features_root: str) -> str | None:
        return self.full_path(features_root)


ResolvedTarget = Union[AllTarget, FeatureTarget, EndpointTarget, FileTarget]


def resolve(raw: str | None) -> ResolvedTarget:
    """Resolve a raw target string. Total: every string maps to a variant."""
    if not raw:
        return AllTarget()

    if '/' in raw and '.' in raw:
        feature, _, file_name = raw.rpartition('/')
        endpoint = file_name.split('.', 1)[0]
        return FileTarget(feature=feature, endpoint=endpoint, file_name=file_name)

    if '/' in raw:
        # Segments past the second are ignored
        parts = raw.split('/')
        return EndpointTarget(feature=parts[0], endpoint=parts[1])

    return FeatureTarget(name=raw)
