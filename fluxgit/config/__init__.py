"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from fluxgit import FEATURES_ROOT

ENV_FEATURES_ROOT = "FLUXGIT_FEATURES_ROOT"
ENV_HISTORY_LIMIT = "FLUXGIT_HISTORY_LIMIT"


def normalize_root(root: str) -> str:
    """Feature roots are concatenated with target segments, so they end in '/'."""
    root = root.strip().replace('\\', '/')
    return root if root.endswith('/') else f"{root}/"


@dataclass
class Config:
    """User configuration with sensible defaults."""
    features_root: str = FEATURES_ROOT
    history_limit: int = 10
    max_file_display: int = 20  # Max files listed before collapsing

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if not isinstance(self.features_root, str) or not self.features_root.strip():
            warnings.append(f"Invalid features_root '{self.features_root}', using '{defaults.features_root}'")
            self.features_root = defaults.features_root
        else:
            self.features_root = normalize_root(self.features_root)

        if isinstance(self.history_limit, bool) or not isinstance(self.history_limit, int) or self.history_limit <= 0:
            warnings.append(f"Invalid history_limit '{self.history_limit}', using {defaults.history_limit}")
            self.history_limit = defaults.history_limit

        if isinstance(self.max_file_display, bool) or not isinstance(self.max_file_display, int) or self.max_file_display <= 0:
            warnings.append(f"Invalid max_file_display '{self.max_file_display}', using {defaults.max_file_display}")
            self.max_file_display = defaults.max_file_display

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config

    def apply_env(self, environ=None) -> 'Config':
        """Apply FLUXGIT_* environment overrides in place."""
        environ = os.environ if environ is None else environ
        root = environ.get(ENV_FEATURES_ROOT)
        if root and root.strip():
            self.features_root = normalize_root(root)
        limit = environ.get(ENV_HISTORY_LIMIT)
        if limit:
            if limit.isdigit() and int(limit) > 0:
                self.history_limit = int(limit)
            else:
                print(f"Config warning: Invalid {ENV_HISTORY_LIMIT} '{limit}', ignoring", file=sys.stderr)
        return self


class ConfigManager:
    """Manages loading and saving configuration.

    Lookup order:
    1. .fluxgitrc in current directory
    2. .fluxgitrc in home directory
    3. Defaults
    """

    CONFIG_FILENAME = ".fluxgitrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        local_path = Path.cwd() / self.CONFIG_FILENAME
        if local_path.exists():
            self._config = self._load_from_file(local_path)
            self._config_path = local_path
            return self._config

        home_path = Path.home() / self.CONFIG_FILENAME
        if home_path.exists():
            self._config = self._load_from_file(home_path)
            self._config_path = home_path
            return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "save_config",
    "get_config_path",
    "normalize_root",
    "ENV_FEATURES_ROOT",
    "ENV_HISTORY_LIMIT",
]
