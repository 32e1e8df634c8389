"""
Layered configuration for the diary.

Three layers are merged, later ones winning key by key:

    1. built-in defaults (rooted at the data directory)
    2. a YAML or JSON config file, if it exists
    3. environment variables ``MEMOGALAXY_<SECTION>__<KEY>``

Usage:
    config = Config(config_file="~/.memogalaxy/config.yaml")

    config.get("paths.entries_dir")      # where diary records live
    config.get("logging.level")          # dot-notation access
    config.validated().display           # typed, validated view

Environment values are read as YAML scalars, so
``MEMOGALAXY_DISPLAY__IMAGE_BEFORE_TEXT=false`` yields ``False``.
"""

import json
import os
from typing import Any

import yaml

from memogalaxy.core.exceptions import ConfigurationError

_DEFAULT_ENV_PREFIX = "MEMOGALAXY_"
_DEFAULT_DATA_DIR = os.path.join("~", ".memogalaxy-data")

# Env vars under the prefix that belong to the CLI, not to the config tree.
_RESERVED_ENV_KEYS = frozenset({"config", "data_dir"})


# Path settings that default to a sub-directory of the final data_dir.
_DERIVED_PATHS = {"entries_dir": "entries", "backup_dir": "backups", "log_dir": "logs"}


def _default_tree(data_dir: str) -> dict[str, Any]:
    return {
        "paths": {"data_dir": data_dir, **dict.fromkeys(_DERIVED_PATHS)},
        "logging": {"level": "WARNING", "file": None},
        "display": {"date_format": "%Y-%m-%d %H:%M", "image_before_text": True},
    }


def _merge(target: dict, overrides: dict) -> None:
    """Fold *overrides* into *target*; nested mappings merge, everything else replaces."""
    for key, value in overrides.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _merge(current, value)
        else:
            target[key] = value


def _env_scalar(raw: str) -> Any:
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return raw if isinstance(value, dict | list) else value


def read_config_file(path: str) -> dict[str, Any]:
    """Parse a ``.yaml``/``.yml``/``.json`` file into a mapping.

    Other extensions yield an empty mapping.

    Raises:
        ConfigurationError: If the file can't be parsed or isn't a mapping.
    """
    suffix = os.path.splitext(path)[1].lower()
    if suffix not in (".yaml", ".yml", ".json"):
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


class Config:
    """
    Merged view over defaults, a config file and the environment.

    ``sources`` lists what was applied on top of the defaults, in order
    (the file path and/or ``"env"``).
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        data_dir: str | None = None,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: YAML or JSON file; silently skipped when absent.
            env_prefix: Prefix of override variables. Empty disables them.
            data_dir: Root for the default paths. Defaults to ~/.memogalaxy-data.
            defaults: Extra defaults merged over the built-in ones.
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self.sources: list[str] = []

        self.config_data = _default_tree(os.path.expanduser(data_dir or _DEFAULT_DATA_DIR))
        if defaults:
            _merge(self.config_data, defaults)
        if self.config_file and os.path.exists(self.config_file):
            _merge(self.config_data, read_config_file(self.config_file))
            self.sources.append(self.config_file)
        env = self._env_overrides()
        if env:
            _merge(self.config_data, env)
            self.sources.append("env")
        self._derive_paths()

    def _derive_paths(self) -> None:
        """Fill path settings left unset by every layer from the merged ``data_dir``."""
        paths = self.config_data.setdefault("paths", {})
        if not isinstance(paths, dict):
            return  # left for validated() to reject
        data_dir = os.path.expanduser(str(paths.get("data_dir") or _DEFAULT_DATA_DIR))
        paths["data_dir"] = data_dir
        for key, subdir in _DERIVED_PATHS.items():
            if not paths.get(key):
                paths[key] = os.path.join(data_dir, subdir)

    def _env_overrides(self) -> dict[str, Any]:
        if not self.env_prefix:
            return {}
        tree: dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(self.env_prefix):
                continue
            path = name[len(self.env_prefix) :].lower()
            if not path or path in _RESERVED_ENV_KEYS:
                continue
            *parents, leaf = path.split("__")
            node = tree
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = _env_scalar(raw)
        return tree

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Look up a dotted path such as ``"display.date_format"``.

        Returns *default* when any segment is missing.
        """
        node: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key_path: str, value: Any) -> None:
        """Assign a dotted path, creating (or replacing non-mapping) parents."""
        *parents, leaf = key_path.split(".")
        node = self.config_data
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[leaf] = value

    def get_path(self, key_path: str, default: str | None = None) -> str | None:
        """``get`` for path settings, with ``~`` expanded."""
        value = self.get(key_path, default)
        return os.path.expanduser(str(value)) if value is not None else None

    def get_data_dir(self) -> str:
        return self.get_path("paths.data_dir", _DEFAULT_DATA_DIR)

    def get_entries_dir(self) -> str:
        """Directory holding one JSON record per diary entry."""
        return self.get_path("paths.entries_dir", os.path.join(self.get_data_dir(), "entries"))

    def get_backup_dir(self) -> str:
        return self.get_path("paths.backup_dir", os.path.join(self.get_data_dir(), "backups"))

    def ensure_directories(self) -> None:
        """Create every directory listed under ``paths``."""
        for value in self.get("paths", {}).values():
            if isinstance(value, str):
                os.makedirs(os.path.expanduser(value), exist_ok=True)

    def validated(self):
        """Return a typed ``MemoGalaxyConfig`` built from the merged data.

        Raises:
            ConfigurationError: If the merged config fails schema validation.
        """
        from pydantic import ValidationError

        from memogalaxy.core.config_schema import MemoGalaxyConfig

        try:
            return MemoGalaxyConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


_config_instance: Config | None = None


def get_config(
    config_file: str | None = None,
    env_prefix: str = _DEFAULT_ENV_PREFIX,
    data_dir: str | None = None,
) -> Config:
    """Shared Config, built from the arguments of the first call."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix, data_dir=data_dir)
    return _config_instance


def reset_config() -> None:
    """Forget the shared Config (tests use this between cases)."""
    global _config_instance
    _config_instance = None
