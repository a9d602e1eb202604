import os
from pathlib import Path
from typing import Optional

import yaml

from prr_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "token": None,  # None = fall back to GITHUB_TOKEN / gh CLI
    "workdir": None,  # None = $XDG_DATA_HOME/prr
    "url": None,  # None = public GitHub API; set for GitHub Enterprise
    "editor": None,  # None = $EDITOR
    "repository": None,  # "owner/repo" from a local config; enables bare PR numbers
}

GITHUB_BASE_URL = "https://api.github.com"
LOCAL_CONFIG_FILE_NAME = ".prr.yml"

_GLOBAL_KEYS = ("token", "workdir", "url", "editor")
_LOCAL_KEYS = ("repository", "workdir")


def default_config_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / "prr" / "config.yml"


def default_workdir() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(data_home) / "prr"


def find_project_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest .prr.yml in ``start`` or any of its parents."""
    path = (start or Path.cwd()).resolve()
    for directory in (path, *path.parents):
        candidate = directory / LOCAL_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _read_section(path: Path, section: str, keys: tuple) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    values = data.get(section) or {}
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{section}' in {path} must be a mapping")
    return {key: values[key] for key in keys if values.get(key) is not None}


def load_config(config_path: Optional[str] = None, local_config_path: Optional[str] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. The ``prr`` section of the global config file, if it exists
      3. The ``local`` section of the project's .prr.yml
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else default_config_path()
    if path.exists():
        config.update(_read_section(path, "prr", _GLOBAL_KEYS))

    if local_config_path:
        config.update(_read_section(Path(local_config_path), "local", _LOCAL_KEYS))

    return config


def resolve_workdir(config: dict) -> Path:
    """Directory review files are kept in."""
    workdir = config.get("workdir")
    if workdir:
        return Path(workdir).expanduser()
    return default_workdir()
