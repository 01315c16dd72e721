"""
Configuration — loads settings from .diffreview.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "undo_history_limit": 100,
    "background_line_threshold": 2000,
    "diff_workers": 1,
    "normalize_line_endings": True,
    "auto_finalize": False,
    "log_dir": ".diffreview/logs",
    "metrics_dir": ".diffreview",
    "checkpoint_file": ".diffreview_session.json",
}

# Config file search locations
_CONFIG_FILENAMES = [".diffreview.yaml", ".diffreview.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Engine and CLI configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. ``DIFFREVIEW_*`` environment variables
    3. .diffreview.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[yaml_key]

        def _get_bool(env_key: str, yaml_key: str) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[yaml_key]

        self.UNDO_HISTORY_LIMIT = _get("DIFFREVIEW_UNDO_HISTORY_LIMIT",
                                       "undo_history_limit", cast=int)
        self.BACKGROUND_LINE_THRESHOLD = _get(
            "DIFFREVIEW_BACKGROUND_LINE_THRESHOLD",
            "background_line_threshold", cast=int)
        self.DIFF_WORKERS = _get("DIFFREVIEW_DIFF_WORKERS", "diff_workers",
                                 cast=int)
        self.NORMALIZE_LINE_ENDINGS = _get_bool(
            "DIFFREVIEW_NORMALIZE_LINE_ENDINGS", "normalize_line_endings")

        # Commit automatically once the last pending hunk is resolved
        self.AUTO_FINALIZE = _get_bool("DIFFREVIEW_AUTO_FINALIZE",
                                       "auto_finalize")

        self.LOG_DIR = _get("DIFFREVIEW_LOG_DIR", "log_dir")
        self.METRICS_DIR = _get("DIFFREVIEW_METRICS_DIR", "metrics_dir")
        self.CHECKPOINT_FILE = _get("DIFFREVIEW_CHECKPOINT_FILE",
                                    "checkpoint_file")

        if self.UNDO_HISTORY_LIMIT < 1:
            self.UNDO_HISTORY_LIMIT = _DEFAULTS["undo_history_limit"]

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
