"""Configuration loader and validator for SpellSwitch.

Provides ``load_config(path)`` which reads a JSON config (with
comment and trailing-comma tolerant sanitizer) and merges user
overrides from ``~/.config/spellswitch/config.json``.

Also provides ``validate_config(conf)`` which normalizes and
validates config keys, raising ``ValueError`` on invalid values.
"""

from __future__ import annotations

import json
import logging
import os
import re

from spellswitch.intelligence.dictionary_store import DEFAULT_CACHE_DIR, DEFAULT_URL_TEMPLATE
from spellswitch.platform.kv_store import DEFAULT_PATH as DEFAULT_STORAGE_PATH
from spellswitch.platform.kv_store import save_json

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = os.path.expanduser('~/.config/spellswitch/config.json')

# Single source of truth for default configuration
DEFAULT_CONFIG: dict = {
    'debug': False,
    'debounce_delay': 0.75,
    'misspelling_threshold': 2,
    'min_sample_length': 8,
    'cache_size': 512,
    'cache_ttl': 8.0,
    'dictionary_dir': DEFAULT_CACHE_DIR,
    'dictionary_url': DEFAULT_URL_TEMPLATE,
    'download_timeout': 30.0,
    'storage_path': DEFAULT_STORAGE_PATH,
}


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _sanitize_json_text(s: str) -> str:
    """Remove ``#``/``//`` comments and trailing commas from JSON-like text."""
    # Hash-style line comments
    s = re.sub(r"^[ \t]*#.*$", "", s, flags=re.MULTILINE)
    # C++-style line comments (not the "//" inside URLs)
    s = re.sub(r"^[ \t]*//.*$", "", s, flags=re.MULTILINE)
    # Trailing commas before } or ]
    s = re.sub(r",[ \t\r\n]+(\}|\])", r"\1", s)
    return s


def _float_in_range(conf: dict, key: str, low: float, high: float) -> float:
    raw = conf.get(key, DEFAULT_CONFIG[key])
    if isinstance(raw, bool):
        raise ValueError(f"Invalid '{key}': {raw}")
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid '{key}': {raw}")
    if not (low <= val <= high):
        raise ValueError(f"Invalid '{key}': {raw} (must be between {low} and {high})")
    return val


def _int_at_least(conf: dict, key: str, low: int) -> int:
    raw = conf.get(key, DEFAULT_CONFIG[key])
    if isinstance(raw, bool):
        raise ValueError(f"Invalid '{key}': {raw}")
    try:
        val = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid '{key}': {raw}")
    if val < low:
        raise ValueError(f"Invalid '{key}': must be >= {low}")
    return val


def _non_empty_str(conf: dict, key: str) -> str:
    raw = conf.get(key, DEFAULT_CONFIG[key])
    if not isinstance(raw, str) or not raw:
        raise ValueError(f"Invalid '{key}': must be a non-empty string")
    return raw


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def validate_config(conf: dict | None) -> dict:
    """Validate and normalize configuration dictionary.

    Returns a normalized dict with all expected keys.
    Raises ``ValueError`` on invalid values.
    """
    if conf is None:
        conf = {}

    out = dict(DEFAULT_CONFIG)

    dbg = conf.get('debug', DEFAULT_CONFIG['debug'])
    if not isinstance(dbg, bool):
        raise ValueError("Invalid 'debug' flag: must be boolean")
    out['debug'] = dbg

    out['debounce_delay'] = _float_in_range(conf, 'debounce_delay', 0.0, 60.0)
    out['misspelling_threshold'] = _int_at_least(conf, 'misspelling_threshold', 1)
    out['min_sample_length'] = _int_at_least(conf, 'min_sample_length', 0)
    out['cache_size'] = _int_at_least(conf, 'cache_size', 1)
    out['cache_ttl'] = _float_in_range(conf, 'cache_ttl', 0.0, 3600.0)
    out['download_timeout'] = _float_in_range(conf, 'download_timeout', 0.1, 600.0)

    out['dictionary_dir'] = os.path.expanduser(_non_empty_str(conf, 'dictionary_dir'))
    out['storage_path'] = os.path.expanduser(_non_empty_str(conf, 'storage_path'))

    url = _non_empty_str(conf, 'dictionary_url')
    if '{code}' not in url and '{base}' not in url:
        raise ValueError("Invalid 'dictionary_url': must contain {code} or {base}")
    out['dictionary_url'] = url

    return out


def _read_and_merge(path: str, target_config: dict, debug: bool = False) -> bool:
    """Read a JSON file, validate, and merge into *target_config*.

    Returns True on success, False on any error.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except OSError as exc:
        if debug:
            logger.warning("Can't read config %s: %s", path, exc)
        return False

    try:
        cfg = json.loads(raw)
    except json.JSONDecodeError:
        try:
            cfg = json.loads(_sanitize_json_text(raw))
        except json.JSONDecodeError as exc:
            if debug:
                logger.warning("JSON parse error in %s: %s", path, exc)
            return False

    if not isinstance(cfg, dict):
        if debug:
            logger.warning("Invalid config %s: top-level value must be an object", path)
        return False

    try:
        validated = validate_config(cfg)
    except ValueError as verr:
        if debug:
            logger.warning("Invalid config %s: %s", path, verr)
        return False

    # Only override keys explicitly present in source
    for k in cfg:
        if k in validated:
            target_config[k] = validated[k]
    return True


# ------------------------------------------------------------------
# Top-level loader
# ------------------------------------------------------------------

def load_config(config_path: str | None = None, debug: bool = False) -> dict:
    """Load and merge configuration.

    If *config_path* is given, uses only that file (returns defaults if
    the file does not exist).  Otherwise falls back to
    ``~/.config/spellswitch/config.json``.

    Returns the effective configuration dict (always has all default keys).
    """
    effective = dict(DEFAULT_CONFIG)
    path = config_path if config_path is not None else USER_CONFIG_PATH
    if os.path.exists(path):
        _read_and_merge(path, effective, debug=debug)
    return effective


# ------------------------------------------------------------------
# ConfigManager
# ------------------------------------------------------------------

class ConfigManager:
    """Centralized configuration management with load/save/validate."""

    def __init__(self, config_path: str | None = None, debug: bool = False):
        self._config_path = config_path or USER_CONFIG_PATH
        self._config: dict = load_config(self._config_path, debug=debug)

    def save(self, target_path: str | None = None) -> bool:
        """Atomically save configuration to file. Returns True on success."""
        save_path = target_path or self._config_path
        try:
            save_json(save_path, self.get_all())
            return True
        except OSError as exc:
            logger.warning("Can't save config to %s: %s", save_path, exc)
            return False

    def get(self, key: str, default=None):
        return self._config.get(key, default)

    def set(self, key: str, value) -> None:
        self._config[key] = value

    def get_all(self) -> dict:
        """Return all configuration (excluding internal keys)."""
        return {k: v for k, v in self._config.items() if not k.startswith('_')}

    def reset_to_defaults(self) -> None:
        self._config = dict(DEFAULT_CONFIG)

    def validate(self) -> bool:
        try:
            validate_config(self._config)
            return True
        except ValueError:
            return False

    @property
    def config_path(self) -> str:
        return self._config_path
