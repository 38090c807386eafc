from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

CONFIG_PATH_ENV = "INVIDIARR_CONFIG"

_SECTION_KEYS: set[str] = {"invidious", "http", "logging", "cipher", "streams"}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge `override` into `base` and return `base`.

    Rules:
    - dict + dict => deep merge
    - otherwise => override wins
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Normalize a layer (defaults/YAML/ENV/overrides) into the canonical *sectioned* shape.

    Canonical top-level keys:
    - app_name, environment
    - invidious.instance, invidious.timeout_seconds
    - http.user_agent
    - logging.level, logging.format
    - cipher.*, streams.*
    """
    out: dict[str, Any] = {}

    for section in _SECTION_KEYS:
        if section in data and isinstance(data[section], Mapping):
            out[section] = dict(data[section])

    if "app_name" in data:
        out["app_name"] = data["app_name"]
    if "environment" in data:
        out["environment"] = data["environment"]

    flat_map: dict[str, tuple[str, str]] = {
        "invidious_instance": ("invidious", "instance"),
        "invidious_timeout_seconds": ("invidious", "timeout_seconds"),
        "http_user_agent": ("http", "user_agent"),
        "log_level": ("logging", "level"),
        "log_format": ("logging", "format"),
        "cipher_watch_url": ("cipher", "watch_url"),
        "cipher_player_base_url": ("cipher", "player_base_url"),
        "cipher_param": ("cipher", "param"),
        "streams_probe_timeout_seconds": ("streams", "probe_timeout_seconds"),
        "streams_allow_unvalidated_fallback": ("streams", "allow_unvalidated_fallback"),
        "streams_related_limit": ("streams", "related_limit"),
    }

    for flat_key, (section, section_key) in flat_map.items():
        if flat_key in data:
            out.setdefault(section, {})
            out[section][section_key] = data[flat_key]

    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    raw = config_path.read_text(encoding="utf-8")
    parsed = yaml.safe_load(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with strict precedence:
    defaults < YAML file < env vars < overrides

    Without *config_path*, the YAML file named by ``INVIDIARR_CONFIG`` (if
    set) is used.  The playback host embeds the plugin, so this is how an
    operator points it at a file without code changes.

    This function MUST NOT create files or directories (no filesystem side-effects).
    """
    overrides = overrides or {}

    # Load .env first so it participates as "env vars" layer.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    if config_path is None and os.environ.get(CONFIG_PATH_ENV):
        config_path = Path(os.environ[CONFIG_PATH_ENV])

    base = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        _deep_merge(base, _normalize_layer(_read_yaml_config(config_path)))

    env_layer = _normalize_layer(EnvOverrides().to_update_dict())
    _deep_merge(base, env_layer)

    _deep_merge(base, _normalize_layer(overrides))

    return AppConfig.model_validate(base)
