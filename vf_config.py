#!/usr/bin/env python3
"""Shared configuration loader for VariantForge services."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"
CONFIG_PATH_ENV = "VARIANT_FORGE_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "generation": {
        "frame_count": 20,
        "frame_delay_ms": 60,
        "output_cap": 480,
        "palette_colors": 128,
    },
    "source": {
        "timeout_seconds": 30.0,
        "max_bytes": 25 * 1024 * 1024,
    },
    "storage": {
        "api_url": "https://api.pinata.cloud/pinning/pinFileToIPFS",
        "gateway_url": "https://gateway.pinata.cloud",
        "jwt": "",
        "group_id": None,
        "timeout_seconds": 120.0,
        "source_tag": "variant-generator",
        "cid_version": 1,
    },
    "api": {
        "host": "127.0.0.1",
        "port": 8000,
    },
}

# Environment variable -> (section, key). First match wins per target.
ENV_OVERRIDES: tuple[tuple[str, tuple[str, str]], ...] = (
    ("PINATA_JWT", ("storage", "jwt")),
    ("PINATA_GATEWAY", ("storage", "gateway_url")),
    ("NEXT_PUBLIC_PINATA_GATEWAY", ("storage", "gateway_url")),
    ("PINATA_VARIANT_GROUP_ID", ("storage", "group_id")),
)


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(cfg: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    applied: set[tuple[str, str]] = set()
    for env_name, target in ENV_OVERRIDES:
        value = environ.get(env_name)
        if not value or target in applied:
            continue
        section, key = target
        cfg.setdefault(section, {})[key] = value
        applied.add(target)
    return cfg


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    """
    Build the effective configuration.

    Order of precedence (lowest first): ``DEFAULT_CONFIG``, the YAML file
    (explicit path, then ``$VARIANT_FORGE_CONFIG``, then ``config.yaml`` next
    to this module), then the Pinata environment variables.
    """
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = environ.get(CONFIG_PATH_ENV) or None

    cfg_path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH
    cfg = deepcopy(DEFAULT_CONFIG)

    if cfg_path.exists():
        user_cfg = yaml.safe_load(cfg_path.read_text()) or {}
        cfg = _deep_merge(cfg, user_cfg)

    return _apply_env_overrides(cfg, environ)
