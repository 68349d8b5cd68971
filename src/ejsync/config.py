"""
Configuration loading.

Layers, lowest to highest precedence:
    1. Model defaults
    2. ~/.config/ejsync/config.yaml (or $EJSYNC_CONFIG)
    3. EJSYNC_* environment variables
    4. Explicit overrides (CLI flags)

The result is a frozen EjsonConfig; nothing changes it mid-session.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from . import CONFIG_PATH
from .models import EjsonConfig

logger = logging.getLogger("ejsync.config")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(name: str, value: str) -> Optional[bool]:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    logger.warning("Ignoring %s=%r: not a boolean", name, value)
    return None


def read_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Read the YAML config file into a plain dict.

    Args:
        path: Config file location. Defaults to CONFIG_PATH.

    Returns:
        Parsed mapping, or an empty dict if the file is missing or unreadable.
    """
    config_file = Path(path or CONFIG_PATH).expanduser()
    if not config_file.exists():
        return {}
    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read %s: %s; using defaults", config_file, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is not a mapping", config_file)
        return {}
    return data


def env_overrides(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Collect EJSYNC_* overrides from the environment."""
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {}
    if env.get("EJSYNC_BINARY"):
        data["binary"] = env["EJSYNC_BINARY"]
    if env.get("EJSYNC_KEYDIR"):
        data["keydir"] = env["EJSYNC_KEYDIR"]
    if env.get("EJSYNC_ON_DECLINE"):
        data["on_decline"] = env["EJSYNC_ON_DECLINE"]
    if env.get("EJSYNC_AUTO_ENCRYPT"):
        flag = _env_bool("EJSYNC_AUTO_ENCRYPT", env["EJSYNC_AUTO_ENCRYPT"])
        if flag is not None:
            data["auto_encrypt"] = flag
    return data


def _apply_layer(base: dict[str, Any], layer: dict[str, Any], source: str) -> dict[str, Any]:
    """Lay one source over the already-valid base, dropping its invalid fields.

    A dropped field keeps whatever value the lower layers gave it.
    """
    layer = dict(layer)
    while True:
        merged = {**base, **layer}
        try:
            EjsonConfig(**merged)
            return merged
        except ValidationError as exc:
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]} & layer.keys()
            if not bad:
                raise
            logger.warning(
                "Ignoring invalid %s values for %s: %s",
                source, ", ".join(sorted(map(str, bad))), exc,
            )
            for field in bad:
                layer.pop(field)


def load_config(
    path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
    **overrides: Any,
) -> EjsonConfig:
    """Build the effective configuration for this session.

    Args:
        path: Config file location override.
        environ: Environment mapping (defaults to os.environ).
        **overrides: Highest-precedence values; None entries are ignored.

    Returns:
        EjsonConfig with every layer applied.
    """
    data: dict[str, Any] = {}
    data = _apply_layer(data, read_config_file(path), "config file")
    data = _apply_layer(data, env_overrides(environ), "environment")
    data = _apply_layer(data, {k: v for k, v in overrides.items() if v is not None}, "override")

    config = EjsonConfig(**data)

    if config.keydir is not None:
        config = config.model_copy(update={"keydir": config.keydir.expanduser()})

    logger.debug("Effective config: %s", config.model_dump())
    return config
