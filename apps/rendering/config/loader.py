# apps/rendering/config/loader.py
from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from django.conf import settings

from .schema import RegistryConfig


def _config_path() -> Path:
    return Path(getattr(settings, "RENDERING_CONFIG_FILE", "") or "")


@lru_cache(maxsize=8)
def _load(path_str: str) -> Dict[str, Any]:
    path = Path(path_str)
    if not path_str or not path.is_file():
        return RegistryConfig().model_dump()
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration rendering invalide: dict attendu (reçu {type(data)}).")
    return RegistryConfig.model_validate(data).model_dump()


def get_registry_spec() -> Dict[str, Any]:
    """{"templates": [dotted...], "providers": [dotted...]} depuis RENDERING_CONFIG_FILE."""
    return _load(str(_config_path()))


def clear_cache() -> None:
    _load.cache_clear()
