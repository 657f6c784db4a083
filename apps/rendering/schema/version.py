# apps/rendering/schema/version.py
from __future__ import annotations
from datetime import datetime, timezone as dt_timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union
import logging

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.rendering.errors import InvalidSchemaVersion

log = logging.getLogger("rendering.schema.version")

"""
L'instance de rendu est figée sur une version de schéma: le code des templates
reçoit toujours les données dans le schéma qu'il attendait quand il a été testé.
Le marqueur vient de RENDERING_SCHEMA_VERSION, sinon du fichier .builddate écrit
au build, sinon de la dernière migration enregistrée.
"""

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)

VersionLike = Union[datetime, str]


def parse_version(value: VersionLike) -> datetime:
    """datetime ou chaîne ISO-8601 → datetime aware (UTC si naïf)."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = parse_datetime(raw)
        if dt is None:
            raise InvalidSchemaVersion(f"Invalid schema version: {value!r}")
    else:
        raise InvalidSchemaVersion(f"Invalid schema version: {value!r}")
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, dt_timezone.utc)
    return dt


def _read_builddate(path_str: str) -> Optional[datetime]:
    path = Path(path_str)
    if not path_str or not path.is_file():
        return None
    raw = path.read_text(encoding="ascii").strip()
    return parse_version(raw) if raw else None


@lru_cache(maxsize=1)
def _resolve(configured: Optional[str], builddate_file: str, latest_migration: Optional[datetime]) -> datetime:
    if configured:
        return parse_version(configured)
    from_file = _read_builddate(builddate_file)
    if from_file is not None:
        return from_file
    if latest_migration is not None:
        log.info("No schema version marker, using latest migration date %s", latest_migration.isoformat())
        return latest_migration
    return EPOCH


def schema_version(latest_migration: Optional[datetime] = None) -> datetime:
    """Lu une fois au démarrage (mis en cache pour la durée du processus)."""
    return _resolve(
        getattr(settings, "RENDERING_SCHEMA_VERSION", None),
        str(getattr(settings, "RENDERING_BUILDDATE_FILE", "") or ""),
        latest_migration,
    )


def resource_version(version: datetime) -> str:
    """Cache-buster des URLs de ressources (ms depuis epoch)."""
    return str(round(version.timestamp() * 1000))


def clear_cache() -> None:
    _resolve.cache_clear()
