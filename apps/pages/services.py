# apps/pages/services.py
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional
import logging

from apps.rendering.components.registry import TemplateRegistry
from apps.rendering.schema.engine import migrate_page
from apps.rendering.schema.migration import QueryFn
from apps.rendering.schema.version import schema_version

log = logging.getLogger("pages.services")


def instance_version(registry: TemplateRegistry):
    return schema_version(registry.latest_migration())


async def prepare_record(
    record: Mapping[str, Any],
    registry: TemplateRegistry,
    *,
    query: Optional[QueryFn] = None,
) -> Dict[str, Any]:
    """
    Migre les données de la page et de ses ancêtres vers le schéma de l'instance.
    Le record d'origine n'est pas modifié (il peut venir d'un cache partagé).
    Lève BreakingMigrationError si un rembobinage traverse une migration sans `down`.
    """
    target = instance_version(registry)
    out = dict(record)
    if out.get("data") is not None:
        out["data"] = await migrate_page(out["data"], target, registry.migrations, query=query)
    ancestors = []
    for ancestor in record.get("ancestors") or []:
        ancestor = dict(ancestor)
        if ancestor.get("data") is not None:
            ancestor["data"] = await migrate_page(ancestor["data"], target, registry.migrations, query=query)
        ancestors.append(ancestor)
    out["ancestors"] = ancestors
    return out
