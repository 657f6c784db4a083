# apps/rendering/schema/engine.py
from __future__ import annotations
import copy
import inspect
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from asgiref.sync import async_to_sync

from apps.rendering.errors import BreakingMigrationError, InvalidSchemaVersion
from apps.rendering.schema.migration import Migration, MigrationExtras, QueryFn
from apps.rendering.schema.version import VersionLike, parse_version

log = logging.getLogger("rendering.schema.engine")

__all__ = ["collect_template_keys", "select_migrations", "migrate_page", "migrate_page_sync"]

MigrationsByKey = Mapping[str, Sequence[Migration]]


def collect_template_keys(data: Mapping[str, Any]) -> Set[str]:
    """templateKey de la racine et de tous ses descendants."""
    keys: Set[str] = set()
    stack: List[Mapping[str, Any]] = [data]
    while stack:
        node = stack.pop()
        key = node.get("templateKey")
        if key:
            keys.add(key)
        for children in (node.get("areas") or {}).values():
            stack.extend(c for c in children or [] if isinstance(c, Mapping))
    return keys


def select_migrations(
    migrations: MigrationsByKey,
    in_use: Iterable[str],
    from_version: datetime,
    to_version: datetime,
) -> List[Migration]:
    """
    Migrations à exécuter, dans l'ordre d'application.
    Bornes exclusives: une migration datée exactement de from/to est considérée
    déjà appliquée (resp. pas encore requise).
    """
    backward = from_version > to_version
    low, high = (to_version, from_version) if backward else (from_version, to_version)
    selected: List[Migration] = []
    for key in sorted(set(in_use)):
        for m in migrations.get(key) or []:
            if low < m.created_at < high:
                selected.append(m if m.template_key == key else m.bound_to(key))
    selected.sort(key=lambda m: (m.created_at, m.template_key))
    # à rebours: ordre exact inverse, y compris entre migrations de même date et clé
    if backward:
        selected.reverse()
    return selected


async def _call(fn, node: Dict[str, Any], extras: MigrationExtras) -> Dict[str, Any]:
    result = fn(node, extras)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _apply_to_tree(
    node: Dict[str, Any],
    path: str,
    migration: Migration,
    *,
    backward: bool,
    page: Dict[str, Any],
    query: Optional[QueryFn],
) -> Dict[str, Any]:
    # Ascendant: les aires sont entièrement migrées avant le noeud lui-même
    for area, children in (node.get("areas") or {}).items():
        if not children:
            continue
        for idx, child in enumerate(children):
            children[idx] = await _apply_to_tree(
                child, f"{path}/{area}/{idx}", migration, backward=backward, page=page, query=query
            )
    if node.get("templateKey") != migration.template_key:
        return node
    fn = migration.down if backward else migration.up
    if fn is None:
        raise BreakingMigrationError(migration.template_key, migration.created_at, path or "/")
    return await _call(fn, node, MigrationExtras(page=page, path=path, query=query))


async def migrate_page(
    page_data: Mapping[str, Any],
    to_version: VersionLike,
    migrations: MigrationsByKey,
    *,
    query: Optional[QueryFn] = None,
) -> Dict[str, Any]:
    """
    Fait passer des données de page sérialisées (non hydratées) de leur
    `savedAtVersion` à `to_version`, en avant ou en arrière dans le temps.
    Les données d'entrée ne sont jamais modifiées.
    """
    raw_from = page_data.get("savedAtVersion")
    if raw_from is None:
        raise InvalidSchemaVersion("Page data has no savedAtVersion.")
    from_dt = parse_version(raw_from)
    to_dt = parse_version(to_version)

    result: Dict[str, Any] = copy.deepcopy(dict(page_data))
    if from_dt == to_dt:
        return result

    backward = from_dt > to_dt
    selected = select_migrations(migrations, collect_template_keys(result), from_dt, to_dt)
    if backward:
        # Échec avant toute transformation: pas de page à moitié rembobinée
        for m in selected:
            if m.breaking:
                raise BreakingMigrationError(m.template_key, m.created_at)

    log.debug(
        "Migrating %s page from %s to %s with %d migration(s)",
        "backward" if backward else "forward",
        from_dt.isoformat(),
        to_dt.isoformat(),
        len(selected),
    )
    for m in selected:
        result = await _apply_to_tree(result, "", m, backward=backward, page=result, query=query)

    result["savedAtVersion"] = to_dt.isoformat() if isinstance(raw_from, str) else to_dt
    return result


migrate_page_sync = async_to_sync(migrate_page)
