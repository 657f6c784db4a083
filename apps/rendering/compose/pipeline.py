# apps/rendering/compose/pipeline.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
import asyncio
import inspect
import logging
import time

from apps.rendering.components.assets import collect_for, head_tags
from apps.rendering.components.base import Component, Page, RenderedComponent
from apps.rendering.components.headers import initial_context
from apps.rendering.components.registry import TemplateRegistry, get_registry
from apps.rendering.compose.hydration import hydrate, hydrate_inherited, walk

log = logging.getLogger("rendering.compose.pipeline")

DEFAULT_EXTENSION = "html"


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _children(node: Component) -> List[Component]:
    return [c for children in node.areas.values() for c in children]


def _reachable(node: Component) -> List[Component]:
    """Préfixe, en s'arrêtant aux noeuds en erreur (leur sous-arbre n'est jamais atteint)."""
    if node.had_error:
        return []
    out = [node]
    for child in _children(node):
        out.extend(_reachable(child))
    return out


def _bind(nodes: List[Component], *, headers: Mapping[str, str], query: Mapping[str, Any], api: Any) -> None:
    for node in nodes:
        node.request_headers = dict(headers)
        node.request_query = dict(query)
        node.api = api


# ---------------------------
# Phase 1: fetch (à plat)
# ---------------------------
async def _fetch_one(node: Component) -> None:
    try:
        node.fetched = await _maybe_await(node.fetch())
    except Exception as e:
        node.log_error(e)


async def _fetch_phase(page: Page, registry: TemplateRegistry, *, headers, query, api) -> None:
    pending = walk(page)
    _bind(pending, headers=headers, query=query, api=api)
    rounds = 0
    while pending:
        rounds += 1
        await asyncio.gather(*(_fetch_one(n) for n in pending))
        # Composants hérités enregistrés pendant ce tour: hydratés puis fetchés au tour suivant
        added: List[Component] = []
        for node in pending:
            requests, node._inherit_requests = node._inherit_requests, []
            if node.had_error:
                continue
            for req in requests:
                for child in hydrate_inherited(node, req.area, req.components, req.from_page_id, registry, top=req.top):
                    added.extend(walk(child))
        _bind(added, headers=headers, query=query, api=api)
        pending = added
    if rounds > 1:
        log.debug("Fetch phase for %s took %d rounds (inherited components)", page.path or "/", rounds)


# ---------------------------
# Variation (rss, ics...)
# ---------------------------
async def _variation_one(node: Component, extension: str) -> str:
    if node.had_error:
        return ""
    rendered: Dict[str, str] = {}
    for area, children in node.areas.items():
        outputs = await asyncio.gather(*(_variation_one(c, extension) for c in children))
        rendered[area] = "".join(outputs)
    try:
        return await _maybe_await(node.render_variation(extension, rendered)) or ""
    except Exception as e:
        node.log_error(e)
        return ""


# ---------------------------
# Phase 2: contexte (descendant)
# ---------------------------
async def _context_one(node: Component, parent_ctx: Dict[str, Any]) -> None:
    if node.had_error:
        return
    try:
        ctx = await _maybe_await(node.set_context(parent_ctx))
    except Exception as e:
        node.log_error(e)
        return
    node.render_ctx = parent_ctx if ctx is None else ctx
    # les enfants n'attendent que le contexte de leur propre parent
    await asyncio.gather(*(_context_one(c, node.render_ctx) for c in _children(node)))


# ---------------------------
# Phase 3: rendu (ascendant)
# ---------------------------
async def _render_one(node: Component) -> str:
    if node.had_error:
        return ""
    rendered: Dict[str, List[RenderedComponent]] = {}
    for area, children in node.areas.items():
        rendered[area] = [RenderedComponent(c, await _render_one(c)) for c in children]
    node.rendered_areas = rendered
    try:
        return await _maybe_await(node.render(rendered)) or ""
    except Exception as e:
        node.log_error(e)
        return ""


async def render_hydrated(
    page: Page,
    registry: Optional[TemplateRegistry] = None,
    *,
    extension: str = DEFAULT_EXTENSION,
    headers: Optional[Mapping[str, str]] = None,
    query: Optional[Mapping[str, Any]] = None,
    api: Any = None,
) -> str:
    """
    Exécute fetch → contexte → rendu sur un arbre hydraté et renvoie la chaîne finale.
    Aucune erreur de composant ne sort d'ici: elles finissent dans page.render_errors.
    """
    registry = registry or page.registry or get_registry()
    headers = headers or {}
    query = query or {}
    t0 = time.monotonic()

    await _fetch_phase(page, registry, headers=headers, query=query, api=api)

    if extension != DEFAULT_EXTENSION:
        out = await _variation_one(page, extension)
        log.debug("Variation .%s of %s rendered in %.1fms", extension, page.path or "/", (time.monotonic() - t0) * 1000)
        return out

    await _context_one(page, initial_context(headers, query))
    page.head_content = head_tags(collect_for(_reachable(page)), registry)
    out = await _render_one(page)

    log.debug(
        "Page %s rendered in %.1fms (%d recoverable error(s))",
        page.page_info.get("path") or page.id or "/",
        (time.monotonic() - t0) * 1000,
        len(page.render_errors),
    )
    return out


async def render_page(
    page_record: Mapping[str, Any],
    *,
    registry: Optional[TemplateRegistry] = None,
    extension: str = DEFAULT_EXTENSION,
    edit_mode: bool = False,
    headers: Optional[Mapping[str, str]] = None,
    query: Optional[Mapping[str, Any]] = None,
    api: Any = None,
) -> str:
    """PageRecord → HTML (ou variation). Seule TemplateMissing sur la racine et HydrationError remontent."""
    registry = registry or get_registry()
    page = hydrate(page_record, registry, edit_mode=edit_mode)
    return await render_hydrated(page, registry, extension=extension, headers=headers, query=query, api=api)
