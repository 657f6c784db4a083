# apps/rendering/compose/hydration.py
from __future__ import annotations
from typing import Any, List, Mapping, Optional, Sequence
import logging

from apps.rendering.components.base import Component, Page
from apps.rendering.components.registry import TemplateRegistry
from apps.rendering.errors import TemplateMissing

log = logging.getLogger("rendering.compose.hydration")

__all__ = ["hydrate", "hydrate_children", "hydrate_component", "hydrate_inherited", "walk"]


def hydrate(
    page_record: Mapping[str, Any],
    registry: TemplateRegistry,
    *,
    edit_mode: bool = False,
) -> Page:
    """
    PageRecord sérialisé → arbre vivant.
    Lève TemplateMissing si le template de la racine est inconnu (rien à rendre).
    Un enfant au template inconnu est signalé à la page et omis, ses frères restent.
    Synchrone: on ne fait qu'allouer et lier des objets.
    """
    data = page_record.get("data") or {}
    template_key = data.get("templateKey") or ""
    page_cls = registry.get_page(template_key)
    if page_cls is None:
        raise TemplateMissing(template_key, "/")

    page = page_cls(page_record, edit_mode)
    page.registry = registry
    hydrate_children(page, data.get("areas") or {}, registry)
    return page


def hydrate_component(
    data: Mapping[str, Any],
    path: str,
    parent: Component,
    registry: TemplateRegistry,
    *,
    inherited_from: Optional[str] = None,
) -> Optional[Component]:
    template_key = data.get("templateKey") or ""
    component_cls = registry.get_component(template_key)
    if component_cls is None:
        parent.pass_error(TemplateMissing(template_key, path), path)
        return None
    component = component_cls(data, path, parent, parent.edit_mode)
    component.inherited_from = inherited_from
    hydrate_children(component, data.get("areas") or {}, registry, inherited_from=inherited_from)
    return component


def hydrate_children(
    component: Component,
    areas: Mapping[str, Sequence[Mapping[str, Any]]],
    registry: TemplateRegistry,
    *,
    inherited_from: Optional[str] = None,
) -> None:
    for area_name, children in areas.items():
        hydrated: List[Component] = []
        for idx, child_data in enumerate(children or []):
            # l'index reste celui des données stockées, même si un frère a été omis
            child = hydrate_component(
                child_data,
                f"{component.path}/{area_name}/{idx}",
                component,
                registry,
                inherited_from=inherited_from,
            )
            if child is not None:
                hydrated.append(child)
        component.areas[area_name] = hydrated


def hydrate_inherited(
    component: Component,
    area: str,
    components: Sequence[Mapping[str, Any]],
    from_page_id: str,
    registry: TemplateRegistry,
    *,
    top: bool = False,
) -> List[Component]:
    """Hydrate des composants hérités d'une page ancêtre dans une aire de `component`."""
    existing = component.areas.setdefault(area, [])
    offset = len([c for c in existing if c.inherited_from])
    added: List[Component] = []
    for idx, child_data in enumerate(components):
        child = hydrate_component(
            child_data,
            f"{component.path}/{area}/inherited-{from_page_id}-{offset + idx}",
            component,
            registry,
            inherited_from=from_page_id,
        )
        if child is not None:
            added.append(child)
    if top:
        component.areas[area] = added + existing
    else:
        existing.extend(added)
    return added


def walk(component: Component) -> List[Component]:
    """Parcours préfixe: le noeud puis tous ses descendants."""
    out: List[Component] = [component]
    for children in component.areas.values():
        for child in children:
            out.extend(walk(child))
    return out

