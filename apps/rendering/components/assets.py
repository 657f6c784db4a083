# apps/rendering/components/assets.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from django.utils.html import format_html, format_html_join

from apps.rendering.components.base import Component
from apps.rendering.components.registry import TemplateRegistry


def _in_error(component: Component) -> bool:
    node: Optional[Component] = component
    while node is not None:
        if node.had_error:
            return True
        node = node.parent
    return False


def collect_for(components: Iterable[Component]) -> Dict[str, List[str]]:
    """
    Noms de blocs requis par les noeuds atteints, chacun à sa première apparition
    (ordre préfixe). Les noeuds en erreur ne contribuent pas; un noeud dont
    css_block_names/js_block_names lève passe en erreur et sera blanchi au rendu.
    """
    # dict: ensemble ordonné par première insertion
    wanted: Dict[str, Dict[str, None]] = {"css": {}, "js": {}}
    for component in components:
        if _in_error(component):
            continue
        try:
            css = list(component.css_block_names())
            js = list(component.js_block_names())
        except Exception as e:
            component.log_error(e)
            continue
        wanted["css"].update(dict.fromkeys(map(str, css)))
        wanted["js"].update(dict.fromkeys(map(str, js)))
    return {kind: list(names) for kind, names in wanted.items()}


def head_tags(blocks: Dict[str, List[str]], registry: TemplateRegistry) -> str:
    """<link> puis <script defer>; un nom non enregistré est ignoré."""
    css_urls = [u for u in (registry.block_url(n, "css") for n in blocks.get("css", [])) if u]
    js_urls = [u for u in (registry.block_url(n, "js") for n in blocks.get("js", [])) if u]
    links = format_html_join("", '<link rel="stylesheet" href="{}">', ((u,) for u in css_urls))
    scripts = format_html_join("", '<script src="{}" defer></script>', ((u,) for u in js_urls))
    return format_html("{}{}", links, scripts)
