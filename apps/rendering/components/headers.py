# apps/rendering/components/headers.py
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, TypedDict

from django.utils.html import format_html, format_html_join
from django.utils.safestring import mark_safe


class RenderContext(TypedDict, total=False):
    """
    Contexte descendant (phase 2). `header_level` permet de garder un arbre de titres
    cohérent: un composant qui utilise un h2 passe header_level=3 à ses enfants.
    """

    header_level: int
    request_headers: Mapping[str, str]
    request_query: Mapping[str, Any]


def initial_context(headers: Optional[Mapping[str, str]] = None, query: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return {
        "header_level": 1,
        "request_headers": dict(headers or {}),
        "request_query": dict(query or {}),
    }


def _is_blank(content: Optional[str]) -> bool:
    return content is None or not str(content).strip()


def print_header(ctx: Mapping[str, Any], content: Optional[str], attributes: Optional[Dict[str, str]] = None) -> str:
    """
    Encapsule `content` (déjà échappé par l'appelant) dans un h1..h6 selon
    ctx["header_level"], borné à 1..6. Renvoie "" si le contenu est vide.
    """
    if _is_blank(content):
        return ""
    level = ctx.get("header_level") or 1
    level = min(max(int(level), 1), 6)
    attrs = ""
    if attributes:
        attrs = " " + format_html_join(" ", '{}="{}"', attributes.items())
    return format_html("<h{}{}>{}</h{}>", level, mark_safe(attrs), mark_safe(content), level)


def advance_header(ctx: Mapping[str, Any], content: Optional[str]) -> Dict[str, Any]:
    """Copie de ctx avec header_level + 1 si `content` n'est pas vide."""
    out = dict(ctx)
    if not _is_blank(content):
        out["header_level"] = (ctx.get("header_level") or 1) + 1
    return out
