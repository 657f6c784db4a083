# apps/sitekit/components.py
from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from django.template.loader import render_to_string
from django.utils.html import escape, format_html, format_html_join
from django.utils.safestring import mark_safe

from apps.rendering.components.base import Component, Page
from apps.rendering.components.headers import advance_header, print_header
from apps.rendering.components.resources import Block, FileResource, ResourceProvider
from apps.rendering.schema.migration import Migration

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"


class SiteBase(ResourceProvider):
    """Ressources communes à toutes les pages du site."""

    css_blocks = {"site": Block(path=str(RESOURCES_DIR / "site.css"), version="1.0")}
    files = {"logo.svg": FileResource(path=str(RESOURCES_DIR / "logo.svg"), mime="image/svg+xml", version="1")}


# ---------------------------
# Page
# ---------------------------
class StandardPage(Page):
    """
    Page simple: un titre, une aire `main` et une aire `footer`.
    Sans footer propre, la page reprend celui de l'ancêtre le plus proche qui en a un.
    """

    template_key = "standard"
    name = "Standard Page"
    template_name = "sitekit/standard_page.html"

    heading = ""

    async def fetch(self) -> Any:
        lang = self.data.get("lang")
        if lang:
            self.add_header("Content-Language", lang)
        if not self.areas.get("footer"):
            # ancestors: de la racine vers le parent direct
            for ancestor in reversed(self.page_info.get("ancestors") or []):
                footer = ((ancestor.get("data") or {}).get("areas") or {}).get("footer") or []
                if footer:
                    self.register_inherited("footer", footer, str(ancestor.get("id") or ""))
                    break
        return None

    def set_context(self, render_ctx_from_parent: Dict[str, Any]):
        title = self.data.get("title")
        self.heading = print_header(render_ctx_from_parent, escape(title or ""))
        return advance_header(render_ctx_from_parent, title)

    def css_block_names(self) -> List[str]:
        return ["site"]

    def get_template_context(self, rendered_areas):
        ctx = super().get_template_context(rendered_areas)
        ctx["logo"] = self.webpath("logo.svg") or ""
        return ctx


# ---------------------------
# Composants
# ---------------------------
def _body_to_content(data: Dict[str, Any], extras) -> Dict[str, Any]:
    data["content"] = data.pop("body", "")
    return data


def _content_to_body(data: Dict[str, Any], extras) -> Dict[str, Any]:
    data["body"] = data.pop("content", "")
    return data


class TextBlock(Component):
    template_key = "text"
    name = "Rich Text"
    template_name = "sitekit/text_block.html"
    migrations = [
        Migration(created_at=datetime(2023, 6, 1, tzinfo=timezone.utc), up=_body_to_content, down=_content_to_body),
    ]

    heading = ""

    def set_context(self, render_ctx_from_parent: Dict[str, Any]):
        title = self.data.get("title")
        self.heading = print_header(render_ctx_from_parent, escape(title or ""))
        return advance_header(render_ctx_from_parent, title)

    def edit_label(self):
        return self.data.get("title") or None


class Columns(Component):
    template_key = "columns"
    name = "Two Columns"
    template_name = "sitekit/columns.html"
    css_blocks = {"columns": Block(css=".columns{display:grid;grid-template-columns:1fr 1fr;gap:1rem}")}

    max_per_column = 3

    def get_template_context(self, rendered_areas):
        ctx = super().get_template_context(rendered_areas)
        for area in ("left", "right"):
            ctx[area] = mark_safe(self.render_area(area, max=self.max_per_column))
        return ctx

    def new_label(self, area_name: str):
        return f"Add to {area_name} column"


class ArticleList(Component):
    """Liste d'articles; en .rss, produit le flux complet."""

    template_key = "article-list"
    name = "Article List"
    js_blocks = {"feed": Block(js="document.documentElement.classList.add('has-feed');")}

    def render(self, rendered_areas) -> str:
        title = self.data.get("title") or ""
        return format_html(
            '<section class="articles">{}<ul>{}</ul>{}</section>',
            mark_safe(print_header(self.render_ctx or {}, escape(title))),
            mark_safe(self.render_components("articles")),
            self.new_bar("articles"),
        )

    def render_variation(self, extension: str, rendered_areas: Dict[str, str]) -> str:
        if extension != "rss":
            return ""
        return format_html(
            '<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel><title>{}</title>{}</channel></rss>',
            self.data.get("title") or "",
            mark_safe(rendered_areas.get("articles", "")),
        )


def _drop_legacy(data: Dict[str, Any], extras) -> Dict[str, Any]:
    # Le HTML legacy n'est plus stocké; on ne peut pas revenir en arrière
    data.pop("legacyHtml", None)
    if "date" in data:
        data["published"] = data.pop("date")
    return data


class Article(Component):
    template_key = "article"
    name = "Article"
    migrations = [Migration(created_at=datetime(2023, 9, 1, tzinfo=timezone.utc), up=_drop_legacy)]

    async def fetch(self) -> Any:
        article_id = self.data.get("articleId")
        if article_id and self.api is not None:
            return await self.api.get_article(article_id)
        return {k: self.data.get(k) or "" for k in ("title", "link", "summary", "published")}

    def render(self, rendered_areas) -> str:
        a = self.fetched or {}
        return format_html('<li><a href="{}">{}</a> <small>{}</small><p>{}</p></li>',
                           a.get("link", ""), a.get("title", ""), a.get("published", ""), a.get("summary", ""))

    def render_variation(self, extension: str, rendered_areas: Dict[str, str]) -> str:
        if extension != "rss":
            return ""
        a = self.fetched or {}
        fields = [("title", a.get("title", "")), ("link", a.get("link", "")), ("description", a.get("summary", ""))]
        if a.get("published"):
            fields.append(("pubDate", a["published"]))
        return format_html("<item>{}</item>", format_html_join("", "<{}>{}</{}>", ((t, v, t) for t, v in fields)))
