# apps/rendering/tests/support.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import asyncio

from apps.rendering.components.base import Component, Page
from apps.rendering.components.registry import TemplateRegistry

"""
Templates de test: chaque appel de hook est journalisé dans page.events
sous la forme (hook, path, détail) pour vérifier l'ordre des phases.
"""


class ProbePage(Page):
    template_key = "probe-page"

    def __init__(self, page_record, edit_mode: bool = False):
        self.events: List[tuple] = []
        super().__init__(page_record, edit_mode)

    async def fetch(self) -> Any:
        self.events.append(("fetch", self.path, None))
        return {"title": self.data.get("title")}

    def set_context(self, render_ctx_from_parent: Dict[str, Any]):
        self.events.append(("context", self.path, render_ctx_from_parent.get("from")))
        return {**render_ctx_from_parent, "from": "page"}

    def css_block_names(self) -> List[str]:
        return list(self.data.get("css") or [])

    def render(self, rendered_areas) -> str:
        self.events.append(("render", self.path, None))
        inner = "".join(rc.output for outputs in rendered_areas.values() for rc in outputs)
        return f"<page>{inner}</page>"


class ProbeBox(Component):
    """`fail` dans les données: fetch | context | render | variation."""

    template_key = "box"

    def _fail(self, phase: str) -> None:
        if self.data.get("fail") == phase:
            raise RuntimeError("boom")

    async def fetch(self) -> Any:
        self.page.events.append(("fetch-start", self.path, None))
        await asyncio.sleep(0)
        self._fail("fetch")
        inherit = self.data.get("inherit")
        if inherit:
            self.register_inherited("inherited", inherit, "ancestor-1", top=bool(self.data.get("top")))
        self.page.events.append(("fetch-end", self.path, None))
        return {"label": self.data.get("label", "")}

    async def set_context(self, render_ctx_from_parent: Dict[str, Any]):
        self.page.events.append(("context", self.path, render_ctx_from_parent.get("from")))
        await asyncio.sleep(0)
        self._fail("context")
        return {**render_ctx_from_parent, "from": self.path}

    def css_block_names(self) -> List[str]:
        return list(self.data.get("css") or [])

    def js_block_names(self) -> List[str]:
        return list(self.data.get("js") or [])

    def render(self, rendered_areas) -> str:
        self.page.events.append(("render", self.path, None))
        self._fail("render")
        inner = "".join(rc.output for outputs in rendered_areas.values() for rc in outputs)
        return f"<box {self.fetched['label']}>{inner}</box>"

    def render_variation(self, extension: str, rendered_areas: Dict[str, str]) -> str:
        self.page.events.append(("variation", self.path, extension))
        self._fail("variation")
        return f"[{self.fetched['label']}:{''.join(rendered_areas.values())}]"


def make_registry(*extra) -> TemplateRegistry:
    registry = TemplateRegistry(resources_url="/.resources/", resource_version="42")
    for template in (ProbePage, ProbeBox) + tuple(extra):
        registry.add_template(template)
    return registry


def box(label: str, fail: Optional[str] = None, **areas_or_fields) -> Dict[str, Any]:
    data: Dict[str, Any] = {"templateKey": "box", "label": label}
    if fail:
        data["fail"] = fail
    areas = {k: v for k, v in areas_or_fields.items() if isinstance(v, list) and k not in ("css", "js", "inherit")}
    fields = {k: v for k, v in areas_or_fields.items() if k not in areas}
    data.update(fields)
    if areas:
        data["areas"] = areas
    return data


def page_record(*main, title: str = "Probe", **data) -> Dict[str, Any]:
    return {
        "id": "page-1",
        "path": "/probe",
        "data": {
            "templateKey": "probe-page",
            "savedAtVersion": "2024-01-01T00:00:00Z",
            "title": title,
            "areas": {"main": list(main)},
            **data,
        },
    }


class ShadowBox(ProbeBox):
    """Même clé que ProbeBox."""
