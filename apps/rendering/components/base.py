# apps/rendering/components/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Union
import logging

from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from apps.rendering.components import editbar
from apps.rendering.components.resources import ResourceProvider
from apps.rendering.errors import HydrationError
from apps.rendering.schema.migration import Migration

log = logging.getLogger("rendering.components.base")

__all__ = ["Component", "Page", "RenderedComponent", "RenderIssue", "InheritRequest"]


@dataclass
class RenderedComponent:
    component: "Component"
    output: str


@dataclass
class RenderIssue:
    path: str
    template_key: str
    error: BaseException


@dataclass
class InheritRequest:
    area: str
    components: List[Dict[str, Any]]
    from_page_id: str
    top: bool = False


class Component(ResourceProvider):
    """
    Classe de base des templates de composants. Une sous-classe fournit au minimum
    `template_key` et un rendu (`render` ou `template_name`).

    Au rendu, le composant est « hydraté »: placé dans l'arbre de la page avec
    son parent, ses enfants (`areas`) et sa page liés. Puis trois phases:

      1. fetch       : à plat, concurrent pour tous les noeuds de la page
      2. set_context : descendant, le contexte du parent est passé à chaque enfant
      3. render      : ascendant, les enfants sont rendus avant le parent

    Ne jamais muter les données reçues d'une API dans `fetch`: elles peuvent être
    partagées avec d'autres composants du même rendu.
    """

    template_key: ClassVar[str] = ""
    name: ClassVar[str] = ""
    template_name: ClassVar[Optional[str]] = None
    migrations: ClassVar[List[Migration]] = []
    no_data: ClassVar[bool] = False

    def __init__(self, data: Mapping[str, Any], path: str, parent: Optional["Component"], edit_mode: bool = False):
        self.edit_mode = edit_mode
        self.parent = parent
        own = dict(data or {})
        own.pop("areas", None)
        self.data: Dict[str, Any] = own
        self.path = path
        self.had_error = False
        self.areas: Dict[str, List[Component]] = {}
        self.fetched: Any = None
        self.render_ctx: Optional[Dict[str, Any]] = None
        self.rendered_areas: Dict[str, List[RenderedComponent]] = {}
        self.inherited_from: Optional[str] = None
        self.request_headers: Dict[str, str] = {}
        self.request_query: Dict[str, Any] = {}
        self.api: Any = None
        self._inherit_requests: List[InheritRequest] = []

        node: Component = parent if parent is not None else self
        while not isinstance(node, Page) and node.parent is not None:
            node = node.parent
        if not isinstance(node, Page):
            raise HydrationError(f"Hydration failed, could not map component at '{path}' back to its page.")
        self.page: Page = node

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.template_key!r} path={self.path!r}>"

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    async def fetch(self) -> Any:
        """Phase 1: données externes nécessaires au rendu; la valeur renvoyée devient `self.fetched`."""
        return None

    def set_context(self, render_ctx_from_parent: Dict[str, Any]):
        """
        Phase 2: reçoit le contexte du parent et renvoie celui à transmettre aux enfants
        (peut être une coroutine). Renvoyer un nouvel objet plutôt que muter celui reçu.
        """
        return render_ctx_from_parent

    def render(self, rendered_areas: Dict[str, List[RenderedComponent]]) -> str:
        """Phase 3: HTML du composant; les aires sont déjà rendues."""
        if self.template_name:
            return render_to_string(self.template_name, self.get_template_context(rendered_areas))
        raise NotImplementedError(f"{type(self).__name__} must define render() or template_name.")

    def render_variation(self, extension: str, rendered_areas: Dict[str, str]) -> str:
        """
        Rendu alternatif (.rss, .ics...) exécuté juste après fetch, sans contexte ni
        render. `rendered_areas` donne la sortie jointe de chaque aire.
        Par défaut on laisse parler les enfants; renvoyer "" pour les faire taire.
        """
        return "".join(rendered_areas.values())

    def css_block_names(self) -> List[str]:
        """Blocs CSS nécessaires à ce noeud; évalué après le contexte, avant le rendu."""
        return list(type(self).css_blocks.keys())

    def js_block_names(self) -> List[str]:
        return list(type(self).js_blocks.keys())

    def webpath(self, name: str) -> Optional[str]:
        """URL versionnée d'un fichier enregistré, d'après le registre qui a hydraté la page."""
        registry = self.page.registry
        return registry.webpaths.get(name) if registry is not None else None

    # ------------------------------------------------------------------
    # Helpers de rendu
    # ------------------------------------------------------------------
    def get_template_context(self, rendered_areas: Dict[str, List[RenderedComponent]]) -> Dict[str, Any]:
        return {
            "component": self,
            "data": self.data,
            "fetched": self.fetched,
            "ctx": self.render_ctx or {},
            "page": self.page,
            "edit_mode": self.edit_mode,
            "areas": {name: mark_safe(self.render_area(name)) for name in rendered_areas},
        }

    def render_components(
        self,
        components: Union[Sequence[RenderedComponent], str, None] = None,
        *,
        hide_inherit_bars: bool = False,
        edit_bar_opts: Optional[Dict[str, Any]] = None,
    ) -> str:
        if components is None:
            components = []
        elif isinstance(components, str):
            components = self.rendered_areas.get(components, [])
        opts = dict(edit_bar_opts or {})
        label = opts.pop("label", None)
        extra_class = opts.pop("extra_class", None)
        out: List[str] = []
        for rc in components:
            if not (rc.component.inherited_from and hide_inherit_bars):
                out.append(rc.component.edit_bar(
                    label=label(rc.component) if callable(label) else label,
                    extra_class=extra_class(rc.component) if callable(extra_class) else extra_class,
                    **opts,
                ))
            out.append(rc.output)
        return "".join(out)

    def render_area(
        self,
        area_name: str,
        *,
        min: Optional[int] = None,
        max: Optional[int] = None,
        hide_max_warning: bool = False,
        max_warning: Optional[str] = None,
        hide_inherit_bars: bool = False,
        new_bar_opts: Optional[Dict[str, Any]] = None,
        edit_bar_opts: Optional[Dict[str, Any]] = None,
    ) -> str:
        components = self.rendered_areas.get(area_name, [])
        owned = len([rc for rc in components if not rc.component.inherited_from])
        full = bool(max and owned >= max)
        bar_opts = dict(edit_bar_opts or {})
        bar_opts["disable_delete"] = owned <= (min or 0)
        bar_opts["disable_drop"] = full
        output = self.render_components(components, hide_inherit_bars=hide_inherit_bars, edit_bar_opts=bar_opts)
        nb_opts = dict(new_bar_opts or {})
        if full:
            if not hide_max_warning:
                nb_opts["label"] = max_warning or "Maximum Reached"
                nb_opts["disabled"] = True
                output += self.new_bar(area_name, **nb_opts)
        else:
            output += self.new_bar(area_name, **nb_opts)
        return output

    # ------------------------------------------------------------------
    # Barres d'édition
    # ------------------------------------------------------------------
    @property
    def auto_label(self) -> str:
        return type(self).name or self.template_key

    def edit_label(self) -> Optional[str]:
        return None

    def edit_class(self) -> Optional[str]:
        return None

    def new_label(self, area_name: str) -> Optional[str]:
        return None

    def new_class(self, area_name: str) -> Optional[str]:
        return None

    def edit_bar(self, *, label: Optional[str] = None, extra_class: Optional[str] = None, edit_mode: Optional[bool] = None, **opts) -> str:
        return editbar.edit_bar(
            self.path,
            label=label or self.edit_label() or self.auto_label,
            extra_class=extra_class or self.edit_class(),
            edit_mode=self.edit_mode if edit_mode is None else edit_mode,
            inherited_from=opts.pop("inherited_from", None) or self.inherited_from,
            hide_edit=opts.pop("hide_edit", False) or self.no_data,
            **opts,
        )

    def new_bar(self, area_name: str, *, label: Optional[str] = None, extra_class: Optional[str] = None, edit_mode: Optional[bool] = None, disabled: bool = False) -> str:
        if label is None:
            label = self.new_label(area_name)
        if label is None:
            label = f"Add {area_name} Content" if len(self.areas) > 1 else f"Add {self.auto_label} Content"
        return editbar.new_bar(
            f"{self.path}/{area_name}",
            label=label,
            extra_class=extra_class or self.new_class(area_name),
            edit_mode=self.edit_mode if edit_mode is None else edit_mode,
            disabled=disabled,
        )

    # ------------------------------------------------------------------
    # Héritage & erreurs
    # ------------------------------------------------------------------
    def register_inherited(self, area: str, components: Sequence[Mapping[str, Any]], from_page_id: str, top: bool = False) -> None:
        """
        À appeler pendant `fetch` pour inclure des composants venant d'une page ancêtre
        (liens sociaux du pied de page...). Ils sont hydratés, fetchés et ajoutés à l'aire.
        """
        self._inherit_requests.append(
            InheritRequest(area=area, components=[dict(c) for c in components], from_page_id=from_page_id, top=top)
        )

    def log_error(self, e: BaseException) -> None:
        """Marque le noeud en erreur (exclu du contexte et du rendu) et remonte l'erreur à la page."""
        self.had_error = True
        self.pass_error(e, self.path, self)

    def pass_error(self, e: BaseException, path: str, component: Optional["Component"] = None) -> None:
        if self.parent is not None:
            self.parent.pass_error(e, path, component)


class Page(Component):
    """
    Racine de l'arbre. `head_content` est rempli par le pipeline après la phase de
    contexte: le template de page doit l'inclure dans <head>.
    """

    def __init__(self, page_record: Mapping[str, Any], edit_mode: bool = False):
        self.id: str = str(page_record.get("id") or "")
        self.page_info: Mapping[str, Any] = page_record
        self.template_properties: Dict[str, Any] = {}
        self.head_content: str = ""
        self.response_headers: Dict[str, str] = {}
        self.render_errors: List[RenderIssue] = []
        # posé par hydrate()
        self.registry: Any = None
        super().__init__(page_record.get("data") or {}, "", None, edit_mode)

    def add_header(self, key: str, value: Optional[str]) -> None:
        """En-tête HTTP à poser sur la réponse; None le retire."""
        if value is None:
            self.response_headers.pop(key, None)
        else:
            self.response_headers[key] = value

    def pass_error(self, e: BaseException, path: str, component: Optional[Component] = None) -> None:
        template_key = component.template_key if component is not None else getattr(e, "template_key", "")
        self.render_errors.append(RenderIssue(path=path, template_key=template_key, error=e))
        log.warning(
            "Recoverable issue occurred during render of %s. Component at %s (%s) threw: %s",
            self.page_info.get("path") or self.id or "/",
            path or "/",
            template_key or "?",
            e,
            exc_info=(type(e), e, e.__traceback__),
        )
