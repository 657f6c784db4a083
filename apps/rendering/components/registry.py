# apps/rendering/components/registry.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Type
import logging

from django.conf import settings
from django.utils.module_loading import import_string
from packaging.version import InvalidVersion, Version

from apps.rendering.components.base import Component, Page
from apps.rendering.components.resources import Block, FileResource, ResourceProvider
from apps.rendering.config.loader import get_registry_spec
from apps.rendering.errors import TemplateMissing
from apps.rendering.schema.migration import Migration

log = logging.getLogger("rendering.components.registry")


def _version_greater(candidate: Optional[str], current: Optional[str]) -> bool:
    """Un bloc versionné bat un bloc sans version; sinon comparaison PEP 440."""
    if candidate is None:
        return False
    if current is None:
        return True
    try:
        return Version(candidate) > Version(current)
    except InvalidVersion:
        log.warning("Unparseable resource version %r vs %r, keeping the first one.", candidate, current)
        return False


@dataclass
class RegisteredBlock:
    content: str
    version: Optional[str] = None


class TemplateRegistry:
    """
    Registre des templates, rempli une fois au démarrage puis traité en lecture seule.
    Il est injecté dans l'hydrateur et le moteur de migration (pas d'état implicite).
    """

    def __init__(self, *, resources_url: Optional[str] = None, resource_version: str = "0"):
        self.pages: Dict[str, Type[Page]] = {}
        self.components: Dict[str, Type[Component]] = {}
        self.migrations: Dict[str, List[Migration]] = {}
        self.cssblocks: Dict[str, RegisteredBlock] = {}
        self.jsblocks: Dict[str, RegisteredBlock] = {}
        self.files: Dict[str, FileResource] = {}
        self.all: List[Type[ResourceProvider]] = []
        self.webpaths: Dict[str, str] = {}
        self.resources_url = resources_url or getattr(settings, "RENDERING_RESOURCES_URL", "/.resources/")
        self.resource_version = resource_version

    # ---------------------------
    # Enregistrement
    # ---------------------------
    def add_provider(self, provider: Type[ResourceProvider]) -> None:
        self.all.append(provider)
        self._merge_blocks(provider.css_blocks, self.cssblocks, provider)
        self._merge_blocks(provider.js_blocks, self.jsblocks, provider)
        for name, res in provider.files.items():
            existing = self.files.get(name)
            if existing is None or _version_greater(res.version, existing.version):
                self.files[name] = res
                self.webpaths[name] = self.webpath(name)

    def add_template(self, template: Type[Component]) -> None:
        key = getattr(template, "template_key", "")
        if not key:
            raise ValueError(f"{template.__name__} has no template_key.")
        bucket = self.pages if issubclass(template, Page) else self.components
        if key in bucket and bucket[key] is not template:
            log.warning("Template key '%s' registered twice (%s replaces %s).", key, template.__name__, bucket[key].__name__)
        bucket[key] = template
        self.add_migrations(key, template.migrations)
        self.add_provider(template)

    def set_resource_version(self, resource_version: str) -> None:
        self.resource_version = resource_version
        for name in self.files:
            self.webpaths[name] = self.webpath(name)

    def add_migrations(self, template_key: str, migrations: List[Migration]) -> None:
        bound = [m.bound_to(template_key) for m in migrations or []]
        merged = self.migrations.get(template_key, []) + bound
        self.migrations[template_key] = sorted(merged, key=lambda m: m.created_at)

    def _merge_blocks(self, declared: Dict[str, Block], target: Dict[str, RegisteredBlock], owner) -> None:
        for name, block in (declared or {}).items():
            existing = target.get(name)
            if existing is not None and not _version_greater(block.version, existing.version):
                continue
            try:
                content = block.read()
            except (OSError, ValueError) as e:
                log.error("Resource block '%s' of %s cannot be read: %s", name, owner.__name__, e)
                continue
            target[name] = RegisteredBlock(content=content, version=block.version)

    # ---------------------------
    # Lecture
    # ---------------------------
    def get_page(self, template_key: str) -> Optional[Type[Page]]:
        return self.pages.get(template_key)

    def get_component(self, template_key: str) -> Optional[Type[Component]]:
        return self.components.get(template_key)

    def get_template(self, template_key: str) -> Type[Component]:
        template = self.pages.get(template_key) or self.components.get(template_key)
        if template is None:
            raise TemplateMissing(template_key)
        return template

    def all_migrations(self) -> List[Migration]:
        out: List[Migration] = []
        for migs in self.migrations.values():
            out.extend(migs)
        return out

    def latest_migration(self) -> Optional[datetime]:
        dates = [m.created_at for m in self.all_migrations()]
        return max(dates) if dates else None

    def webpath(self, name: str, extension: str = "") -> str:
        suffix = f".{extension}" if extension else ""
        return f"{self.resources_url}{self.resource_version}/{name}{suffix}"

    def block_url(self, name: str, kind: str) -> Optional[str]:
        blocks = self.cssblocks if kind == "css" else self.jsblocks
        if name not in blocks:
            return None
        return self.webpath(name, kind)


def _import_all(dotted_paths: List[str]) -> Tuple[List[type], List[str]]:
    loaded: List[type] = []
    warnings: List[str] = []
    for dotted in dotted_paths:
        try:
            loaded.append(import_string(dotted))
        except ImportError as e:
            warnings.append(f"Template import failed for {dotted}: {e}")
    return loaded, warnings


def build_registry(*, resource_version: str = "0") -> Tuple[TemplateRegistry, List[str]]:
    """Construit un registre à partir de RENDERING_CONFIG_FILE. Retourne (registre, warnings)."""
    spec = get_registry_spec()
    registry = TemplateRegistry(resource_version=resource_version)
    providers, warns_p = _import_all(spec.get("providers") or [])
    templates, warns_t = _import_all(spec.get("templates") or [])
    for provider in providers:
        registry.add_provider(provider)
    for template in templates:
        registry.add_template(template)
    return registry, warns_p + warns_t


# Registre du processus, installé par RenderingConfig.ready()
_DEFAULT: Optional[TemplateRegistry] = None


def install(registry: TemplateRegistry) -> None:
    global _DEFAULT
    _DEFAULT = registry


def get_registry() -> TemplateRegistry:
    if _DEFAULT is None:
        raise RuntimeError("Template registry not initialised; is apps.rendering in INSTALLED_APPS?")
    return _DEFAULT
