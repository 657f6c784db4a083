# apps/pages/sources.py
from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging

import yaml
from django.conf import settings
from django.utils.module_loading import import_string

log = logging.getLogger("pages.sources")

PageRecord = Dict[str, Any]


class PageSource:
    """
    Fournit les PageRecord à rendre. Une implémentation réelle parle à l'API du CMS;
    `api` est l'objet transmis tel quel aux composants (fetch/set_context).

    Les records renvoyés peuvent être dans n'importe quel schéma: la vue les migre
    vers la version de l'instance avant hydratation. `ancestors` va de la racine
    vers le parent direct.
    """

    api: Any = None

    async def get_launched_page(self, hostname: str, path: str) -> Optional[PageRecord]:
        raise NotImplementedError

    async def get_preview_page(
        self,
        token: str,
        pagetree_id: str,
        path: str,
        *,
        published: Optional[bool] = None,
        version: Optional[int] = None,
    ) -> Optional[PageRecord]:
        raise NotImplementedError


# ---------------------------
# Fixtures YAML/JSON
# ---------------------------
def _read_file(path: Path) -> List[PageRecord]:
    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"{path.name}: PageRecord ou liste de PageRecord attendu (reçu {type(data)}).")
    return [r for r in data if isinstance(r, dict)]


@lru_cache(maxsize=8)
def _load_dir(dir_str: str) -> List[PageRecord]:
    directory = Path(dir_str)
    if not dir_str or not directory.is_dir():
        log.warning("Page fixtures directory not found: %s", dir_str)
        return []
    records: List[PageRecord] = []
    for path in sorted(directory.iterdir()):
        if path.suffix not in (".yml", ".yaml", ".json"):
            continue
        records.extend(_read_file(path))
    log.debug("Loaded %d page record(s) from %s", len(records), dir_str)
    return records


def clear_cache() -> None:
    _load_dir.cache_clear()


class FixturePageSource(PageSource):
    """
    Records lus depuis PAGES_FIXTURES_DIR (un fichier = un record ou une liste).
    Champs utilisés: id, pagetreeId, path, hostnames, published, version, data.
    """

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory

    def _records(self) -> List[PageRecord]:
        return _load_dir(str(self.directory or getattr(settings, "PAGES_FIXTURES_DIR", "") or ""))

    def _with_ancestors(self, record: PageRecord, candidates: List[PageRecord]) -> PageRecord:
        path = record.get("path") or "/"
        by_path = {r.get("path"): r for r in candidates}
        ancestors: List[PageRecord] = []
        parts = [p for p in path.split("/") if p]
        for i in range(len(parts)):
            parent_path = "/" + "/".join(parts[:i])
            parent = by_path.get(parent_path)
            if parent is not None and parent is not record:
                ancestors.append(parent)
        return dict(record, ancestors=ancestors)

    async def get_launched_page(self, hostname: str, path: str) -> Optional[PageRecord]:
        site = [
            r for r in self._records()
            if r.get("published", True) and (not r.get("hostnames") or hostname in r["hostnames"])
        ]
        for record in site:
            if record.get("path") == path:
                return self._with_ancestors(record, site)
        return None

    async def get_preview_page(self, token, pagetree_id, path, *, published=None, version=None):
        tree = [r for r in self._records() if str(r.get("pagetreeId")) == str(pagetree_id)]
        for record in tree:
            if record.get("path") != path:
                continue
            if published and not record.get("published", True):
                continue
            if version is not None and record.get("version") != version:
                continue
            return self._with_ancestors(record, tree)
        return None


@lru_cache(maxsize=4)
def _source_class(dotted: str):
    return import_string(dotted)


def get_page_source() -> PageSource:
    dotted = getattr(settings, "PAGES_PAGE_SOURCE", "apps.pages.sources.FixturePageSource")
    return _source_class(dotted)()
