# apps/rendering/components/resources.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Dict, Optional

__all__ = ["Block", "FileResource", "ResourceProvider"]


@dataclass
class Block:
    """
    Bloc CSS ou JS déclaré par un template. Fournir soit le contenu (`css`/`js`),
    soit `path` vers un fichier lu à l'enregistrement.
    """

    css: Optional[str] = None
    js: Optional[str] = None
    path: Optional[str] = None
    version: Optional[str] = None

    def read(self) -> str:
        if self.css is not None:
            return self.css
        if self.js is not None:
            return self.js
        if self.path:
            return Path(self.path).read_text(encoding="utf-8")
        raise ValueError("Block needs inline content or a path.")


@dataclass
class FileResource:
    path: str
    mime: str
    version: Optional[str] = None

    @property
    def length(self) -> int:
        return Path(self.path).stat().st_size


class ResourceProvider:
    """
    Parent de Component, utilisable seul pour partager des ressources communes
    (fontawesome, jquery...) entre plusieurs templates: il suffit de l'enregistrer
    comme provider.

    Deux templates qui déclarent un bloc du même nom ne l'émettent qu'une fois
    dans la page; la version la plus haute gagne.

    Ne pas changer le mime d'un fichier sans changer son nom.
    """

    css_blocks: ClassVar[Dict[str, Block]] = {}
    js_blocks: ClassVar[Dict[str, Block]] = {}
    files: ClassVar[Dict[str, FileResource]] = {}
