# apps/rendering/errors.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

__all__ = [
    "RenderingError",
    "TemplateMissing",
    "HydrationError",
    "MigrationError",
    "BreakingMigrationError",
    "InvalidSchemaVersion",
]


class RenderingError(Exception):
    """Base des erreurs du moteur de rendu."""


class TemplateMissing(RenderingError, KeyError):
    """Aucune implémentation enregistrée pour ce templateKey."""

    def __init__(self, template_key: str, path: str = ""):
        super().__init__(template_key)
        self.template_key = template_key
        self.path = path

    def __str__(self) -> str:
        where = f" at '{self.path}'" if self.path else ""
        return f"Template '{self.template_key}' is not registered{where}."


class HydrationError(RenderingError):
    """Un composant hydraté ne peut pas remonter jusqu'à sa page."""


class MigrationError(RenderingError):
    pass


class BreakingMigrationError(MigrationError):
    """Rembobinage demandé à travers une migration sans `down`."""

    def __init__(self, template_key: str, created_at: datetime, path: Optional[str] = None):
        self.template_key = template_key
        self.created_at = created_at
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Migration for '{self.template_key}' created at {self.created_at.isoformat()} "
            "is a breaking change and cannot be reverted."
        )


class InvalidSchemaVersion(MigrationError, ValueError):
    pass
