# apps/rendering/schema/migration.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

ComponentData = Dict[str, Any]
MigrationResult = Union[ComponentData, Awaitable[ComponentData]]
MigrationFn = Callable[[ComponentData, "MigrationExtras"], MigrationResult]
QueryFn = Callable[..., Awaitable[Any]]


@dataclass
class MigrationExtras:
    """
    Informations passées à `up`/`down` en plus des données du composant:
    la page complète en cours de migration, le chemin du composant dans la page,
    et éventuellement une fonction `query` fournie par l'appelant.
    """

    page: Mapping[str, Any]
    path: str
    query: Optional[QueryFn] = None


@dataclass(frozen=True)
class Migration:
    """
    Transformation datée d'un template. `up` fait passer les données de l'ancien
    schéma au nouveau, `down` fait l'inverse. Sans `down`, la migration est un
    changement cassant: revenir avant `created_at` lève BreakingMigrationError.

    Les migrations s'appliquent de bas en haut: les enfants d'une aire sont déjà
    migrés quand `up`/`down` reçoit leur parent.
    """

    created_at: datetime
    up: MigrationFn
    down: Optional[MigrationFn] = None
    template_key: str = field(default="", compare=False)

    @property
    def breaking(self) -> bool:
        return self.down is None

    def bound_to(self, template_key: str) -> "Migration":
        return Migration(created_at=self.created_at, up=self.up, down=self.down, template_key=template_key)
