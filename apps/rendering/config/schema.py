# apps/rendering/config/schema.py
from typing import List, Union, Dict
from pydantic import BaseModel, field_validator


class RegistryConfig(BaseModel):
    """
    Contenu de RENDERING_CONFIG_FILE. Chaque section accepte une liste de dotted paths
    ou un dict {nom descriptif: dotted path}.
    """
    templates: List[str] = []
    providers: List[str] = []

    @field_validator("templates", "providers", mode="before")
    @classmethod
    def _dotted_list(cls, value: Union[None, List[str], Dict[str, str]]):
        if value is None:
            return []
        if isinstance(value, dict):
            value = list(value.values())
        return value

    @field_validator("templates", "providers")
    @classmethod
    def _strip_and_dedupe(cls, value: List[str]) -> List[str]:
        out: List[str] = []
        for i, item in enumerate(value):
            dotted = item.strip()
            if not dotted:
                raise ValueError(f"[{i}]: dotted path vide.")
            if dotted not in out:
                out.append(dotted)
        return out
