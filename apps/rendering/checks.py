# apps/rendering/checks.py
from __future__ import annotations
from django.core.checks import register, Warning, Error

from .components.registry import get_registry


@register()
def registry_not_empty_check(app_configs, **kwargs):
    # Pas bloquant: simple Warning si aucune page
    reg = get_registry()
    if not reg.pages:
        return [Warning("Aucun template de page enregistré.",
                        hint="Ajoute une sous-classe de Page dans RENDERING_CONFIG_FILE (section templates).",
                        id="rendering.W001")]
    return []


@register()
def template_keys_unique_check(app_configs, **kwargs):
    from django.utils.module_loading import import_string
    from .config.loader import get_registry_spec

    errors = []
    seen = {}
    for dotted in get_registry_spec().get("templates") or []:
        try:
            template = import_string(dotted)
        except ImportError as e:
            errors.append(Warning(
                f"Template non importable: {dotted} ({e})",
                hint="Vérifie le dotted path dans RENDERING_CONFIG_FILE.",
                id="rendering.W002"))
            continue
        key = getattr(template, "template_key", "")
        if key in seen:
            errors.append(Error(
                f"templateKey '{key}' déclaré par {seen[key]} et {dotted}.",
                hint="Chaque template doit avoir une clé unique.",
                id="rendering.E001"))
        else:
            seen[key] = dotted
    return errors


@register()
def migrations_order_check(app_configs, **kwargs):
    """
    Soft-check: les migrations d'un template doivent être déclarées dans l'ordre
    chronologique et sans doublon de date.
    """
    warns = []
    reg = get_registry()
    for template in list(reg.pages.values()) + list(reg.components.values()):
        dates = [m.created_at for m in template.migrations or []]
        if dates != sorted(dates):
            warns.append(Warning(
                f"Migrations de '{template.template_key}' non triées par created_at.",
                hint="Déclare les migrations de la plus ancienne à la plus récente.",
                id="rendering.W010"))
        if len(set(dates)) != len(dates):
            warns.append(Warning(
                f"Migrations de '{template.template_key}' en double (même created_at).",
                hint="Une seule migration par date et par template.",
                id="rendering.W011"))
    return warns
