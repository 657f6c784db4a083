# apps/rendering/components/editbar.py
from __future__ import annotations
import uuid
from typing import Optional

from django.utils.html import format_html
from django.utils.safestring import mark_safe

"""
Barres d'édition injectées autour des composants en mode édition.
Hors mode édition, toutes ces fonctions renvoient une chaîne vide.
Les handlers JS (window.dgEditing.*) sont fournis par l'interface d'édition.
"""


def _bar_id() -> str:
    return f"bar-{uuid.uuid4().hex[:10]}"


def _classes(base: str, extra: Optional[str], *flags: Optional[str]) -> str:
    parts = [base]
    if extra:
        parts.append(extra.strip())
    parts.extend(f for f in flags if f)
    return " ".join(p for p in parts if p)


def edit_bar(
    path: str,
    *,
    label: str,
    edit_mode: bool = False,
    extra_class: Optional[str] = None,
    inherited_from: Optional[str] = None,
    disable_delete: bool = False,
    disable_drop: bool = False,
    hide_edit: bool = False,
) -> str:
    if not edit_mode:
        return ""
    bar_id = _bar_id()
    if inherited_from:
        # Un composant hérité ne s'édite que sur sa page d'origine
        return format_html(
            '<div class="{}" data-path="{}" data-inherited-from="{}">'
            '<span id="{}" class="dg-edit-bar-label">{}</span></div>',
            _classes("dg-edit-bar", extra_class, "dg-edit-bar-inherited"),
            path,
            inherited_from,
            bar_id,
            label,
        )
    buttons = []
    if not hide_edit:
        buttons.append(format_html('<button onclick="window.dgEditing.edit(event)" aria-describedby="{}">Edit</button>', bar_id))
    buttons.append(format_html('<button onclick="window.dgEditing.move(event)" aria-describedby="{}">Move</button>', bar_id))
    if not disable_delete:
        buttons.append(format_html('<button onclick="window.dgEditing.del(event)" aria-describedby="{}">Trash</button>', bar_id))
    return format_html(
        '<div class="{}" data-path="{}" data-drop="{}" draggable="true" '
        'ondragstart="window.dgEditing.drag(event)" ondragover="window.dgEditing.over(event)" '
        'ondragend="window.dgEditing.drop(event)">'
        '<span id="{}" class="dg-edit-bar-label">{}</span>{}</div>',
        _classes("dg-edit-bar", extra_class),
        path,
        "false" if disable_drop else "true",
        bar_id,
        label,
        mark_safe("".join(str(b) for b in buttons)),
    )


def new_bar(
    path: str,
    *,
    label: str,
    edit_mode: bool = False,
    extra_class: Optional[str] = None,
    disabled: bool = False,
) -> str:
    if not edit_mode:
        return ""
    if disabled:
        return format_html(
            '<div role="button" aria-disabled="true" class="{}" data-path="{}">{}</div>',
            _classes("dg-new-bar", extra_class, "disabled"),
            path,
            label,
        )
    return format_html(
        '<div role="button" onclick="window.dgEditing.create(event)" class="{}" data-path="{}">{}</div>',
        _classes("dg-new-bar", extra_class),
        path,
        label,
    )
