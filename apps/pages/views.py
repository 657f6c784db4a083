# apps/pages/views.py
from __future__ import annotations
from typing import Any, Mapping, Optional
import logging

from django.http import FileResponse, Http404, HttpRequest, HttpResponse
from django.views.decorators.http import require_safe

from apps.pages.services import prepare_record
from apps.pages.sources import get_page_source
from apps.pages.util import DEFAULT_EXTENSION, get_token, parse_path
from apps.rendering.components.registry import get_registry
from apps.rendering.compose.hydration import hydrate
from apps.rendering.compose.pipeline import render_hydrated
from apps.rendering.errors import BreakingMigrationError, InvalidSchemaVersion, TemplateMissing

log = logging.getLogger("pages.views")

CONTENT_TYPES = {
    "html": "text/html; charset=utf-8",
    "rss": "application/rss+xml; charset=utf-8",
    "xml": "application/xml; charset=utf-8",
    "json": "application/json",
    "ics": "text/calendar; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
}

IMMUTABLE = "max-age=31536000, immutable"


def _plain(message: str, status: int) -> HttpResponse:
    return HttpResponse(message, status=status, content_type="text/plain; charset=utf-8")


async def _render(request: HttpRequest, record: Optional[Mapping[str, Any]], extension: str, *, edit_mode: bool) -> HttpResponse:
    """
    Rend un PageRecord fourni par la source.
    1) migration vers le schéma de l'instance  2) hydratation  3) pipeline trois phases
    """
    if record is None:
        raise Http404("Page not found.")

    registry = get_registry()
    source = get_page_source()
    try:
        record = await prepare_record(record, registry)
    except BreakingMigrationError as e:
        log.warning("Refusing to serve %s: %s", record.get("path"), e)
        return _plain(str(e), 409)
    except InvalidSchemaVersion as e:
        log.error("Page %s has an invalid schema version: %s", record.get("path"), e)
        return _plain("Page data has an invalid schema version.", 500)

    try:
        page = hydrate(record, registry, edit_mode=edit_mode)
    except TemplateMissing as e:
        log.error("Cannot render %s: %s", record.get("path"), e)
        return _plain(str(e), 500)

    output = await render_hydrated(
        page,
        registry,
        extension=extension,
        headers=dict(request.headers),
        query=request.GET.dict(),
        api=source.api,
    )
    if extension != DEFAULT_EXTENSION and not output:
        # aucun template ne sait produire cette variation
        raise Http404(f"No .{extension} variation for this page.")

    response = HttpResponse(output, content_type=CONTENT_TYPES.get(extension, "text/plain; charset=utf-8"))
    for key, value in page.response_headers.items():
        response[key] = value
    return response


@require_safe
async def preview(request: HttpRequest, pagetree_id: str, version: str, path: str) -> HttpResponse:
    """Prévisualisation: pas de barres d'édition, pas d'accès anonyme."""
    token = get_token(request)
    if not token:
        return _plain("Authentication required.", 401)
    page_path, extension = parse_path(path)
    published = True if version == "public" else None
    version_num = None
    if not published:
        try:
            version_num = int(version)
        except ValueError:
            version_num = None
    record = await get_page_source().get_preview_page(
        token, pagetree_id, page_path, published=published, version=version_num
    )
    return await _render(request, record, extension, edit_mode=False)


@require_safe
async def edit(request: HttpRequest, pagetree_id: str, path: str) -> HttpResponse:
    """Rendu pour l'éditeur: barres d'édition, pas d'accès anonyme."""
    token = get_token(request)
    if not token:
        return _plain("Authentication required.", 401)
    page_path, extension = parse_path(path)
    record = await get_page_source().get_preview_page(token, pagetree_id, page_path)
    return await _render(request, record, extension, edit_mode=True)


@require_safe
async def launched(request: HttpRequest, path: str) -> HttpResponse:
    """Pages publiées du site correspondant à l'hôte, accès anonyme."""
    page_path, extension = parse_path(path)
    hostname = request.get_host().split(":")[0]
    record = await get_page_source().get_launched_page(hostname, page_path)
    return await _render(request, record, extension, edit_mode=False)


@require_safe
async def resource(request: HttpRequest, version: str, file: str) -> HttpResponse:
    """
    Blocs CSS/JS et fichiers déclarés par les templates, accès anonyme.
    La version dans l'URL ne sert qu'à casser le cache: tout est immutable.
    """
    registry = get_registry()

    registered = registry.files.get(file)
    if registered is not None:
        try:
            handle = open(registered.path, "rb")
        except OSError as e:
            log.error("Registered file %s cannot be opened: %s", file, e)
            raise Http404("Resource not found.") from e
        response = FileResponse(handle, content_type=registered.mime)
        response["Cache-Control"] = IMMUTABLE
        return response

    name, _, extension = file.partition(".")
    if extension == "css" and name in registry.cssblocks:
        response = HttpResponse(registry.cssblocks[name].content, content_type="text/css; charset=utf-8")
    elif extension == "js" and name in registry.jsblocks:
        response = HttpResponse(registry.jsblocks[name].content, content_type="text/javascript; charset=utf-8")
    else:
        raise Http404("Resource not found.")
    response["Cache-Control"] = IMMUTABLE
    return response
