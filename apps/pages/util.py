# apps/pages/util.py
from __future__ import annotations
import re
from typing import Tuple

from django.http import HttpRequest

DEFAULT_EXTENSION = "html"
_EXTENSION_RE = re.compile(r"\.(\w{1,12})$")


def parse_path(path: str) -> Tuple[str, str]:
    """
    "/about//team/../contact.rss/" → ("/about/contact", "rss").
    Toujours un slash initial, jamais de slash final (sauf "/"); sans extension → "html".
    """
    segments = []
    for segment in (path or "").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)

    extension = DEFAULT_EXTENSION
    if segments:
        m = _EXTENSION_RE.search(segments[-1])
        if m and m.start() > 0:
            extension = m.group(1).lower()
            segments[-1] = segments[-1][: m.start()]
    return "/" + "/".join(segments), extension


def get_token(request: HttpRequest) -> str:
    """Authorization: Bearer <t>, sinon ?token=, sinon cookie `token`."""
    header = (request.headers.get("Authorization") or "").split(" ", 1)
    if len(header) == 2 and header[0] == "Bearer" and header[1].strip():
        return header[1].strip()
    return request.GET.get("token") or request.COOKIES.get("token") or ""
