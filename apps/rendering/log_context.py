# apps/rendering/log_context.py
from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

# Identifiant de requête courant, posé par RequestIdMiddleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIdFilter(logging.Filter):
    """Ajoute `record.request_id` pour le formatter `verbose`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


def set_request_id(request_id: Optional[str]):
    return request_id_var.set(request_id)


def reset_request_id(token) -> None:
    request_id_var.reset(token)


def get_request_id() -> str:
    return request_id_var.get() or ""
