# apps/rendering/middleware/request_id.py
import uuid

from asgiref.sync import iscoroutinefunction, markcoroutinefunction

from apps.rendering.log_context import reset_request_id, set_request_id


class RequestIdMiddleware:
    """
    Pose un identifiant de requête (en-tête X-Request-ID ou uuid4) sur la requête
    et dans le contexte de logging, puis le renvoie dans la réponse.
    Compatible sync et async: les vues de rendu sont des coroutines.
    """

    sync_capable = True
    async_capable = True

    def __init__(self, get_response):
        self.get_response = get_response
        if iscoroutinefunction(self.get_response):
            markcoroutinefunction(self)

    def _start(self, request):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.request_id = rid
        return rid, set_request_id(rid)

    def __call__(self, request):
        if iscoroutinefunction(self):
            return self.__acall__(request)
        rid, token = self._start(request)
        try:
            response = self.get_response(request)
        finally:
            reset_request_id(token)
        response["X-Request-ID"] = rid
        return response

    async def __acall__(self, request):
        rid, token = self._start(request)
        try:
            response = await self.get_response(request)
        finally:
            reset_request_id(token)
        response["X-Request-ID"] = rid
        return response
