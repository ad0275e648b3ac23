"""Request ID middleware.

Takes the request ID from the X-Request-ID header, or generates one, stores
it in ``request.state.request_id``, binds it to the logging context for the
duration of the request and echoes it in the response headers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
import uuid

from starlette.datastructures import MutableHeaders

from crowdstrike_connector.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class RequestIDMiddleware:
    """Pure ASGI middleware adding a request ID to every HTTP request.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)
    """

    header_name = "x-request-id"

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        header_bytes = headers.get(self.header_name.encode("latin-1"))
        request_id = header_bytes.decode("latin-1") if header_bytes else str(uuid.uuid4())

        scope.setdefault("state", {})["request_id"] = request_id
        set_log_context(request_id=request_id)

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(self.header_name, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            clear_log_context()
