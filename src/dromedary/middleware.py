"""ASGI middleware for the HTTP server."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

from dromedary import __version__

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class PoweredByMiddleware:
    """Pure ASGI middleware adding an ``X-Powered-By`` header to HTTP responses.

    Implemented as pure ASGI (not BaseHTTPMiddleware) so response bodies pass
    through unbuffered.
    """

    def __init__(self, app: ASGIApp, *, value: str = f"Dromedary/{__version__}") -> None:
        self.app = app
        self.value = value

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append("X-Powered-By", self.value)
            await send(message)

        await self.app(scope, receive, send_with_header)
