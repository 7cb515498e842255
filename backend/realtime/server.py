"""Socket.IO binding for the realtime event router.

Frontend convention:
- Socket.IO path: ``/socket.io`` (``Settings.socketio_path``)
- Auth: ``auth: { token }`` with the session JWT, ``?token=`` query as fallback
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qs

import socketio
from socketio import exceptions

from backend.realtime.errors import AuthenticationFailure
from backend.realtime.router import EventRouter
from backend.services.meeting_store import MeetingStore
from backend.services.token_verifier import TokenVerifier

logger = logging.getLogger(__name__)


def extract_token(environ: dict[str, Any] | None, auth: Any | None) -> str | None:
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    scope: Any = environ or {}
    if isinstance(scope, dict) and isinstance(scope.get("asgi.scope"), dict):
        scope = scope["asgi.scope"]

    query_string: str | bytes = ""
    if isinstance(scope, dict):
        query_string = scope.get("query_string") or scope.get("QUERY_STRING") or ""
    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


class RealtimeServer:
    def __init__(
        self,
        store: MeetingStore,
        verifier: TokenVerifier,
        sio: Any | None = None,
        cors_allowed_origins: Any = "*",
    ):
        self.sio = sio or socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=cors_allowed_origins,
            logger=False,
            engineio_logger=False,
        )
        self.router = EventRouter(store, verifier, emit=self.emit)
        self.sio.on("connect", handler=self.on_connect)
        self.sio.on("disconnect", handler=self.on_disconnect)
        for event in self.router.events:
            self.sio.on(event, handler=self._event_handler(event))

    async def emit(self, event: str, payload: dict[str, Any], sid: str) -> None:
        await self.sio.emit(event, payload, to=sid)

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any | None = None) -> None:
        token = extract_token(environ, auth)
        try:
            await self.router.connect(sid, token)
        except AuthenticationFailure as exc:
            raise exceptions.ConnectionRefusedError(exc.message) from exc
        except Exception as exc:
            logger.exception("Socket.IO connect error for %s", sid)
            raise exceptions.ConnectionRefusedError("server_error") from exc

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        await self.router.disconnect(sid)

    def _event_handler(self, event: str):
        async def handler(sid: str, data: Any = None) -> None:
            await self.router.dispatch(sid, event, data)

        handler.__name__ = f"on_{event.replace('-', '_')}"
        return handler

    def asgi_app(self, other_asgi_app: Any = None, socketio_path: str = "socket.io") -> socketio.ASGIApp:
        return socketio.ASGIApp(self.sio, other_asgi_app=other_asgi_app, socketio_path=socketio_path)
