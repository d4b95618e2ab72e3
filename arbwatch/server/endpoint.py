"""HTTP server that streams arbitrage opportunities over websockets."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from aiohttp import web

from arbwatch.common.channels import Broadcaster, BroadcastReceiver
from arbwatch.common.context import AppMessage, Context
from arbwatch.common.errors import ArbitrageError, GenericError
from arbwatch.common.worker import Worker
from arbwatch.models.message import InternalMessage
from arbwatch.server.session import WebSocketSession

logger = logging.getLogger(__name__)


class Endpoint(Worker):
    """Serves ``/stream/v1`` on ``websocket_server_endpoint`` (default 9027).

    The server shuts down when the application exit signal arrives.
    """

    def __init__(self, context: Context, broadcaster: Broadcaster[InternalMessage]) -> None:
        self.context = context
        self.broadcaster = broadcaster
        self.port = context.config.get_int("websocket_server_endpoint", 9027)
        self._sockets: set[web.WebSocketResponse] = set()

    def build_app(self) -> web.Application:
        """The web application with the stream and not-found routes."""
        app = web.Application()
        app.router.add_get("/stream/v1", self._stream)
        app.router.add_get("/", self._not_found)
        app.on_shutdown.append(self._close_sockets)
        return app

    def spawn(self) -> asyncio.Task[str]:
        app_signal = self.context.app.subscribe()
        return asyncio.get_running_loop().create_task(self._serve(app_signal))

    async def _serve(self, app_signal: BroadcastReceiver[AppMessage]) -> str:
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, "0.0.0.0", self.port)
            await site.start()
            try:
                await app_signal.recv()
            except GenericError:
                pass
        finally:
            await runner.cleanup()
        return "websocket server exited"

    async def _not_found(self, request: web.Request) -> web.Response:
        return web.json_response("not found", status=404)

    async def _stream(self, request: web.Request) -> web.WebSocketResponse:
        session = WebSocketSession(self.broadcaster.subscribe())
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._sockets.add(ws)
        try:
            await session.serve(ws)
        except (ArbitrageError, aiohttp.ClientError, ConnectionError, RuntimeError) as error:
            logger.error("error serving websocket: %s", error)
        else:
            logger.info("websocket connection closed normally")
        finally:
            self._sockets.discard(ws)
        return ws

    async def _close_sockets(self, app: web.Application) -> None:
        for ws in list(self._sockets):
            await ws.close(code=aiohttp.WSCloseCode.GOING_AWAY, message=b"server shutdown")