"""Streams arbitrage opportunities to one connected websocket client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from arbwatch.common.channels import BroadcastReceiver
from arbwatch.common.errors import GenericError
from arbwatch.models.message import InternalMessage, serialize_opportunity
from arbwatch.models.order_book import ArbitrageOpportunity

logger = logging.getLogger(__name__)

_CLOSED = {
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
    aiohttp.WSMsgType.ERROR,
}


class WebSocketSession:
    """Sends every broadcast opportunity to a client as JSON text.

    What the client sends is ignored, except that a close ends the session.
    """

    def __init__(self, receiver: BroadcastReceiver[InternalMessage]) -> None:
        self.receiver = receiver

    async def serve(self, ws: Any) -> None:
        """Serve ``ws`` until the client closes or the broadcast lags."""
        logger.info("a new websocket connection established")
        incoming = asyncio.ensure_future(ws.receive())
        outgoing = asyncio.ensure_future(self.receiver.recv())
        try:
            while True:
                done, _ = await asyncio.wait(
                    {incoming, outgoing}, return_when=asyncio.FIRST_COMPLETED
                )
                if incoming in done:
                    if incoming.result().type in _CLOSED:
                        logger.info("websocket connection closed as received close message")
                        return
                    incoming = asyncio.ensure_future(ws.receive())
                if outgoing in done:
                    try:
                        message = outgoing.result()
                    except GenericError as error:
                        logger.error("error receiving message from broadcaster: %s", error)
                        return
                    outgoing = asyncio.ensure_future(self.receiver.recv())
                    if isinstance(message, ArbitrageOpportunity):
                        await ws.send_str(serialize_opportunity(message))
                    else:
                        logger.error(
                            "received unknown message from broadcaster, "
                            "only arbitrage opportunities are supported"
                        )
        finally:
            for task in (incoming, outgoing):
                task.cancel()
            await asyncio.gather(incoming, outgoing, return_exceptions=True)