"""Keeps the order books of every exchange and spots arbitrage between them."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from arbwatch.common.channels import Broadcaster, BroadcastReceiver, MpSc, Receiver
from arbwatch.common.context import AppMessage, Context
from arbwatch.common.errors import ExitRequested, GenericError
from arbwatch.common.worker import Worker
from arbwatch.models.message import InternalMessage
from arbwatch.models.order_book import ArbitrageOpportunity, OrderBook, OrderBookUpdate
from arbwatch.models.product import Exchange, ExchangeProduct, Product

logger = logging.getLogger(__name__)


class OrderBookManager(Worker):
    """Applies book updates from the exchanges and broadcasts opportunities.

    Updates arrive on ``producer``; every opportunity found after an update is
    sent on ``broadcaster``.
    """

    def __init__(
        self,
        context: Context,
        producer: MpSc[InternalMessage],
        broadcaster: Broadcaster[InternalMessage],
    ) -> None:
        self.context = context
        self.order_books: dict[ExchangeProduct, OrderBook] = {}
        self.producer = producer
        self.broadcaster = broadcaster

    def check_arbitrage_opportunities(self, product: Product) -> Optional[ArbitrageOpportunity]:
        """An opportunity between OKX and Deribit for ``product``, if there is one.

        Buying on OKX and selling on Deribit is checked first.
        """
        okex_book = self.order_books.get(ExchangeProduct(product=product, exchange=Exchange.OKEX))
        deribit_book = self.order_books.get(
            ExchangeProduct(product=product, exchange=Exchange.DERIBIT)
        )
        if okex_book is None or deribit_book is None:
            return None

        okex_ask, deribit_bid = okex_book.best_ask(), deribit_book.best_bid()
        if okex_ask is not None and deribit_bid is not None and deribit_bid[0] - okex_ask[0] > 0:
            return ArbitrageOpportunity(
                product=product,
                buy_exchange=Exchange.OKEX,
                sell_exchange=Exchange.DERIBIT,
                buy_price=okex_ask[0],
                sell_price=deribit_bid[0],
                size=min(okex_ask[1], deribit_bid[1]),
            )

        okex_bid, deribit_ask = okex_book.best_bid(), deribit_book.best_ask()
        if okex_bid is not None and deribit_ask is not None and okex_bid[0] - deribit_ask[0] > 0:
            return ArbitrageOpportunity(
                product=product,
                buy_exchange=Exchange.DERIBIT,
                sell_exchange=Exchange.OKEX,
                buy_price=deribit_ask[0],
                sell_price=okex_bid[0],
                size=min(okex_bid[1], deribit_ask[1]),
            )

        return None

    def handle_update(self, update: OrderBookUpdate) -> Optional[ArbitrageOpportunity]:
        """Apply ``update`` and broadcast the opportunity it opens, if any."""
        key = update.exchange_product
        book = self.order_books.get(key)
        if book is None:
            book = self.order_books[key] = OrderBook(key)
        book.update(update)

        opportunity = self.check_arbitrage_opportunities(key.product)
        if opportunity is not None:
            logger.info("arbitrage opportunity: %r", opportunity)
            try:
                self.broadcaster.send(opportunity)
            except GenericError as error:
                logger.error("error sending arbitrage opportunity to broadcaster: %s", error)
        return opportunity

    def spawn(self) -> asyncio.Task[str]:
        receiver = self.producer.receiver()
        if receiver is None:
            raise GenericError("order book manager has no receiver")
        app = self.context.app.subscribe()
        return asyncio.get_running_loop().create_task(self._run(receiver, app))

    def _dispatch(self, message: InternalMessage) -> None:
        if isinstance(message, OrderBookUpdate):
            self.handle_update(message)
        elif isinstance(message, ArbitrageOpportunity):
            logger.warning(
                "received arbitrage opportunity from broadcaster, this should not happen"
            )
        else:
            logger.warning("received unknown internal message: %r", message)

    async def _run(
        self,
        receiver: Receiver[InternalMessage],
        app: BroadcastReceiver[AppMessage],
    ) -> str:
        app_task = asyncio.ensure_future(app.recv())
        recv_task = asyncio.ensure_future(receiver.recv())
        try:
            while True:
                done, _ = await asyncio.wait(
                    {app_task, recv_task}, return_when=asyncio.FIRST_COMPLETED
                )
                if app_task in done:
                    raise ExitRequested()
                message = recv_task.result()
                recv_task = asyncio.ensure_future(receiver.recv())
                self._dispatch(message)
        finally:
            for task in (app_task, recv_task):
                task.cancel()
            await asyncio.gather(app_task, recv_task, return_exceptions=True)