"""Conversion of exchange messages into internal order book updates."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Iterable, Union

from arbwatch.models.deribit import DeribitOrderBook
from arbwatch.models.deribit import OrderBookEntry as DeribitEntry
from arbwatch.models.okex import OkexAction, OkexMessage
from arbwatch.models.okex import OrderBookEntry as OkexEntry
from arbwatch.models.order_book import ArbitrageOpportunity, Level, OrderBookUpdate
from arbwatch.models.product import Exchange, ExchangeProduct, Product

InternalMessage = Union[OrderBookUpdate, ArbitrageOpportunity]


def _levels(entries: Iterable[DeribitEntry | OkexEntry]) -> list[Level]:
    return [(entry.price, entry.amount) for entry in entries]


def from_deribit_data(data: DeribitOrderBook) -> OrderBookUpdate:
    """The update a Deribit book notification carries.

    Raises ``ValueError`` when the instrument name is not understood.
    """
    product = Product.from_deribit_exchange(data.instrument_name)
    if product is None:
        raise ValueError(f"unknown deribit instrument {data.instrument_name!r}")
    return OrderBookUpdate(
        exchange_product=ExchangeProduct(product=product, exchange=Exchange.DERIBIT),
        bids=_levels(data.bids),
        asks=_levels(data.asks),
    )


def from_okex_message(message: OkexMessage) -> OrderBookUpdate:
    """The update an OKX book push carries.

    A snapshot merges the levels of all its data items; an update uses only
    the first. Raises ``ValueError`` for an update without data or an
    instrument id that is not understood.
    """
    if message.action is OkexAction.SNAPSHOT:
        items = message.data
    else:
        if not message.data:
            raise ValueError("okex update carries no data")
        items = message.data[:1]
    bids = [level for item in items for level in _levels(item.bids)]
    asks = [level for item in items for level in _levels(item.asks)]
    product = Product.from_okex_exchange(message.arg.instance_id)
    if product is None:
        raise ValueError(f"unknown okex instrument {message.arg.instance_id!r}")
    return OrderBookUpdate(
        exchange_product=ExchangeProduct(product=product, exchange=Exchange.OKEX),
        bids=bids,
        asks=asks,
    )


def _decimal(value: Decimal) -> str:
    return format(value, "f")


def _product(product: Product) -> dict[str, dict[str, str]]:
    return {
        "Option": {
            "underlying": product.underlying.value,
            "settlement": product.settlement.value,
            "strike": _decimal(product.strike),
            "expiration": product.expiration.isoformat(),
            "option_type": product.option_type.value,
        }
    }


def serialize_opportunity(opportunity: ArbitrageOpportunity) -> str:
    """The JSON text sent to clients for an arbitrage opportunity."""
    return json.dumps(
        {
            "product": _product(opportunity.product),
            "buy_exchange": opportunity.buy_exchange.value,
            "sell_exchange": opportunity.sell_exchange.value,
            "buy_price": _decimal(opportunity.buy_price),
            "sell_price": _decimal(opportunity.sell_price),
            "size": _decimal(opportunity.size),
        }
    )