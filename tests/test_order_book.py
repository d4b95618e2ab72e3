from datetime import date
from decimal import Decimal

import pytest

from arbwatch.models.order_book import ArbitrageOpportunity, OrderBook, OrderBookUpdate
from arbwatch.models.product import (
    CryptoAsset,
    Exchange,
    ExchangeProduct,
    OptionType,
    Product,
    SettlementAsset,
)


@pytest.fixture
def exchange_product() -> ExchangeProduct:
    product = Product(
        underlying=CryptoAsset.BTC,
        settlement=SettlementAsset.USD,
        strike=Decimal("90000"),
        expiration=date(2025, 2, 21),
        option_type=OptionType.CALL,
    )
    return ExchangeProduct(product, Exchange.OKEX)


def test_empty_book_has_no_best_levels(exchange_product):
    book = OrderBook(exchange_product)
    assert book.best_bid() is None
    assert book.best_ask() is None
    assert book.exchange_product == exchange_product


def test_best_bid_is_highest_and_best_ask_is_lowest(exchange_product):
    book = OrderBook(exchange_product)
    book.update(
        OrderBookUpdate(
            exchange_product,
            bids=[(Decimal("0.018"), Decimal("5400")), (Decimal("0.019"), Decimal("1000"))],
            asks=[(Decimal("0.021"), Decimal("5400")), (Decimal("0.015"), Decimal("1000"))],
        )
    )
    assert book.best_bid() == (Decimal("0.019"), Decimal("1000"))
    assert book.best_ask() == (Decimal("0.015"), Decimal("1000"))


def test_zero_size_removes_level(exchange_product):
    book = OrderBook(exchange_product)
    book.add_bid(Decimal("0.019"), Decimal("1000"))
    book.add_bid(Decimal("0.018"), Decimal("5400"))
    book.add_bid(Decimal("0.019"), Decimal("0"))
    assert book.best_bid() == (Decimal("0.018"), Decimal("5400"))
    assert list(book.bids) == [Decimal("0.018")]


def test_removing_missing_level_is_harmless(exchange_product):
    book = OrderBook(exchange_product)
    book.add_ask(Decimal("0.02"), Decimal("0"))
    assert book.best_ask() is None
    assert len(book.asks) == 0


def test_later_size_replaces_earlier(exchange_product):
    book = OrderBook(exchange_product)
    book.add_ask(Decimal("0.021"), Decimal("5400"))
    book.add_ask(Decimal("0.021"), Decimal("1000"))
    assert book.best_ask() == (Decimal("0.021"), Decimal("1000"))
    assert len(book.asks) == 1


def test_levels_stay_sorted(exchange_product):
    book = OrderBook(exchange_product)
    prices = [Decimal("0.03"), Decimal("0.01"), Decimal("0.02")]
    for price in prices:
        book.add_ask(price, Decimal("1"))
        book.add_bid(price, Decimal("1"))
    assert list(book.asks) == sorted(prices)
    assert list(book.bids) == sorted(prices)


def test_update_removes_then_keeps_other_side(exchange_product):
    book = OrderBook(exchange_product)
    book.update(OrderBookUpdate(exchange_product, bids=[(Decimal("0.018"), Decimal("5400"))], asks=[(Decimal("0.02"), Decimal("7"))]))
    book.update(OrderBookUpdate(exchange_product, bids=[(Decimal("0.018"), Decimal("0"))]))
    assert book.best_bid() is None
    assert book.best_ask() == (Decimal("0.02"), Decimal("7"))


def test_arbitrage_opportunity_compares_by_value(exchange_product):
    first = ArbitrageOpportunity(
        exchange_product.product, Exchange.OKEX, Exchange.DERIBIT,
        Decimal("0.015"), Decimal("0.019"), Decimal("1000"),
    )
    second = ArbitrageOpportunity(
        exchange_product.product, Exchange.OKEX, Exchange.DERIBIT,
        Decimal("0.015"), Decimal("0.019"), Decimal("1000"),
    )
    assert first == second
    assert first.sell_price > first.buy_price