from datetime import date
from decimal import Decimal

import pytest

from arbwatch.models.product import (
    CryptoAsset,
    Exchange,
    ExchangeProduct,
    OptionType,
    Product,
    ProductSubscription,
    SettlementAsset,
)


def _btc_call_99000() -> Product:
    return Product(
        underlying=CryptoAsset.BTC,
        settlement=SettlementAsset.USD,
        strike=Decimal("99000"),
        expiration=date(2025, 2, 21),
        option_type=OptionType.CALL,
    )


def test_from_okex_exchange():
    assert Product.from_okex_exchange("BTC-USD-250221-99000-C") == _btc_call_99000()


def test_from_deribit_exchange():
    assert Product.from_deribit_exchange("BTC-21FEB25-99000-C") == _btc_call_99000()


def test_both_exchanges_name_the_same_product():
    okex = Product.from_okex_exchange("ETH-USD-250221-3000-P")
    deribit = Product.from_deribit_exchange("ETH-21FEB25-3000-P")
    assert okex == deribit
    assert okex.option_type is OptionType.PUT
    assert okex.underlying is CryptoAsset.ETH


@pytest.mark.parametrize(
    "instrument",
    ["BTC-USD-250221-99000", "SOL-USD-250221-99000-C", "BTC-EUR-250221-99000-C", "BTC-USD-250221-99000-X"],
)
def test_okex_rejects_unknown_instruments(instrument):
    assert Product.from_okex_exchange(instrument) is None


@pytest.mark.parametrize(
    "instrument",
    ["BTC-21FEB25-99000", "SOL-21FEB25-99000-C", "BTC-21FEB25-99000-X"],
)
def test_deribit_rejects_unknown_instruments(instrument):
    assert Product.from_deribit_exchange(instrument) is None


def test_unreadable_strike_becomes_zero():
    product = Product.from_okex_exchange("BTC-USD-250221-abc-C")
    assert product.strike == Decimal(0)


def test_unreadable_expiration_raises():
    with pytest.raises(ValueError):
        Product.from_okex_exchange("BTC-USD-251341-99000-C")
    with pytest.raises(ValueError):
        Product.from_deribit_exchange("BTC-21XYZ25-99000-C")


def test_deribit_month_is_case_insensitive_and_day_may_be_short():
    product = Product.from_deribit_exchange("BTC-1mar25-99000-C")
    assert product.expiration == date(2025, 3, 1)


def test_exchange_product_works_as_key():
    product = _btc_call_99000()
    books = {ExchangeProduct(product, Exchange.OKEX): "okex"}
    assert books[ExchangeProduct(Product.from_okex_exchange("BTC-USD-250221-99000-C"), Exchange.OKEX)] == "okex"
    assert ExchangeProduct(product, Exchange.DERIBIT) not in books


def test_product_subscription_defaults_to_unsubscribed():
    subscription = ProductSubscription("BTC-USD-250221-99000-C")
    assert subscription.subscribed is False
    assert {subscription, ProductSubscription("BTC-USD-250221-99000-C", False)} == {subscription}