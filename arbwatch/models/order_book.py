"""Order books kept per exchange product, and the updates that change them."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sortedcontainers import SortedDict

from arbwatch.models.product import Exchange, ExchangeProduct, Product

Level = tuple[Decimal, Decimal]


@dataclass
class OrderBookUpdate:
    """Price levels to set on one book; a size of zero removes the level."""

    exchange_product: ExchangeProduct
    bids: list[Level] = field(default_factory=list)
    asks: list[Level] = field(default_factory=list)


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """Buying on one exchange and selling on another at a profit."""

    product: Product
    buy_exchange: Exchange
    sell_exchange: Exchange
    buy_price: Decimal
    sell_price: Decimal
    size: Decimal


class OrderBook:
    """Bids and asks of one exchange product, sorted by price."""

    def __init__(self, exchange_product: ExchangeProduct) -> None:
        self.exchange_product = exchange_product
        self.bids: SortedDict = SortedDict()
        self.asks: SortedDict = SortedDict()

    def __repr__(self) -> str:
        return (
            f"OrderBook({self.exchange_product!r}, "
            f"bids={len(self.bids)}, asks={len(self.asks)})"
        )

    def best_bid(self) -> Level | None:
        """Highest bid as ``(price, size)``, or ``None`` when there are none."""
        return self.bids.peekitem(-1) if self.bids else None

    def best_ask(self) -> Level | None:
        """Lowest ask as ``(price, size)``, or ``None`` when there are none."""
        return self.asks.peekitem(0) if self.asks else None

    def add_bid(self, price: Decimal, size: Decimal) -> None:
        if size == 0:
            self.bids.pop(price, None)
        else:
            self.bids[price] = size

    def add_ask(self, price: Decimal, size: Decimal) -> None:
        if size == 0:
            self.asks.pop(price, None)
        else:
            self.asks[price] = size

    def update(self, order_book_update: OrderBookUpdate) -> None:
        """Apply every level of ``order_book_update``, bids first."""
        for price, size in order_book_update.bids:
            self.add_bid(price, size)
        for price, size in order_book_update.asks:
            self.add_ask(price, size)