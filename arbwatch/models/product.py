"""Tradable products and the exchanges they are quoted on."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation


class Exchange(enum.Enum):
    """Exchanges whose order books are watched."""

    OKEX = "Okex"
    DERIBIT = "Deribit"


class OptionType(enum.Enum):
    CALL = "Call"
    PUT = "Put"


class CryptoAsset(enum.Enum):
    BTC = "BTC"
    ETH = "ETH"


class SettlementAsset(enum.Enum):
    USD = "USD"


_UNDERLYINGS = {"BTC": CryptoAsset.BTC, "ETH": CryptoAsset.ETH}
_OPTION_TYPES = {"C": OptionType.CALL, "P": OptionType.PUT}
_MONTHS = {
    name: number
    for number, name in enumerate(
        ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"),
        start=1,
    )
}
_DERIBIT_DATE = re.compile(r"(\d{1,2})([A-Za-z]{3})(\d{2})")


def _parse_strike(text: str) -> Decimal:
    try:
        strike = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    return strike if strike.is_finite() else Decimal(0)


def _two_digit_year(value: int) -> int:
    return 2000 + value if value < 69 else 1900 + value


def _parse_okex_date(text: str) -> date:
    try:
        return datetime.strptime(text, "%y%m%d").date()
    except ValueError:
        raise ValueError(f"invalid expiration date {text!r}") from None


def _parse_deribit_date(text: str) -> date:
    match = _DERIBIT_DATE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid expiration date {text!r}")
    day, month_name, year = match.groups()
    month = _MONTHS.get(month_name.upper())
    if month is None:
        raise ValueError(f"invalid expiration date {text!r}")
    try:
        return date(_two_digit_year(int(year)), month, int(day))
    except ValueError:
        raise ValueError(f"invalid expiration date {text!r}") from None


@dataclass(frozen=True)
class Product:
    """An option contract on a crypto asset."""

    underlying: CryptoAsset
    settlement: SettlementAsset
    strike: Decimal
    expiration: date
    option_type: OptionType

    @classmethod
    def from_okex_exchange(cls, s: str) -> Product | None:
        """Parse an instrument id such as ``BTC-USD-250221-99000-C``.

        Returns ``None`` for an unknown shape or asset; raises ``ValueError``
        for an unreadable expiration date.
        """
        parts = s.split("-")
        if len(parts) != 5:
            return None
        underlying = _UNDERLYINGS.get(parts[0])
        if underlying is None:
            return None
        if parts[1] != "USD":
            return None
        strike = _parse_strike(parts[3])
        expiration = _parse_okex_date(parts[2])
        option_type = _OPTION_TYPES.get(parts[4])
        if option_type is None:
            return None
        return cls(underlying, SettlementAsset.USD, strike, expiration, option_type)

    @classmethod
    def from_deribit_exchange(cls, s: str) -> Product | None:
        """Parse an instrument name such as ``BTC-21FEB25-99000-C``.

        Returns ``None`` for an unknown shape or asset; raises ``ValueError``
        for an unreadable expiration date.
        """
        parts = s.split("-")
        if len(parts) != 4:
            return None
        underlying = _UNDERLYINGS.get(parts[0])
        if underlying is None:
            return None
        strike = _parse_strike(parts[2])
        expiration = _parse_deribit_date(parts[1])
        option_type = _OPTION_TYPES.get(parts[3])
        if option_type is None:
            return None
        return cls(underlying, SettlementAsset.USD, strike, expiration, option_type)


@dataclass(frozen=True)
class ExchangeProduct:
    """A product as quoted on one exchange."""

    product: Product
    exchange: Exchange


@dataclass(frozen=True)
class ProductSubscription:
    """A channel or instrument to subscribe to, and whether that is done."""

    product_id: str
    subscribed: bool = False