"""Messages of the Deribit JSON-RPC websocket interface."""

from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, TypeVar

from arbwatch.common.errors import JsonError

E = TypeVar("E", bound=enum.Enum)


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise JsonError(f"invalid type for {where}: expected an object")
    return value


def _field(data: Mapping[str, Any], key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise JsonError(f"missing field `{key}` in {where}") from None


def _string(data: Mapping[str, Any], key: str, where: str) -> str:
    value = _field(data, key, where)
    if not isinstance(value, str):
        raise JsonError(f"invalid type for `{key}` in {where}: expected a string")
    return value


def _list(value: Any, where: str) -> list[Any]:
    if not isinstance(value, list):
        raise JsonError(f"invalid type for {where}: expected an array")
    return value


def _enum(enum_cls: type[E], value: Any, where: str) -> E:
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        raise JsonError(f"unknown variant {value!r} for {where}") from None


def _u64(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 2**64:
        raise JsonError(f"invalid value for {where}: expected an unsigned 64-bit integer")
    return value


class DeribitRequestMethod(enum.Enum):
    PUBLIC_SUBSCRIBE = "public/subscribe"
    PUBLIC_UNSUBSCRIBE = "public/unsubscribe"


@dataclass
class DeribitRequest:
    """A subscribe or unsubscribe request for a list of channels."""

    method: DeribitRequestMethod
    id: str
    jsonrpc: str
    channels: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "id": self.id,
            "jsonrpc": self.jsonrpc,
            "params": {"channels": list(self.channels)},
        }


@dataclass
class DeribitResponse:
    """The reply to a request: the channels it applies to."""

    jsonrpc: str
    id: str
    result: list[str]

    @classmethod
    def from_dict(cls, data: Any) -> DeribitResponse:
        data = _mapping(data, "DeribitResponse")
        result = _list(_field(data, "result", "DeribitResponse"), "result")
        if not all(isinstance(item, str) for item in result):
            raise JsonError("invalid type for `result`: expected strings")
        return cls(
            jsonrpc=_string(data, "jsonrpc", "DeribitResponse"),
            id=_string(data, "id", "DeribitResponse"),
            result=list(result),
        )


class DeribitResponseMethod(enum.Enum):
    SUBSCRIPTION = "subscription"


def _number_to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise JsonError("invalid type: expected a number")
    try:
        number = float(value)
    except OverflowError:
        raise JsonError("Failed to convert f64 to Decimal") from None
    if not math.isfinite(number):
        raise JsonError("Failed to convert f64 to Decimal")
    return Decimal(repr(number))


@dataclass(frozen=True)
class OrderBookEntry:
    """One price level: ``[price, amount]`` as numbers."""

    price: Decimal
    amount: Decimal

    @classmethod
    def from_list(cls, values: Any) -> OrderBookEntry:
        if not isinstance(values, (list, tuple)) or len(values) != 2:
            raise JsonError("invalid length, expected an array with two elements")
        price, amount = values
        return cls(_number_to_decimal(price), _number_to_decimal(amount))


def _entries(data: Mapping[str, Any], key: str, where: str) -> list[OrderBookEntry]:
    return [OrderBookEntry.from_list(item) for item in _list(_field(data, key, where), key)]


@dataclass
class DeribitOrderBook:
    """A book snapshot of one instrument."""

    instrument_name: str
    timestamp: int
    asks: list[OrderBookEntry]
    bids: list[OrderBookEntry]

    @classmethod
    def from_dict(cls, data: Any) -> DeribitOrderBook:
        data = _mapping(data, "DeribitOrderBook")
        return cls(
            instrument_name=_string(data, "instrument_name", "DeribitOrderBook"),
            timestamp=_u64(_field(data, "timestamp", "DeribitOrderBook"), "timestamp"),
            asks=_entries(data, "asks", "DeribitOrderBook"),
            bids=_entries(data, "bids", "DeribitOrderBook"),
        )


@dataclass
class DeribitResponseParams:
    channel: str
    data: DeribitOrderBook


@dataclass
class DeribitChannelMessage:
    """A notification pushed on a subscribed channel."""

    jsonrpc: str
    method: DeribitResponseMethod
    params: DeribitResponseParams

    @classmethod
    def from_dict(cls, data: Any) -> DeribitChannelMessage:
        data = _mapping(data, "DeribitChannelMessage")
        params = _mapping(_field(data, "params", "DeribitChannelMessage"), "params")
        return cls(
            jsonrpc=_string(data, "jsonrpc", "DeribitChannelMessage"),
            method=_enum(
                DeribitResponseMethod,
                _field(data, "method", "DeribitChannelMessage"),
                "method",
            ),
            params=DeribitResponseParams(
                channel=_string(params, "channel", "params"),
                data=DeribitOrderBook.from_dict(_field(params, "data", "params")),
            ),
        )