"""Messages of the OKX public websocket interface."""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar, Union

from arbwatch.common.errors import JsonError

E = TypeVar("E", bound=enum.Enum)

_U64 = re.compile(r"\+?\d+")


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


class OkexOperation(enum.Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class OkexEvent(enum.Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    ERROR = "error"


class OkexAction(enum.Enum):
    SNAPSHOT = "snapshot"
    UPDATE = "update"


@dataclass(frozen=True)
class OkexArg:
    """A channel together with the instrument it is about."""

    channel: str
    instance_id: str

    def to_dict(self) -> dict[str, str]:
        return {"channel": self.channel, "instId": self.instance_id}

    @classmethod
    def from_dict(cls, data: Any) -> OkexArg:
        data = _mapping(data, "OkexArg")
        return cls(
            channel=_string(data, "channel", "OkexArg"),
            instance_id=_string(data, "instId", "OkexArg"),
        )


@dataclass
class OkexRequest:
    """A subscribe or unsubscribe operation on several channels."""

    op: OkexOperation
    args: list[OkexArg] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op.value, "args": [arg.to_dict() for arg in self.args]}


@dataclass(frozen=True)
class OkexSubscribeResponse:
    arg: OkexArg


@dataclass(frozen=True)
class OkexError:
    code: str
    message: str


@dataclass
class OkexResponse:
    """The reply to an operation: a confirmation or an error."""

    event: OkexEvent
    connection_id: str
    response_data: Union[OkexSubscribeResponse, OkexError]

    @classmethod
    def from_dict(cls, data: Any) -> OkexResponse:
        data = _mapping(data, "OkexResponse")
        event = _enum(OkexEvent, _field(data, "event", "OkexResponse"), "event")
        connection_id = _string(data, "connId", "OkexResponse")
        response_data: Union[OkexSubscribeResponse, OkexError]
        try:
            response_data = OkexSubscribeResponse(
                OkexArg.from_dict(_field(data, "arg", "OkexResponse"))
            )
        except JsonError:
            try:
                response_data = OkexError(
                    code=_string(data, "code", "OkexResponse"),
                    message=_string(data, "msg", "OkexResponse"),
                )
            except JsonError:
                raise JsonError(
                    "data did not match any variant of OkexResponseData"
                ) from None
        return cls(event=event, connection_id=connection_id, response_data=response_data)


def _string_to_decimal(value: Any) -> Decimal:
    if not isinstance(value, str):
        raise JsonError("invalid type: expected a string")
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise JsonError(f"invalid decimal {value!r}") from None
    if not number.is_finite():
        raise JsonError(f"invalid decimal {value!r}")
    return number


@dataclass(frozen=True)
class OrderBookEntry:
    """One price level: ``[price, amount, ...]`` as strings; extras are ignored."""

    price: Decimal
    amount: Decimal

    @classmethod
    def from_list(cls, values: Any) -> OrderBookEntry:
        if not isinstance(values, (list, tuple)) or len(values) < 2:
            raise JsonError("invalid length, expected an array with four elements")
        if not all(isinstance(extra, str) for extra in values[2:]):
            raise JsonError("invalid type: expected a string")
        return cls(_string_to_decimal(values[0]), _string_to_decimal(values[1]))


def _entries(data: Mapping[str, Any], key: str, where: str) -> list[OrderBookEntry]:
    return [OrderBookEntry.from_list(item) for item in _list(_field(data, key, where), key)]


@dataclass
class OkexData:
    """Book levels of one push, with the timestamp in milliseconds."""

    timestamp: int
    asks: list[OrderBookEntry]
    bids: list[OrderBookEntry]

    @classmethod
    def from_dict(cls, data: Any) -> OkexData:
        data = _mapping(data, "OkexData")
        ts = _string(data, "ts", "OkexData")
        if not _U64.fullmatch(ts) or int(ts) >= 2**64:
            raise JsonError(f"invalid timestamp {ts!r}")
        return cls(
            timestamp=int(ts),
            asks=_entries(data, "asks", "OkexData"),
            bids=_entries(data, "bids", "OkexData"),
        )


@dataclass
class OkexMessage:
    """A snapshot or an incremental update pushed on a channel."""

    action: OkexAction
    arg: OkexArg
    data: list[OkexData]

    @classmethod
    def from_dict(cls, data: Any) -> OkexMessage:
        data = _mapping(data, "OkexMessage")
        return cls(
            action=_enum(OkexAction, _field(data, "action", "OkexMessage"), "action"),
            arg=OkexArg.from_dict(_field(data, "arg", "OkexMessage")),
            data=[
                OkexData.from_dict(item)
                for item in _list(_field(data, "data", "OkexMessage"), "data")
            ],
        )