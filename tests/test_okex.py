from decimal import Decimal

import pytest

from arbwatch.common.errors import JsonError
from arbwatch.models.okex import (
    OkexAction,
    OkexArg,
    OkexData,
    OkexError,
    OkexEvent,
    OkexMessage,
    OkexOperation,
    OkexRequest,
    OkexResponse,
    OkexSubscribeResponse,
    OrderBookEntry,
)


def _snapshot() -> dict:
    return {
        "action": "snapshot",
        "arg": {"channel": "books", "instId": "BTC-USDT"},
        "data": [
            {
                "ts": "1234567890",
                "checksum": 1234567890,
                "prevSeqId": None,
                "seqId": 1234567890,
                "asks": [["84000.00000000", "1.00000000", "0", "1.0"], ["83000.00000000", "1.00000000", "0", "1.0"]],
                "bids": [["84000.00000000", "1.00000000", "0", "1.0"], ["83000.00000000", "1.00000000", "0", "1.0"]],
            }
        ],
    }


def test_serialize_subscribe():
    request = OkexRequest(
        op=OkexOperation.SUBSCRIBE,
        args=[OkexArg(channel="books", instance_id="BTC-USDT")],
    )
    assert request.to_dict() == {
        "op": "subscribe",
        "args": [{"channel": "books", "instId": "BTC-USDT"}],
    }


def test_deserialize_subscribe_response():
    response = OkexResponse.from_dict(
        {
            "event": "subscribe",
            "arg": {"channel": "books", "instId": "BTC-USDT"},
            "connId": "1234567890",
        }
    )
    assert response.event is OkexEvent.SUBSCRIBE
    assert isinstance(response.response_data, OkexSubscribeResponse)
    assert response.response_data.arg.channel == "books"
    assert response.response_data.arg.instance_id == "BTC-USDT"
    assert response.connection_id == "1234567890"


def test_deserialize_error():
    response = OkexResponse.from_dict(
        {
            "event": "error",
            "code": "1234567890",
            "msg": "Error message",
            "connId": "1234567890",
        }
    )
    assert response.event is OkexEvent.ERROR
    assert response.response_data == OkexError(code="1234567890", message="Error message")
    assert response.connection_id == "1234567890"


def test_deserialize_snapshot_message():
    message = OkexMessage.from_dict(_snapshot())
    assert message.action is OkexAction.SNAPSHOT
    assert message.arg.channel == "books"
    assert message.arg.instance_id == "BTC-USDT"
    assert len(message.data) == 1
    data = message.data[0]
    assert data.timestamp == 1234567890
    assert len(data.asks) == 2
    assert len(data.bids) == 2
    assert data.asks[0].price == Decimal(84000)
    assert data.asks[0].amount == Decimal(1)
    assert data.asks[1].price == Decimal(83000)
    assert data.asks[1].amount == Decimal(1)
    assert data.bids[0].price == Decimal(84000)
    assert data.bids[0].amount == Decimal(1)
    assert data.bids[1].price == Decimal(83000)


def test_deserialize_update_message():
    message = OkexMessage.from_dict(
        {
            "action": "update",
            "arg": {"channel": "books", "instId": "BTC-USDT"},
            "data": [
                {
                    "ts": "1234567890",
                    "asks": [["84000.00000000", "1.00000000"], ["83000.00000000", "1.00000000"]],
                    "bids": [["84000.00000000", "1.00000000"], ["83000.00000000", "1.00000000"]],
                }
            ],
        }
    )
    assert message.action is OkexAction.UPDATE
    assert message.arg.channel == "books"
    assert message.arg.instance_id == "BTC-USDT"
    assert len(message.data) == 1
    data = message.data[0]
    assert data.timestamp == 1234567890
    assert len(data.asks) == 2
    assert len(data.bids) == 2
    assert data.asks[0].price == Decimal(84000)
    assert data.asks[0].amount == Decimal(1)
    assert data.asks[1].price == Decimal(83000)
    assert data.asks[1].amount == Decimal(1)
    assert data.bids[0].price == Decimal(84000)
    assert data.bids[0].amount == Decimal(1)
    assert data.bids[1].price == Decimal(83000)
    assert data.bids[1].amount == Decimal(1)


def test_arg_round_trip():
    arg = OkexArg(channel="books", instance_id="BTC-USD-250221-99000-C")
    assert OkexArg.from_dict(arg.to_dict()) == arg


@pytest.mark.parametrize("values", [["84000"], [84000, 1], ["abc", "1"], ["84000", "1", 0], "84000"])
def test_malformed_entry_raises(values):
    with pytest.raises(JsonError):
        OrderBookEntry.from_list(values)


@pytest.mark.parametrize("ts", ["abc", "-1", "12.5", 1234567890])
def test_bad_timestamp_raises(ts):
    with pytest.raises(JsonError):
        OkexData.from_dict({"ts": ts, "asks": [], "bids": []})


def test_channel_message_is_not_a_response():
    with pytest.raises(JsonError):
        OkexResponse.from_dict(_snapshot())


def test_response_without_arg_or_error_raises():
    with pytest.raises(JsonError):
        OkexResponse.from_dict({"event": "subscribe", "connId": "1234567890"})


def test_unknown_action_raises():
    message = _snapshot()
    message["action"] = "delete"
    with pytest.raises(JsonError):
        OkexMessage.from_dict(message)