# arbwatch

arbwatch is a library for finding arbitrage in BTC and ETH options quoted on
two exchanges, OKX and Deribit. It can:

- parse each exchange's websocket messages
- keep a sorted order book for each exchange and product
- report an opportunity when one venue's best bid is above the other venue's
  best ask
- stream the opportunities as JSON to websocket clients

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## What is in the package

### `arbwatch.common`

**`config`**

`Config` is a key/value store in which keys are not case sensitive. It has two
lookups, `get_string(key, default)` and `get_int(key, default)`. Both raise
`ConfigError` when the key is missing and no default is given.

`create_config(env_path)` loads a dotenv file if one exists at that path.
Values in the file override the environment. It then returns a `Config` of the
whole environment.

**`context`**

`Context` holds three things:

- a name
- a `Config`
- an application-wide `Broadcaster` of `AppMessage` signals

`Context.from_config` takes the name from `app_name` and falls back to
`default`. `Context.exit()` broadcasts `AppMessage.EXIT`.

**`channels`**

- `MpSc` is a bounded queue with many senders and a single receiver.
  `receiver()` hands the receiver out only once.
- `Broadcaster` delivers every message to all of its subscribers. A subscriber
  that falls more than the capacity behind gets a `GenericError` once, and the
  oldest messages are dropped.

**`backoff`**

`Backoff` is an iterator of retry delays in seconds. The defaults are 10
retries, a minimum of 1, a maximum of 20 and a factor of 2.

**`worker`**

- `Worker` is the interface for anything that runs as an asyncio task.
- `Workers` starts a set of workers. When the first one ends, it broadcasts the
  exit signal and gives the others `worker_timeout_millis` to finish. The
  default is 5000.
- `run_app(runner)` sets up logging from `log_level`, which defaults to `info`.
  It then runs a `Runner` on a new event loop, with `worker_threads` executor
  threads. The default is 4.

**`errors`**

`ArbitrageError` is the base of every error the package raises on purpose. Its
subclasses are:

- `JsonError`
- `ArbitrageWarning`
- `UnrecoverableError`
- `ExitRequested`
- `GenericError`
- `ConfigError`

### `arbwatch.models`

**`product`**

`Product` is an option contract, together with the enums `Exchange`,
`OptionType`, `CryptoAsset` and `SettlementAsset`. Two constructors parse
instrument names:

- `Product.from_okex_exchange("BTC-USD-250221-99000-C")`
- `Product.from_deribit_exchange("BTC-21FEB25-99000-C")`

Both return `None` for a name whose shape or asset they do not know. Both raise
`ValueError` when the expiration date cannot be read.

**`order_book`**

`OrderBook` keeps bids and asks sorted by price:

- `best_bid()` and `best_ask()` return a `(price, size)` pair, or `None` when
  that side is empty.
- `update()` applies an `OrderBookUpdate`. A level with size zero is removed.

`ArbitrageOpportunity` describes one buy/sell pair.

**`okex` and `deribit`**

These modules hold dataclasses for each exchange's requests, responses and
book messages. Requests have `to_dict()`. Incoming messages are parsed with
`from_dict()`, which raises `JsonError` on malformed input.

**`message`**

- `from_okex_message` and `from_deribit_data` turn parsed book messages into
  `OrderBookUpdate`s.
- `serialize_opportunity` produces the JSON text sent to clients.

### `arbwatch.server`

**`manager`**

`OrderBookManager` applies updates and checks both directions between OKX and
Deribit. The OKX-buy, Deribit-sell direction is checked first. Each opportunity
it finds is sent on its broadcaster.

`handle_update(update)` does this directly. As a worker, the manager reads
updates from its `MpSc` channel until the exit signal arrives.

**`endpoint`**

`Endpoint` is a worker that serves `ws://<host>:<port>/stream/v1`. The port is
`websocket_server_endpoint` and defaults to 9027. A request to `/` gets a 404
response with the JSON body `"not found"`. The server stops on the exit signal.

**`session`**

`WebSocketSession` sends every broadcast opportunity to one client as a text
message. It ignores what the client sends, except that a close from the client
ends the session.

**`subscriptions`**

`products_to_subscribe("a,b")` turns a comma-separated list into a set of
unsubscribed `ProductSubscription`s.

## Example

```python
import json
from decimal import Decimal

from arbwatch.common.channels import Broadcaster, MpSc
from arbwatch.common.config import Config
from arbwatch.common.context import Context
from arbwatch.models.deribit import DeribitChannelMessage
from arbwatch.models.message import from_deribit_data, serialize_opportunity
from arbwatch.models.order_book import OrderBookUpdate
from arbwatch.models.product import Exchange, ExchangeProduct, Product
from arbwatch.server.manager import OrderBookManager

broadcaster = Broadcaster(100)
opportunities = broadcaster.subscribe()
manager = OrderBookManager(Context.from_config(Config({})), MpSc(100), broadcaster)

product = Product.from_okex_exchange("BTC-USD-250221-99000-C")
manager.handle_update(OrderBookUpdate(
    exchange_product=ExchangeProduct(product=product, exchange=Exchange.OKEX),
    bids=[(Decimal("0.018"), Decimal("5400"))],
    asks=[(Decimal("0.015"), Decimal("1000"))],
))

text = json.dumps({
    "jsonrpc": "2.0",
    "method": "subscription",
    "params": {
        "channel": "book.BTC-21FEB25-99000-C.none.20.100ms",
        "data": {
            "instrument_name": "BTC-21FEB25-99000-C",
            "timestamp": 1717219200,
            "asks": [[0.021, 5400]],
            "bids": [[0.019, 1000]],
        },
    },
})
update = from_deribit_data(DeribitChannelMessage.from_dict(json.loads(text)).params.data)
opportunity = manager.handle_update(update)
print(serialize_opportunity(opportunity))
```

The example prints an opportunity to buy on OKX at 0.015 and sell on Deribit at
0.019, with a size of 1000.

## What the package does not do

The package has no command-line program, and it does not connect to the
exchanges itself. It provides no websocket client, no reconnecting consumer and
no exchange adapter that subscribes to OKX or Deribit.

You receive the exchange messages yourself. Parse them with the `okex` and
`deribit` models, convert them with `arbwatch.models.message`, and pass the
updates to `OrderBookManager`. Either call `handle_update`, or send them on its
`MpSc` channel while it runs as a worker.

To serve clients, run the manager and an `Endpoint` together under `Workers`
inside your own event loop or `Runner`.