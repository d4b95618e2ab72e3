"""Order book manager, websocket endpoint and session, and subscription parsing."""