"""Namespace for a websocket client; it holds no modules at present."""