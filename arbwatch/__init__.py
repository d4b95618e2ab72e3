"""Cross-exchange option arbitrage detection and streaming."""

__version__ = "0.1.0"