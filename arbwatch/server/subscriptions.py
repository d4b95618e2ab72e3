"""Parsing of configured subscription lists."""

from __future__ import annotations

from arbwatch.models.product import ProductSubscription


def products_to_subscribe(products: str) -> set[ProductSubscription]:
    """One unsubscribed entry per comma-separated item of ``products``."""
    return {ProductSubscription(product_id=item, subscribed=False) for item in products.split(",")}