from __future__ import annotations

import logging
import math
from typing import Any, Sequence

from .match import DEFAULT_MATCHER, ProductMatcher
from .models import CatalogProduct, PriceTable, PricedItem, Retailer

logger = logging.getLogger(__name__)


def round_price(price: Any) -> Any:
    """Round to the cent, halves up. Anything that is not a finite number
    is returned unchanged."""
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return price
    if not math.isfinite(price):
        return price
    return math.floor(price * 100 + 0.5) / 100


def _found_item(retailer: Retailer, query: str, product: CatalogProduct) -> PricedItem:
    link = retailer.link_base + product.link_suffix if product.link_suffix else None
    return PricedItem(
        query=query,
        matched_name=product.name,
        link=link,
        price=round_price(product.price),
        size_text=product.size_text,
        is_estimate=False,
    )


def _estimated_item(query: str, others: Sequence[CatalogProduct]) -> PricedItem:
    if not others:
        return PricedItem(query=query)
    mean = sum(p.price for p in others) / len(others)
    return PricedItem(query=query, price=round_price(mean), is_estimate=True)


def build_price_table(
    retailers: Sequence[Retailer],
    queries: Sequence[str],
    matcher: ProductMatcher = DEFAULT_MATCHER,
) -> PriceTable:
    """Price every query at every retailer.

    A retailer without a match gets the mean of the real prices found at the
    other retailers, flagged as an estimate.
    """
    # matches[q][r]: computed once, shared by every retailer's estimate.
    matches = [[matcher.match(r.catalog, q) for r in retailers] for q in queries]

    table: PriceTable = {}
    for ri, retailer in enumerate(retailers):
        items: list[PricedItem] = []
        for qi, query in enumerate(queries):
            found = matches[qi][ri]
            if found is not None:
                items.append(_found_item(retailer, query, found))
                continue
            others = [m for i, m in enumerate(matches[qi]) if i != ri and m is not None]
            items.append(_estimated_item(query, others))
        table[retailer] = items
        logger.debug(
            "%s: %d/%d queries matched",
            retailer.code,
            sum(1 for it in items if it.matched_name is not None),
            len(items),
        )
    return table
