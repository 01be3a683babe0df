from __future__ import annotations

from typing import Iterable, Sequence

from .match import DEFAULT_MATCHER, ProductMatcher
from .models import CatalogSnapshot, OptimizationResult, PriceTable, Retailer, RetailerSummary
from .optimize import Strategy, optimize
from .prices import build_price_table


def _retailers(snapshot: CatalogSnapshot | Sequence[Retailer]) -> Sequence[Retailer]:
    if isinstance(snapshot, CatalogSnapshot):
        return snapshot.retailers
    return snapshot


def list_retailers(snapshot: CatalogSnapshot | Sequence[Retailer]) -> list[RetailerSummary]:
    return [RetailerSummary(code=r.code, name=r.name, icon=r.icon) for r in _retailers(snapshot)]


def get_price_table(
    queries: Sequence[str],
    snapshot: CatalogSnapshot | Sequence[Retailer],
    matcher: ProductMatcher = DEFAULT_MATCHER,
) -> PriceTable:
    return build_price_table(_retailers(snapshot), list(queries), matcher=matcher)


def get_optimal_plan(
    queries: Sequence[str],
    snapshot: CatalogSnapshot | Sequence[Retailer],
    max_visits: int,
    candidate_codes: Iterable[str],
    strategy: Strategy | str = Strategy.EXHAUSTIVE,
    matcher: ProductMatcher = DEFAULT_MATCHER,
) -> OptimizationResult:
    """Price ``queries`` everywhere, then pick at most ``max_visits`` of the
    candidate retailers and assign each query to the cheapest of them."""
    table = get_price_table(queries, snapshot, matcher=matcher)
    return optimize(table, candidate_codes, max_visits, strategy)
