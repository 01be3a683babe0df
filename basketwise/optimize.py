"""
Basket optimization across retailers.

Both strategies read the same price matrix (queries x candidate retailers,
real prices only) and return an OptimizationResult in which every query is
assigned to at most one retailer:

- exhaustive: try every retailer subset of size 1..max_visits, keep the one
  covering the most queries, then the cheapest.
- greedy: pick retailers one at a time by marginal value (new coverage first,
  then price reductions on already-covered queries).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Callable, Iterable, Sequence

from .models import OptimizationResult, PriceTable, PricedItem, Retailer, RetailerAssignment
from .prices import round_price

logger = logging.getLogger(__name__)

# Greedy marginal value weights: one newly covered query always outweighs
# any realistic price reduction.
GREEDY_COVERAGE_WEIGHT = 1_000_000
GREEDY_SAVINGS_WEIGHT = 100


class Strategy(str, Enum):
    EXHAUSTIVE = "exhaustive"
    GREEDY = "greedy"


class NoMatchingRetailersError(RuntimeError):
    """None of the candidate retailer codes is present in the price table."""


@dataclass(frozen=True)
class PriceMatrix:
    retailers: tuple[Retailer, ...]
    # items[r][q]: the priced row for query q at retailer r
    items: tuple[tuple[PricedItem, ...], ...]
    # cells[q][r]: real price, or None when absent or estimated
    cells: tuple[tuple[float | None, ...], ...]

    @property
    def query_count(self) -> int:
        return len(self.cells)

    @classmethod
    def from_table(cls, table: PriceTable, candidate_codes: Iterable[str]) -> "PriceMatrix":
        wanted = set(candidate_codes)
        retailers = tuple(r for r in table if r.code in wanted)
        if not retailers:
            raise NoMatchingRetailersError(
                f"No matching retailers found for codes: {', '.join(sorted(wanted)) or '(none)'}"
            )
        items = tuple(tuple(table[r]) for r in retailers)
        query_count = len(items[0])
        cells = tuple(
            tuple(_real_price(items[ri][q]) for ri in range(len(retailers)))
            for q in range(query_count)
        )
        return cls(retailers=retailers, items=items, cells=cells)

    def result(self, order: Sequence[int], assignment: Sequence[int | None], cost: float) -> OptimizationResult:
        """Group assigned rows per retailer in ``order``, dropping empty groups."""
        groups: list[RetailerAssignment] = []
        for ri in order:
            rows = tuple(self.items[ri][q] for q, a in enumerate(assignment) if a == ri)
            if rows:
                groups.append(RetailerAssignment(retailer=self.retailers[ri], items=rows))
        return OptimizationResult(total_cost=round_price(cost), assignments=tuple(groups))


def _real_price(item: PricedItem) -> float | None:
    if item.is_estimate or isinstance(item.price, bool) or not isinstance(item.price, (int, float)):
        return None
    return item.price


@dataclass(frozen=True)
class _SubsetPlan:
    subset: tuple[int, ...]
    assignment: tuple[int | None, ...]
    covered: int
    cost: float


def _plan_subset(matrix: PriceMatrix, subset: tuple[int, ...]) -> _SubsetPlan:
    assignment: list[int | None] = []
    covered = 0
    cost = 0.0
    for row in matrix.cells:
        best: int | None = None
        for ri in subset:
            price = row[ri]
            if price is not None and (best is None or price < row[best]):
                best = ri
        if best is None:
            # Uncovered queries still go to the subset's first retailer.
            assignment.append(subset[0])
            continue
        assignment.append(best)
        covered += 1
        cost += row[best]
    return _SubsetPlan(subset=subset, assignment=tuple(assignment), covered=covered, cost=cost)


def solve_exhaustive(matrix: PriceMatrix, max_visits: int) -> OptimizationResult:
    best: _SubsetPlan | None = None
    indices = range(len(matrix.retailers))
    for k in range(1, max_visits + 1):
        for subset in combinations(indices, k):
            plan = _plan_subset(matrix, subset)
            if (
                best is None
                or plan.covered > best.covered
                or (plan.covered == best.covered and plan.cost < best.cost)
            ):
                best = plan

    if best is None:
        return OptimizationResult(total_cost=0)
    logger.debug(
        "exhaustive: chose %s covering %d/%d queries",
        [matrix.retailers[i].code for i in best.subset],
        best.covered,
        matrix.query_count,
    )
    return matrix.result(best.subset, best.assignment, best.cost)


def _marginal_value(matrix: PriceMatrix, ri: int, assignment: Sequence[int | None]) -> float:
    new = 0
    savings = 0.0
    for row, current in zip(matrix.cells, assignment):
        price = row[ri]
        if price is None:
            continue
        if current is None:
            new += 1
        elif price < row[current]:
            savings += row[current] - price
    return GREEDY_COVERAGE_WEIGHT * new + GREEDY_SAVINGS_WEIGHT * savings


def solve_greedy(matrix: PriceMatrix, max_visits: int) -> OptimizationResult:
    assignment: list[int | None] = [None] * matrix.query_count
    selected: list[int] = []

    for _ in range(max_visits):
        if all(a is not None for a in assignment):
            break
        best_ri: int | None = None
        best_value = 0.0
        for ri in range(len(matrix.retailers)):
            if ri in selected:
                continue
            value = _marginal_value(matrix, ri, assignment)
            if value > best_value:
                best_ri, best_value = ri, value
        if best_ri is None:
            break

        selected.append(best_ri)
        for q, row in enumerate(matrix.cells):
            price = row[best_ri]
            current = assignment[q]
            if price is not None and (current is None or price < row[current]):
                assignment[q] = best_ri
        logger.debug("greedy: selected %s (value %.2f)", matrix.retailers[best_ri].code, best_value)

    cost = sum(matrix.cells[q][a] for q, a in enumerate(assignment) if a is not None)
    return matrix.result(selected, assignment, cost)


_STRATEGIES: dict[Strategy, Callable[[PriceMatrix, int], OptimizationResult]] = {
    Strategy.EXHAUSTIVE: solve_exhaustive,
    Strategy.GREEDY: solve_greedy,
}


def optimize(
    table: PriceTable,
    candidate_codes: Iterable[str],
    max_visits: int,
    strategy: Strategy | str = Strategy.EXHAUSTIVE,
) -> OptimizationResult:
    """Assign queries to at most ``max_visits`` of the candidate retailers."""
    try:
        strategy = Strategy(strategy)
    except ValueError:
        raise ValueError(f"Unknown strategy: {strategy}") from None
    if max_visits < 1:
        raise ValueError(f"max_visits must be at least 1, got {max_visits}")

    if isinstance(candidate_codes, str):
        candidate_codes = [candidate_codes]
    matrix = PriceMatrix.from_table(table, candidate_codes)
    return _STRATEGIES[strategy](matrix, max_visits)
