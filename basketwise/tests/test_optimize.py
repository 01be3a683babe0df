from itertools import combinations

import pytest

from basketwise.models import PricedItem, Retailer
from basketwise.optimize import (
    NoMatchingRetailersError,
    PriceMatrix,
    Strategy,
    optimize,
    solve_exhaustive,
    solve_greedy,
)

QUERIES = ["melk", "brood", "kaas", "eieren"]


def _table(prices):
    """prices: {code: [price or None, ...]} aligned with QUERIES."""
    table = {}
    for code, row in prices.items():
        items = []
        for query, price in zip(QUERIES, row):
            if price is None:
                items.append(PricedItem(query=query))
            elif isinstance(price, tuple):
                # (price,) marks an estimate
                items.append(PricedItem(query=query, price=price[0], is_estimate=True))
            else:
                items.append(PricedItem(query=query, matched_name=query.title(), price=price))
        table[Retailer(code=code, name=code.upper())] = items
    return table


def _codes(result):
    return [a.retailer.code for a in result.assignments]


def _queries(result):
    return [it.query for a in result.assignments for it in a.items]


PRICES = {
    "ah": [1.0, 2.0, 5.0, None],
    "dirk": [0.9, 2.5, None, 3.0],
    "jumbo": [1.2, 1.5, 4.0, 2.5],
}


def test_unknown_candidates_raise():
    with pytest.raises(NoMatchingRetailersError, match="No matching retailers"):
        optimize(_table(PRICES), ["lidl"], 2)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        optimize(_table(PRICES), ["ah"], 0)
    with pytest.raises(ValueError):
        optimize(_table(PRICES), ["ah"], 1, strategy="random")


def test_matrix_ignores_estimates():
    table = _table({"ah": [1.0, (2.0,), None, 3.0]})
    matrix = PriceMatrix.from_table(table, ["ah"])
    assert matrix.cells == ((1.0,), (None,), (None,), (3.0,))


def test_matrix_keeps_table_order():
    matrix = PriceMatrix.from_table(_table(PRICES), ["jumbo", "ah"])
    assert [r.code for r in matrix.retailers] == ["ah", "jumbo"]


def test_exhaustive_single_visit_prefers_coverage():
    result = optimize(_table(PRICES), ["ah", "dirk", "jumbo"], 1)
    assert _codes(result) == ["jumbo"]
    assert result.total_cost == 9.2


def test_exhaustive_two_visits():
    result = optimize(_table(PRICES), ["ah", "dirk", "jumbo"], 2, Strategy.EXHAUSTIVE)
    # dirk: melk 0.9; jumbo: brood 1.5, kaas 4.0, eieren 2.5
    assert _codes(result) == ["dirk", "jumbo"]
    assert result.total_cost == 8.9
    assert sorted(_queries(result)) == sorted(QUERIES)


def test_exhaustive_uncovered_queries_go_to_first_retailer():
    prices = {"ah": [1.0, None, None, None], "dirk": [None, 2.0, None, None]}
    result = optimize(_table(prices), ["ah", "dirk"], 2)
    assert _codes(result) == ["ah", "dirk"]
    assert [it.query for it in result.assignments[0].items] == ["melk", "kaas", "eieren"]
    assert result.total_cost == 3.0


def test_exhaustive_omits_retailers_without_items():
    prices = {"ah": [1.0, 1.0, 1.0, 1.0], "dirk": [2.0, 2.0, 2.0, 2.0]}
    result = optimize(_table(prices), ["ah", "dirk"], 2)
    assert _codes(result) == ["ah"]
    assert result.total_cost == 4.0


def test_exhaustive_is_optimal():
    prices = {
        "a": [1.0, 9.0, None, 2.0],
        "b": [3.0, 1.0, 4.0, None],
        "c": [None, 2.0, 1.0, 5.0],
        "d": [2.0, None, 2.0, 1.0],
    }
    table = _table(prices)
    matrix = PriceMatrix.from_table(table, prices)
    result = solve_exhaustive(matrix, 2)

    covered = sum(1 for it in _queries_items(result) if it.matched_name)
    best = None
    for k in (1, 2):
        for subset in combinations(range(4), k):
            cov, cost = 0, 0.0
            for row in matrix.cells:
                options = [row[i] for i in subset if row[i] is not None]
                if options:
                    cov += 1
                    cost += min(options)
            if best is None or (cov, -cost) > best:
                best = (cov, -cost)
    assert covered == best[0]
    assert result.total_cost == pytest.approx(-best[1])


def _queries_items(result):
    return [it for a in result.assignments for it in a.items]


def test_greedy_two_visits():
    result = optimize(_table(PRICES), ["ah", "dirk"], 2, Strategy.GREEDY)
    # ah and dirk tie on coverage, ah is listed first; dirk then adds
    # eieren and undercuts ah on melk
    assert _codes(result) == ["ah", "dirk"]
    assert [it.query for it in result.assignments[1].items] == ["melk", "eieren"]
    assert result.total_cost == 10.9


def test_greedy_picks_widest_coverage_first():
    result = optimize(_table(PRICES), ["ah", "dirk", "jumbo"], 2, Strategy.GREEDY)
    assert _codes(result) == ["jumbo"]
    assert result.total_cost == 9.2


def test_greedy_stops_when_everything_is_covered():
    prices = {"ah": [1.0, 1.0, 1.0, 1.0], "dirk": [0.5, 0.5, 0.5, 0.5]}
    matrix = PriceMatrix.from_table(_table(prices), ["ah", "dirk"])
    result = solve_greedy(matrix, 2)
    assert _codes(result) == ["ah"]
    assert result.total_cost == 4.0


def test_greedy_stops_without_positive_value():
    prices = {"ah": [1.0, None, None, None], "dirk": [2.0, None, None, None]}
    result = optimize(_table(prices), ["ah", "dirk"], 2, "greedy")
    assert _codes(result) == ["ah"]
    assert _queries(result) == ["melk"]
    assert result.total_cost == 1.0


def test_greedy_drops_retailer_that_lost_all_items():
    prices = {
        "ah": [2.0, 2.0, None, None],
        "dirk": [1.0, None, 3.0, None],
        "jumbo": [None, 1.0, None, 3.0],
    }
    result = optimize(_table(prices), ["ah", "dirk", "jumbo"], 3, Strategy.GREEDY)
    # ah, dirk and jumbo all add 2 queries; ah is picked first then loses both
    assert _codes(result) == ["dirk", "jumbo"]
    assert result.total_cost == 8.0


@pytest.mark.parametrize("strategy", list(Strategy))
def test_each_query_assigned_once(strategy):
    result = optimize(_table(PRICES), ["ah", "dirk", "jumbo"], 3, strategy)
    queries = _queries(result)
    assert len(queries) == len(set(queries))
    assert len(result.assignments) <= 3


@pytest.mark.parametrize("strategy", list(Strategy))
def test_estimates_never_count(strategy):
    prices = {"ah": [1.0, (0.1,), None, None], "dirk": [(0.1,), 2.0, None, None]}
    result = optimize(_table(prices), ["ah", "dirk"], 2, strategy)
    assert result.total_cost == 3.0


@pytest.mark.parametrize("strategy", list(Strategy))
def test_single_code_string(strategy):
    result = optimize(_table(PRICES), "ah", 2, strategy)
    assert _codes(result) == ["ah"]
    assert result.total_cost == 8.0
    with pytest.raises(NoMatchingRetailersError):
        optimize(_table({"a": [1.0, 1.0, 1.0, 1.0]}), "ah", 1, strategy)
