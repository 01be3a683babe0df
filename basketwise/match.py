from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Protocol, Sequence

from .models import CatalogProduct
from .units import DEFAULT_NORMALIZER, UnitNormalizer

# Leading "x " marks a line as already bought; it is not part of the search.
_PURCHASED_MARKER_RE = re.compile(r"^x\s+", re.IGNORECASE)
_WS_RE = re.compile(r"\s")

# Overlap differences below this are treated as a tie and decided on price.
TIE_THRESHOLD = 3


@dataclass(frozen=True)
class SearchTerms:
    text: str
    amount: str | None = None


@dataclass(frozen=True)
class Scored:
    product: CatalogProduct
    overlap: int


def strip_purchased_marker(query: str) -> str:
    return _PURCHASED_MARKER_RE.sub("", query.strip(), count=1)


def parse_query(query: str, normalizer: UnitNormalizer = DEFAULT_NORMALIZER) -> SearchTerms:
    text = strip_purchased_marker(query)
    amount = normalizer.extract_amount_token(text)
    if amount:
        text = text.replace(amount, "", 1)
    return SearchTerms(text=text.strip(), amount=amount)


class MatchStage(Protocol):
    name: str

    def patterns(self, text: str) -> list[re.Pattern]: ...


class TokenStage:
    """Every whitespace-separated token must occur in the product name."""

    name = "tokens"

    def patterns(self, text: str) -> list[re.Pattern]:
        tokens = [t for t in _WS_RE.split(text) if t]
        return [re.compile(re.escape(_WS_RE.sub("", t)), re.IGNORECASE) for t in tokens]


class SubsequenceStage:
    """The query's characters must occur in order, with anything in between."""

    name = "subsequence"

    def patterns(self, text: str) -> list[re.Pattern]:
        chars = _WS_RE.sub("", text)
        return [re.compile(".*".join(re.escape(c) for c in chars), re.IGNORECASE)]


DEFAULT_STAGES: tuple[MatchStage, ...] = (TokenStage(), SubsequenceStage())


def overlap_length(name: str, patterns: Sequence[re.Pattern]) -> int:
    total = 0
    for pattern in patterns:
        m = pattern.search(name)
        if m:
            total += len(m.group(0))
    return total


def compare_overlap_then_price(a: Scored, b: Scored) -> int:
    """Near-equal overlaps go to the cheaper product; otherwise the smaller
    overlap ranks first."""
    if abs(a.overlap - b.overlap) < TIE_THRESHOLD:
        return (a.product.price > b.product.price) - (a.product.price < b.product.price)
    return a.overlap - b.overlap


class ProductMatcher:
    def __init__(
        self,
        *,
        normalizer: UnitNormalizer = DEFAULT_NORMALIZER,
        stages: Sequence[MatchStage] = DEFAULT_STAGES,
        comparator: Callable[[Scored, Scored], int] = compare_overlap_then_price,
        scoring: MatchStage = TokenStage(),
    ):
        self.normalizer = normalizer
        self.stages = tuple(stages)
        self.comparator = comparator
        # Overlap is always measured with these, whichever stage filtered.
        self.scoring = scoring

    def rank_matches(
        self, catalog: Sequence[CatalogProduct], query: str
    ) -> list[CatalogProduct]:
        """Return matching products for ``query``, best first."""
        terms = parse_query(query, self.normalizer)

        candidates: list[CatalogProduct] = []
        for stage in self.stages:
            patterns = stage.patterns(terms.text)
            candidates = [p for p in catalog if all(pat.search(p.name) for pat in patterns)]
            if candidates:
                break

        if terms.amount:
            candidates = [
                p for p in candidates
                if self.normalizer.meets_minimum(p.size_text, terms.amount)
            ]

        patterns = self.scoring.patterns(terms.text)
        scored = [Scored(product=p, overlap=overlap_length(p.name, patterns)) for p in candidates]
        scored.sort(key=cmp_to_key(self.comparator))
        return [s.product for s in scored]

    def match(self, catalog: Sequence[CatalogProduct], query: str) -> CatalogProduct | None:
        ranked = self.rank_matches(catalog, query)
        return ranked[0] if ranked else None


DEFAULT_MATCHER = ProductMatcher()
