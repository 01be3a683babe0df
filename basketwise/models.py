from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BaseUnit(str, Enum):
    GRAM = "gram"
    MILLILITER = "milliliter"


@dataclass(frozen=True)
class UnitEntry:
    # Recognized spelling, matched case-insensitively.
    name: str
    base_unit: BaseUnit
    factor: float


@dataclass(frozen=True)
class Quantity:
    value: float
    base_unit: BaseUnit

    @property
    def magnitude(self) -> int:
        """Integer part of the value, used for minimum-amount checks."""
        return int(self.value)

    def __str__(self) -> str:
        value = int(self.value) if float(self.value).is_integer() else self.value
        return f"{value} {self.base_unit.value}"


@dataclass(frozen=True)
class CatalogProduct:
    name: str
    price: float
    size_text: str | None = None     # e.g. "1 liter", "500 g"
    link_suffix: str | None = None   # appended to Retailer.link_base


@dataclass(frozen=True)
class Retailer:
    """A supermarket chain and its catalog. Identity is the code."""

    code: str
    name: str = field(default="", compare=False)
    icon: str | None = field(default=None, compare=False)
    link_base: str = field(default="", compare=False)
    catalog: tuple[CatalogProduct, ...] = field(default=(), compare=False, repr=False)


@dataclass(frozen=True)
class RetailerSummary:
    code: str
    name: str
    icon: str | None = None


@dataclass(frozen=True)
class PricedItem:
    # The query exactly as supplied, marker and amount included.
    query: str
    matched_name: str | None = None
    link: str | None = None
    price: float | None = None
    size_text: str | None = None
    is_estimate: bool = False


# One list per retailer, index-aligned with the query list.
PriceTable = dict[Retailer, list[PricedItem]]


@dataclass(frozen=True)
class RetailerAssignment:
    retailer: Retailer
    items: tuple[PricedItem, ...]


@dataclass(frozen=True)
class OptimizationResult:
    total_cost: float
    assignments: tuple[RetailerAssignment, ...] = ()


@dataclass(frozen=True)
class CatalogSnapshot:
    retailers: tuple[Retailer, ...]
    last_modified: str | None = None
