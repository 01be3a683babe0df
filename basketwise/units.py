from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from .models import BaseUnit, Quantity, UnitEntry


# Order matters: the first spelling that matches wins, so longer spellings
# that share a prefix must be listed explicitly.
UNIT_TABLE: tuple[UnitEntry, ...] = (
    UnitEntry("gram", BaseUnit.GRAM, 1),
    UnitEntry("gr", BaseUnit.GRAM, 1),
    UnitEntry("g", BaseUnit.GRAM, 1),
    UnitEntry("kilogram", BaseUnit.GRAM, 1000),
    UnitEntry("kilo", BaseUnit.GRAM, 1000),
    UnitEntry("kg", BaseUnit.GRAM, 1000),
    UnitEntry("k", BaseUnit.GRAM, 1000),
    UnitEntry("pond", BaseUnit.GRAM, 500),
    UnitEntry("milliliter", BaseUnit.MILLILITER, 1),
    UnitEntry("mililiter", BaseUnit.MILLILITER, 1),
    UnitEntry("ml", BaseUnit.MILLILITER, 1),
    UnitEntry("liter", BaseUnit.MILLILITER, 1000),
    UnitEntry("l", BaseUnit.MILLILITER, 1000),
    UnitEntry("deciliter", BaseUnit.MILLILITER, 100),
    UnitEntry("dl", BaseUnit.MILLILITER, 100),
    UnitEntry("centiliter", BaseUnit.MILLILITER, 10),
    UnitEntry("cl", BaseUnit.MILLILITER, 10),
)

_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_number(text: str) -> float | None:
    """Read the leading decimal number of ``text``.

    The first comma counts as a decimal separator; anything after the
    longest valid prefix is ignored ("1.000.5" reads as 1.0). Numbers too
    large for a float read as None.
    """
    m = _LEADING_NUMBER_RE.match(text.replace(",", ".", 1))
    if not m:
        return None
    value = float(m.group(0))
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class UnitNormalizer:
    """Finds quantity expressions in free text and converts them to base units."""

    table: tuple[UnitEntry, ...] = UNIT_TABLE
    _pattern: re.Pattern = field(init=False, repr=False, compare=False)
    _by_name: dict[str, UnitEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = "|".join(re.escape(e.name) for e in self.table)
        object.__setattr__(
            self, "_pattern", re.compile(r"([\d.,]+)\s?(" + names + ")", re.IGNORECASE)
        )
        by_name: dict[str, UnitEntry] = {}
        for entry in self.table:
            by_name.setdefault(entry.name.lower(), entry)
        object.__setattr__(self, "_by_name", by_name)

    def extract_amount_token(self, text: str | None) -> str | None:
        """Return the first '<number><optional space><unit>' substring, verbatim."""
        if not text:
            return None
        m = self._pattern.search(text)
        return m.group(0) if m else None

    def to_base_quantity(self, token: str | None) -> Quantity | None:
        if not token:
            return None
        m = self._pattern.search(token)
        if not m:
            return None
        entry = self._by_name.get(m.group(2).lower())
        value = parse_number(m.group(1))
        if entry is None or value is None:
            return None
        base = value * entry.factor
        if not math.isfinite(base):
            return None
        return Quantity(value=base, base_unit=entry.base_unit)

    def meets_minimum(self, candidate_token: str | None, required_token: str | None) -> bool:
        """True iff both normalize to the same base unit and the candidate's
        integer magnitude is at least the required one."""
        candidate = self.to_base_quantity(candidate_token)
        required = self.to_base_quantity(required_token)
        if candidate is None or required is None:
            return False
        return (
            candidate.base_unit == required.base_unit
            and candidate.magnitude >= required.magnitude
        )


DEFAULT_NORMALIZER = UnitNormalizer()


def extract_amount_token(text: str | None) -> str | None:
    return DEFAULT_NORMALIZER.extract_amount_token(text)


def to_base_quantity(token: str | None) -> Quantity | None:
    return DEFAULT_NORMALIZER.to_base_quantity(token)


def meets_minimum(candidate_token: str | None, required_token: str | None) -> bool:
    return DEFAULT_NORMALIZER.meets_minimum(candidate_token, required_token)
