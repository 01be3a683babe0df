from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .models import OptimizationResult, PriceTable, PricedItem, Retailer


def item_to_dict(item: PricedItem) -> dict[str, Any]:
    return {
        "name": item.matched_name,
        "link": item.link,
        "price": item.price,
        "amount": item.size_text,
        "isEstimate": item.is_estimate,
        "originalQuery": item.query,
    }


def _retailer_header(retailer: Retailer) -> dict[str, Any]:
    return {"code": retailer.code, "name": retailer.name, "icon": retailer.icon}


def _numeric_total(items: Sequence[PricedItem]) -> float:
    return sum(it.price for it in items if isinstance(it.price, (int, float)))


def price_table_to_dict(table: PriceTable) -> list[dict[str, Any]]:
    return [
        {
            **_retailer_header(retailer),
            "totalProducts": len(retailer.catalog),
            "products": [item_to_dict(it) for it in items],
        }
        for retailer, items in table.items()
    ]


def plan_to_dict(result: OptimizationResult) -> dict[str, Any]:
    return {
        "totalCost": result.total_cost,
        "supermarkets": [
            {**_retailer_header(a.retailer), "products": [item_to_dict(it) for it in a.items]}
            for a in result.assignments
        ],
    }


@dataclass(frozen=True)
class _Row:
    label: str
    amount: str
    price: str
    link: str


def _row(item: PricedItem) -> _Row:
    price = f"€{item.price:.2f}" if isinstance(item.price, (int, float)) else ""
    if item.is_estimate:
        price += " (est.)"
    return _Row(
        label=item.query if item.matched_name is None else item.matched_name,
        amount=item.size_text or "",
        price=price,
        link="" if item.is_estimate else (item.link or ""),
    )


def _section(retailer: Retailer, items: Sequence[PricedItem]) -> list[str]:
    icon = f" [{retailer.icon}]" if retailer.icon else ""
    lines = [f"{retailer.name} ({retailer.code}){icon} - €{_numeric_total(items):.2f}"]
    for i, it in enumerate(items, 1):
        r = _row(it)
        lines.append(f"  {i}. {r.label}  {r.amount}  {r.price}".rstrip())
        if r.link:
            lines.append(f"     → {r.link}")
    return lines


def price_table_text(table: PriceTable) -> str:
    lines: list[str] = []
    for retailer, items in table.items():
        lines.extend(_section(retailer, items))
        lines.append("")
    return "\n".join(lines).rstrip()


def plan_text(result: OptimizationResult) -> str:
    lines = [f"Total: €{result.total_cost:.2f}  Stores: {len(result.assignments)}", ""]
    for a in result.assignments:
        lines.extend(_section(a.retailer, a.items))
        lines.append("")
    return "\n".join(lines).rstrip()


def write_json(data: Any, path: str) -> str:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(data, indent=2, ensure_ascii=False))
    return str(out)
