from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

from .catalog import CatalogClient, prices_last_updated
from .config import ENV_KEYS, Config
from .link import build_shopping_list_link
from .optimize import Strategy
from .planner import get_optimal_plan, get_price_table, list_retailers
from .report import plan_text, plan_to_dict, price_table_text, price_table_to_dict, write_json

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="basketwise")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--refresh", action="store_true", help="Ignore the cached catalog and download it again")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List recognized environment variables")
    sub_config.add_parser("show", help="Print the effective configuration")

    sub.add_parser("retailers", help="List available retailers")

    p_prices = sub.add_parser("prices", help="Price every item at every retailer")
    _add_items_args(p_prices)
    p_prices.add_argument("--json", action="store_true", help="Print JSON instead of a summary")
    p_prices.add_argument("--out", default=None, help="Also write the JSON result to this path")

    p_plan = sub.add_parser("plan", help="Cheapest assignment of the list over a few retailers")
    _add_items_args(p_plan)
    p_plan.add_argument("--stores", required=True, help="Comma-separated retailer codes to choose from")
    p_plan.add_argument("--max-visits", type=int, default=2, help="Maximum number of retailers to visit")
    p_plan.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.EXHAUSTIVE.value,
        help="exhaustive is optimal; greedy is faster for many retailers",
    )
    p_plan.add_argument("--json", action="store_true", help="Print JSON instead of a summary")
    p_plan.add_argument("--out", default=None, help="Also write the JSON result to this path")

    p_link = sub.add_parser("link", help="Print a shareable link for the shopping list")
    _add_items_args(p_link)

    sub.add_parser("updated", help="Show when the cached prices were last updated")

    return p


def _add_items_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("items", nargs="*", help="Shopping list items, e.g. '1 liter halfvolle melk'")
    p.add_argument("--file", default=None, help="Read items from a file, one per line")


def _read_items(args) -> list[str]:
    items = list(args.items)
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
        items.extend(line.strip() for line in text.splitlines() if line.strip())
    return items


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        print(__version__)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    try:
        return _run(args)
    except RuntimeError as exc:
        print(f"ERROR: {exc}")
        return 1


def _run(args) -> int:
    cfg = Config.load_from_env()

    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in ENV_KEYS:
                print(k)
            return 0
        if args.config_cmd == "show":
            print(json.dumps(asdict(cfg), indent=2))
            return 0

    if args.cmd == "link":
        print(build_shopping_list_link(_read_items(args), host=cfg.link_host))
        return 0

    if args.cmd == "updated":
        print(prices_last_updated(cfg) or "unknown")
        return 0

    snapshot = CatalogClient(cfg).load(refresh=args.refresh)

    if args.cmd == "retailers":
        for r in list_retailers(snapshot):
            icon = f"  {r.icon}" if r.icon else ""
            print(f"{r.code}\t{r.name}{icon}")
        return 0

    items = _read_items(args)
    if not items:
        print("No items given.")
        return 1

    if args.cmd == "prices":
        table = get_price_table(items, snapshot)
        data = price_table_to_dict(table)
        print(json.dumps(data, indent=2, ensure_ascii=False) if args.json else price_table_text(table))
        if args.out:
            print(f"\nWrote {write_json(data, args.out)}")
        return 0

    if args.cmd == "plan":
        codes = [c.strip() for c in args.stores.split(",") if c.strip()]
        try:
            result = get_optimal_plan(items, snapshot, args.max_visits, codes, args.strategy)
        except ValueError as exc:
            print(f"ERROR: {exc}")
            return 1
        data = plan_to_dict(result)
        print(json.dumps(data, indent=2, ensure_ascii=False) if args.json else plan_text(result))
        if args.out:
            print(f"\nWrote {write_json(data, args.out)}")
        return 0

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
