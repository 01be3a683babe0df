from __future__ import annotations

import logging
from typing import Any

import requests

from .cache import CatalogCache
from .config import Config
from .http import HttpClient
from .models import CatalogProduct, CatalogSnapshot, Retailer

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _parse_product(row: Any) -> CatalogProduct | None:
    if not isinstance(row, dict):
        return None
    name = row.get("n")
    price = row.get("p")
    if not name or isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    return CatalogProduct(
        name=str(name),
        price=float(price),
        size_text=_optional_str(row.get("s")),
        link_suffix=_optional_str(row.get("l")),
    )


def _parse_retailer(row: Any) -> Retailer | None:
    if not isinstance(row, dict) or not row.get("n"):
        return None

    products: list[CatalogProduct] = []
    skipped = 0
    for raw in row.get("d") or []:
        product = _parse_product(raw)
        if product is None:
            skipped += 1
            continue
        products.append(product)
    if skipped:
        logger.debug("%s: skipped %d product records without name or price", row["n"], skipped)

    return Retailer(
        code=str(row["n"]),
        name=str(row.get("c") or row["n"]),
        icon=_optional_str(row.get("i")),
        link_base=str(row.get("u") or ""),
        catalog=tuple(products),
    )


def parse_snapshot(raw: Any, *, last_modified: str | None = None) -> CatalogSnapshot:
    """Build a snapshot from the short-key ``supermarkets.json`` payload."""
    if not isinstance(raw, list):
        raise RuntimeError(f"Catalog payload must be a list of retailers, got {type(raw).__name__}")

    retailers: list[Retailer] = []
    seen: set[str] = set()
    for row in raw:
        retailer = _parse_retailer(row)
        if retailer is None:
            logger.debug("Skipping retailer record without a code")
            continue
        if retailer.code in seen:
            logger.warning("Duplicate retailer code %r, keeping the first", retailer.code)
            continue
        seen.add(retailer.code)
        retailers.append(retailer)
    return CatalogSnapshot(retailers=tuple(retailers), last_modified=last_modified)


class CatalogClient:
    """Fetches the catalog over HTTP and keeps a time-limited file cache."""

    def __init__(self, config: Config, *, cache: CatalogCache | None = None):
        self.config = config
        self.http = HttpClient(timeout_s=config.http_timeout_s)
        self.cache = cache or CatalogCache(path=config.cache_path, ttl_s=config.cache_ttl_s)

    def load(self, *, refresh: bool = False) -> CatalogSnapshot:
        if not refresh:
            cached = self.cache.read()
            if cached is not None:
                logger.debug("Using cached catalog from %s", self.cache.path)
                return parse_snapshot(cached, last_modified=self.cache.last_modified())

        data, last_modified = self._fetch()
        snapshot = parse_snapshot(data, last_modified=last_modified)
        self.cache.write(data, last_modified)
        return snapshot

    def last_modified(self) -> str | None:
        return self.cache.last_modified()

    def _fetch(self) -> tuple[Any, str | None]:
        url = self.config.catalog_url
        logger.info("Downloading catalog from %s", url)
        try:
            resp = self.http.get(url)
        except requests.RequestException as e:
            raise RuntimeError(f"Catalog download failed for {url}: {e}")
        if not 200 <= resp.status_code < 300:
            raise RuntimeError(f"Catalog download failed with status {resp.status_code} for {url}: {resp.text[:500]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise RuntimeError(f"Failed to decode catalog JSON from {url}: {e}")
        return data, resp.headers.get("Last-Modified")


def prices_last_updated(config: Config) -> str | None:
    """The ``Last-Modified`` header stored with the cached catalog, if any."""
    return CatalogCache(path=config.cache_path, ttl_s=config.cache_ttl_s).last_modified()
