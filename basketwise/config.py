from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


ENV_KEYS = [
    "BASKETWISE_CATALOG_URL",
    "BASKETWISE_CACHE_PATH",
    "BASKETWISE_CACHE_TTL_S",
    "BASKETWISE_HTTP_TIMEOUT_S",
    "BASKETWISE_LINK_HOST",
]

DEFAULT_CATALOG_URL = "https://www.checkjebon.nl/data/supermarkets.json"
DEFAULT_LINK_HOST = "www.checkjebon.nl"


@dataclass(frozen=True)
class Config:
    catalog_url: str = DEFAULT_CATALOG_URL
    cache_path: str = "supermarkets.cache.json"
    cache_ttl_s: float = 60 * 60
    http_timeout_s: float = 30.0
    link_host: str = DEFAULT_LINK_HOST

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None) -> "Config":
        env = os.environ if environ is None else environ
        defaults = Config()

        return Config(
            catalog_url=env.get("BASKETWISE_CATALOG_URL", defaults.catalog_url).strip(),
            cache_path=env.get("BASKETWISE_CACHE_PATH", defaults.cache_path),
            cache_ttl_s=_float_setting(env, "BASKETWISE_CACHE_TTL_S", defaults.cache_ttl_s),
            http_timeout_s=_float_setting(env, "BASKETWISE_HTTP_TIMEOUT_S", defaults.http_timeout_s),
            link_host=env.get("BASKETWISE_LINK_HOST", defaults.link_host).strip().rstrip("/"),
        )


def _float_setting(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Setting {key} must be a number, got {raw!r}")
