from __future__ import annotations

from dataclasses import dataclass
import requests


@dataclass(frozen=True)
class HttpClient:
    timeout_s: float = 30.0
    user_agent: str = "basketwise/0.1.0"

    def get(self, url: str) -> requests.Response:
        return requests.get(
            url,
            headers={
                "Accept": "application/json",
                "User-Agent": self.user_agent,
            },
            timeout=self.timeout_s,
        )
