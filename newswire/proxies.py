"""
Proxy Router - Rotate feed requests across public fetch proxies.

Each proxy knows how to wrap a feed URL and how to read its own response
shape. The router round-robins through the pool and tracks recent failures
per proxy: a proxy with too many failures is skipped while a healthier one
is available, but nothing is ever removed from rotation. When every proxy
is failing the router degrades to plain round-robin.
"""

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote

from .models import ParsedResponse
from .parser import JSON_SHAPE, XML_SHAPE, parse_response

DEFAULT_FAILURE_THRESHOLD = 3


@dataclass(frozen=True)
class ProxyConfig:
    """One fetch proxy in the pool."""
    name: str
    url_template: str
    shape: str

    def build_url(self, feed_url: str) -> str:
        return self.url_template.format(url=quote(feed_url, safe=""))

    def parse_response(self, body: str) -> ParsedResponse:
        return parse_response(body, self.shape)


DEFAULT_PROXIES = [
    ProxyConfig(
        name="rss2json",
        url_template="https://api.rss2json.com/v1/api.json?rss_url={url}",
        shape=JSON_SHAPE,
    ),
    ProxyConfig(
        name="allorigins",
        url_template="https://api.allorigins.win/raw?url={url}",
        shape=XML_SHAPE,
    ),
    ProxyConfig(
        name="corsproxy",
        url_template="https://corsproxy.io/?url={url}",
        shape=XML_SHAPE,
    ),
    ProxyConfig(
        name="codetabs",
        url_template="https://api.codetabs.com/v1/proxy?quest={url}",
        shape=XML_SHAPE,
    ),
]


class ProxyRouter:
    """Round-robin proxy selection with soft circuit breaking."""

    def __init__(
        self,
        proxies: Iterable[ProxyConfig] | None = None,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
    ):
        self.proxies = list(proxies if proxies is not None else DEFAULT_PROXIES)
        if not self.proxies:
            raise ValueError("Proxy pool must not be empty")
        names = [p.name for p in self.proxies]
        if len(set(names)) != len(names):
            raise ValueError("Proxy names must be unique")

        self.failure_threshold = failure_threshold
        self._cursor = 0
        self._failures: dict[str, int] = {name: 0 for name in names}

    def __len__(self) -> int:
        return len(self.proxies)

    def is_healthy(self, name: str) -> bool:
        return self._failures.get(name, 0) < self.failure_threshold

    def next_proxy(self, exclude: Iterable[str] = ()) -> ProxyConfig | None:
        """
        Pick the next proxy, starting at the cursor.

        Proxies named in `exclude` are passed over. Unhealthy proxies are
        passed over too, unless no healthy candidate remains, in which case
        the first candidate reached is used. Returns None only when every
        proxy is excluded.
        """
        excluded = set(exclude)
        count = len(self.proxies)
        fallback: int | None = None

        for offset in range(count):
            index = (self._cursor + offset) % count
            proxy = self.proxies[index]
            if proxy.name in excluded:
                continue
            if self.is_healthy(proxy.name):
                self._cursor = (index + 1) % count
                return proxy
            if fallback is None:
                fallback = index

        if fallback is None:
            return None

        self._cursor = (fallback + 1) % count
        return self.proxies[fallback]

    def record_success(self, name: str) -> None:
        self._failures[name] = 0

    def record_failure(self, name: str) -> None:
        self._failures[name] = self._failures.get(name, 0) + 1

    def failures(self, name: str) -> int:
        return self._failures.get(name, 0)

    def health(self) -> dict[str, int]:
        """Current failure count per proxy, in pool order."""
        return {p.name: self._failures.get(p.name, 0) for p in self.proxies}

    def reset(self) -> None:
        """Forget all failures and restart the rotation."""
        self._failures = {p.name: 0 for p in self.proxies}
        self._cursor = 0
