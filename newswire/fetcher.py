"""
Source Fetcher - Fetch one feed source through the proxy pool.

Handles:
- Proxy fallback: each proxy in the pool is tried at most once per fetch
- A separate timeout for every proxy attempt
- Parsing and normalization of the proxy response
- Per-source status and error reporting

A source that cannot be fetched ends up with an error entry; exceptions
never leave this module.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable

import aiohttp

from .models import Article, FeedStatus, SourceDescriptor, SourceResult
from .normalizer import normalize_items
from .proxies import ProxyConfig, ProxyRouter
from .url_validator import SSRFError, validate_source_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
ERROR_MESSAGE_MAX_LENGTH = 50


@dataclass
class HttpResponse:
    """Status and decoded body of one proxy request."""
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


HttpGet = Callable[[str], Awaitable[HttpResponse]]


class ProxyAttemptError(Exception):
    """Raised when one proxy attempt yields no usable articles."""


class SourceFetcher:
    """Fetches a single source, falling back across proxies."""

    def __init__(
        self,
        router: ProxyRouter,
        http_get: HttpGet | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        error_max_length: int = ERROR_MESSAGE_MAX_LENGTH,
        user_agent: str | None = None,
    ):
        self.router = router
        self.timeout = timeout
        self.error_max_length = error_max_length
        self.user_agent = user_agent or "newswire/1.0 (+feed aggregator)"
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json, application/rss+xml, application/xml;q=0.9, */*;q=0.8",
        }
        self._http_get = http_get or self._aiohttp_get

    async def _aiohttp_get(self, url: str) -> HttpResponse:
        """Default transport: one short-lived aiohttp session per request."""
        async with aiohttp.ClientSession(headers=self.headers) as session:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                allow_redirects=True
            ) as resp:
                body = await resp.text(errors="replace")
                return HttpResponse(status=resp.status, text=body)

    async def fetch(
        self,
        source: SourceDescriptor,
        status: dict | None = None,
        errors: dict | None = None,
    ) -> SourceResult:
        """
        Fetch a source, trying each proxy in turn.

        Args:
            source: The source to fetch
            status: Optional shared status map, updated as the fetch runs
            errors: Optional shared error map, updated on failure

        Returns:
            SourceResult with the articles from the first proxy that
            produced any, or an error status once every proxy has failed
        """
        status = status if status is not None else {}
        errors = errors if errors is not None else {}
        status[source.id] = FeedStatus.LOADING
        errors.pop(source.id, None)

        try:
            validate_source_url(source.url)
        except SSRFError as e:
            logger.warning(f"{source.name}: rejected feed URL: {e}")
            return self._fail(source, str(e), status, errors)

        tried: set[str] = set()
        last_error = "No proxies available"

        while len(tried) < len(self.router):
            proxy = self.router.next_proxy(exclude=tried)
            if proxy is None:
                break
            tried.add(proxy.name)

            try:
                articles = await self._attempt(proxy, source)
            except Exception as e:
                self.router.record_failure(proxy.name)
                last_error = self._describe(e)
                logger.warning(f"{source.name}: proxy '{proxy.name}' failed: {last_error}")
                continue

            self.router.record_success(proxy.name)
            status[source.id] = FeedStatus.OK
            logger.info(f"{source.name}: {len(articles)} articles via '{proxy.name}'")
            return SourceResult(source_id=source.id, status=FeedStatus.OK, articles=articles)

        logger.warning(f"{source.name}: all proxies exhausted ({last_error})")
        return self._fail(source, last_error, status, errors)

    async def _attempt(self, proxy: ProxyConfig, source: SourceDescriptor) -> list[Article]:
        """One proxy attempt under its own deadline."""
        url = proxy.build_url(source.url)
        response = await asyncio.wait_for(self._http_get(url), timeout=self.timeout)

        if not response.ok:
            raise ProxyAttemptError(f"HTTP {response.status}")

        parsed = proxy.parse_response(response.text)
        if not parsed.ok or not parsed.items:
            raise ProxyAttemptError(parsed.message or "No items returned")

        articles = normalize_items(parsed.items, source, now=datetime.now(timezone.utc))
        if not articles:
            raise ProxyAttemptError("No valid items")
        return articles

    def _describe(self, error: Exception) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return f"Request timeout ({self.timeout:g}s)"
        return str(error) or error.__class__.__name__

    def _fail(
        self,
        source: SourceDescriptor,
        message: str,
        status: dict,
        errors: dict,
    ) -> SourceResult:
        message = message[:self.error_max_length]
        status[source.id] = FeedStatus.ERROR
        errors[source.id] = message
        return SourceResult(
            source_id=source.id,
            status=FeedStatus.ERROR,
            articles=[],
            error=message,
        )
