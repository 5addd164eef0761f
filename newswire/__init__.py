"""
Newswire

Multi-source news aggregator core: fetches RSS feeds through rotating
proxies, normalizes and caches them, and derives trending-topic analytics.
"""

__version__ = "1.0.0"
