"""Crawl engine: frontier, worker pool and page routing."""

from capscrape.engine.crawler import CrawlOrchestrator
from capscrape.engine.router import PageRouter

__all__ = ["CrawlOrchestrator", "PageRouter"]
